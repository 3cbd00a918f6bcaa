"""Crew - tmux-driven teams of AI coding assistants."""

__version__ = "0.1.0"
__all__ = ["AgentRecord", "RegistryDocument", "OrchestratorConfig", "TeamSize"]

from crew.models import AgentRecord, OrchestratorConfig, RegistryDocument, TeamSize
