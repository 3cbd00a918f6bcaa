"""Pydantic models for crew."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a Z suffix, second precision."""
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def sanitize_session_name(name: str) -> str:
    # tmux reserves '.' and ':' in targets
    return name.replace(".", "-").replace(":", "-")


class Responsiveness(str, Enum):
    """How an agent's recent pane output reads."""

    YES = "yes"
    WAITING = "waiting"
    NO = "no"


class TeamSize(str, Enum):
    """Project team size."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class QualityStandard(str, Enum):
    """Quality standard handed to an orchestrator."""

    HIGH = "high"
    BALANCED = "balanced"
    RAPID = "rapid"


# =============================================================================
# Registry
# =============================================================================

class AgentRecord(BaseModel):
    """One agent entry in the registry file."""

    session: str
    window: str
    role: str
    created_at: str = Field(default_factory=utc_timestamp)
    status: str = "active"

    @property
    def target(self) -> str:
        return f"{self.session}:{self.window}"


class RegistryDocument(BaseModel):
    """The whole agents.json document."""

    agents: list[AgentRecord] = Field(default_factory=list)
    sessions: dict[str, Any] = Field(default_factory=dict)

    def matching(self, session: str, window: str) -> list[AgentRecord]:
        """Records addressed at session:window."""
        return [a for a in self.agents if a.session == session and a.window == window]


# =============================================================================
# Project manifest
# =============================================================================

class ManifestAgent(BaseModel):
    window: int
    status: str = "active"


class ProjectManifest(BaseModel):
    """Written to <project>/.crew/project.json by project setup."""

    project_name: str
    project_path: str
    team_size: TeamSize
    created_at: str = Field(default_factory=utc_timestamp)
    session_name: str
    agents: dict[str, ManifestAgent] = Field(default_factory=dict)


# =============================================================================
# Orchestrator config
# =============================================================================

class _Section(BaseModel):
    model_config = ConfigDict(extra="allow")


class ProjectSection(_Section):
    name: str | None = None
    type: str = "auto-detect"
    description: str = "Multi-agent development orchestration"


class OrchestratorSection(_Section):
    schedule_interval: int = Field(default=60, ge=1, description="Check-in interval in minutes")
    max_concurrent_projects: int = 3


class ProjectManagerSection(_Section):
    quality_threshold: str = "high"
    enforce_testing: bool = True
    enforce_documentation: bool = True
    commit_interval: int = 30


class EngineersSection(_Section):
    default_count: int = 2
    max_count: int = 5
    specializations: list[str] = Field(
        default_factory=lambda: ["frontend", "backend", "fullstack", "devops"]
    )


class QATesterSection(_Section):
    test_coverage_minimum: int = 80
    run_security_scans: bool = True


class CodeReviewerSection(_Section):
    auto_review: bool = True
    security_focus: str = "high"


class DeploymentSection(_Section):
    auto_schedule: bool = True
    work_hours: str = "9-17"


class AgentsSection(_Section):
    project_manager: ProjectManagerSection = Field(default_factory=ProjectManagerSection)
    engineers: EngineersSection = Field(default_factory=EngineersSection)
    qa_tester: QATesterSection = Field(default_factory=QATesterSection)
    code_reviewer: CodeReviewerSection = Field(default_factory=CodeReviewerSection)
    deployment: DeploymentSection = Field(default_factory=DeploymentSection)


class MonitoringSection(_Section):
    health_check_interval: int = 15
    alert_on_idle: int = 30
    log_retention_days: int = 30


class CommunicationSection(_Section):
    status_report_interval: int = 240
    use_hub_spoke_model: bool = True
    max_message_length: int = 1000


class OrchestratorConfig(_Section):
    """Orchestrator configuration as loaded from YAML."""

    project: ProjectSection = Field(default_factory=ProjectSection)
    orchestrator: OrchestratorSection = Field(default_factory=OrchestratorSection)
    agents: AgentsSection = Field(default_factory=AgentsSection)
    monitoring: MonitoringSection = Field(default_factory=MonitoringSection)
    communication: CommunicationSection = Field(default_factory=CommunicationSection)

    @property
    def session_name(self) -> str:
        """tmux session name derived from the project name."""
        name = "".join((self.project.name or "").split())
        name = name.replace("'", "").replace('"', "")
        return sanitize_session_name(name) or "ai-orchestrator"
