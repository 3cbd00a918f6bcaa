"""Configuration and path management for crew.

All state lives under a "crew home" directory: the agent registry and its
logs, optional role template overrides, and the orchestrator config file.
The home is resolved from an explicit argument, the CREW_HOME environment
variable, or the current working directory, in that order.

Also loads the YAML orchestrator config into validated models.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from crew.errors import ConfigError
from crew.models import OrchestratorConfig

# Per-project folder written by project setup (hidden)
PROJECT_FOLDER_NAME = ".crew"

DEFAULT_CONFIG_NAME = "orchestrator-config.yaml"
ACTIVE_CONFIG_NAME = ".orchestrator-config.yaml"
QUICK_COMMANDS_NAME = "quick-commands.md"

# Environment variables
HOME_ENV_VAR = "CREW_HOME"
CLI_ENV_VAR = "CREW_CLI"
SOCKET_ENV_VAR = "CREW_TMUX_SOCKET"

DEFAULT_CLI_COMMAND = "claude"

# Bundled role templates ship inside the package
PACKAGE_TEMPLATES_DIR = Path(__file__).parent / "data" / "templates"


def resolve_home(home: str | Path | None = None) -> Path:
    """Resolve the crew home from argument, CREW_HOME env var, or CWD."""
    if home is not None:
        return Path(home)
    return Path(os.environ.get(HOME_ENV_VAR) or os.getcwd())


def get_registry_dir(home: str | Path | None = None) -> Path:
    return resolve_home(home) / "agents" / "registry"


def get_registry_file(home: str | Path | None = None) -> Path:
    return get_registry_dir(home) / "agents.json"


def get_log_dir(home: str | Path | None = None) -> Path:
    """Get the health-check logs directory."""
    return get_registry_dir(home) / "logs"


def get_metrics_file(home: str | Path | None = None) -> Path:
    return get_log_dir(home) / "metrics.json"


def get_spawn_log(home: str | Path | None = None) -> Path:
    return get_registry_dir(home) / "spawn.log"


def get_templates_dir(home: str | Path | None = None) -> Path:
    """Directory holding user role templates (overrides bundled ones)."""
    return resolve_home(home) / "agents" / "templates"


def get_default_config_path(home: str | Path | None = None) -> Path:
    return resolve_home(home) / DEFAULT_CONFIG_NAME


def get_project_dir(project_path: str | Path) -> Path:
    """Get the per-project crew folder."""
    return Path(project_path) / PROJECT_FOLDER_NAME


def ensure_registry_dir(home: str | Path | None = None) -> Path:
    """Ensure the registry directory and its logs subdirectory exist."""
    registry_dir = get_registry_dir(home)
    registry_dir.mkdir(parents=True, exist_ok=True)
    (registry_dir / "logs").mkdir(parents=True, exist_ok=True)
    return registry_dir


def get_cli_command() -> str:
    """Assistant CLI launched in each agent window."""
    return os.environ.get(CLI_ENV_VAR) or DEFAULT_CLI_COMMAND


def get_tmux_socket() -> str | None:
    return os.environ.get(SOCKET_ENV_VAR) or None


# =============================================================================
# Orchestrator config
# =============================================================================

DEFAULT_CONFIG_YAML = """\
# Orchestrator Configuration
project:
  name: "AI Development Team"
  type: "auto-detect"
  description: "Multi-agent development orchestration"

orchestrator:
  schedule_interval: 60  # Check-in interval in minutes
  max_concurrent_projects: 3

agents:
  project_manager:
    quality_threshold: "high"  # high, balanced, rapid
    enforce_testing: true
    enforce_documentation: true
    commit_interval: 30  # minutes

  engineers:
    default_count: 2
    max_count: 5
    specializations:
      - frontend
      - backend
      - fullstack
      - devops

  qa_tester:
    test_coverage_minimum: 80
    run_security_scans: true

  code_reviewer:
    auto_review: true
    security_focus: high

  deployment:
    auto_schedule: true
    work_hours: "9-17"  # Local time

monitoring:
  health_check_interval: 15  # minutes
  alert_on_idle: 30  # minutes
  log_retention_days: 30

communication:
  status_report_interval: 240  # minutes (4 hours)
  use_hub_spoke_model: true
  max_message_length: 1000
"""


def write_default_config(path: str | Path) -> Path:
    """Write the default orchestrator config and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_YAML)
    return path


def _drop_empty_sections(data: dict[str, Any]) -> dict[str, Any]:
    # "section:" with nothing under it parses as None
    cleaned = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            value = _drop_empty_sections(value)
        cleaned[key] = value
    return cleaned


def parse_config(text: str, source: str = "<string>") -> OrchestratorConfig:
    """Parse YAML text into an OrchestratorConfig.

    Raises:
        ConfigError: If the text is not valid YAML or fails validation.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {source}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {source} must be a mapping at the top level")

    try:
        return OrchestratorConfig.model_validate(_drop_empty_sections(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid config {source}: {e}") from e


def load_config(path: str | Path) -> OrchestratorConfig:
    """Load an orchestrator config file.

    Raises:
        ConfigError: If the file is missing or malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    return parse_config(path.read_text(), source=str(path))
