"""Orchestrator initialization for crew.

An orchestrator is a standalone agent session that watches every project.
It can be initialized from a YAML config file or from answers collected
interactively by the CLI.
"""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from crew.config import (
    ACTIVE_CONFIG_NAME,
    QUICK_COMMANDS_NAME,
    load_config,
    resolve_home,
)
from crew.errors import SessionExistsError
from crew.models import OrchestratorConfig, QualityStandard, TeamSize
from crew.prompts import file_config_message, interactive_config_message, quick_commands
from crew.spawner import SpawnResult, spawn_agent
from crew.tmux_manager import TmuxManager, deliver_message

logger = logging.getLogger("crew.orchestrator")

DEFAULT_SESSION = "ai-orchestrator"
DEFAULT_SCHEDULE_INTERVAL = 60  # minutes
ORCHESTRATOR_WINDOW = "0"
STARTUP_SETTLE = 5.0  # seconds

QUALITY_CHOICES = {
    "1": QualityStandard.HIGH,
    "2": QualityStandard.BALANCED,
    "3": QualityStandard.RAPID,
}

HEALTH_MONITOR_COMMAND = "crew health --continuous"

# (index, name) of the helper windows an interactive init creates
MANAGEMENT_WINDOWS = [
    ("1", "Health-Monitor"),
    ("2", "Agent-Registry"),
    ("3", "Logs"),
]


@dataclass
class InteractiveOptions:
    """Answers gathered by the interactive setup."""

    session: str = DEFAULT_SESSION
    schedule_interval: int = DEFAULT_SCHEDULE_INTERVAL
    quality: QualityStandard = QualityStandard.HIGH
    team_size: TeamSize = TeamSize.MEDIUM
    replace_existing: bool = False


@dataclass
class OrchestratorInit:
    """Result of an orchestrator initialization."""

    session: str
    spawn: SpawnResult
    config: OrchestratorConfig | None = None
    config_copy: Path | None = None


def quality_from_choice(choice: str) -> QualityStandard:
    """Menu choice to quality standard; anything unknown means high."""
    return QUALITY_CHOICES.get(choice.strip(), QualityStandard.HIGH)


def _spawn_orchestrator(
    tmux: TmuxManager,
    session: str,
    home: Path,
    cli_command: str | None,
) -> SpawnResult:
    result = spawn_agent(
        session,
        ORCHESTRATOR_WINDOW,
        "orchestrator",
        str(home),
        tmux=tmux,
        cli_command=cli_command,
        home=home,
    )
    time.sleep(STARTUP_SETTLE)
    return result


def init_from_config(
    config_file: str | Path,
    *,
    tmux: TmuxManager | None = None,
    home: str | Path | None = None,
    cli_command: str | None = None,
    notify: Callable[[str], None] | None = None,
) -> OrchestratorInit:
    """
    Start an orchestrator configured by a YAML file.

    The session is named after project.name. The config is copied into the
    crew home as the active config and sent to the orchestrator verbatim.

    Raises:
        ConfigError: The file is missing or malformed.
        SessionExistsError: The session already exists.
    """
    tmux = tmux or TmuxManager()
    home = resolve_home(home)
    notify = notify or (lambda message: None)
    config_path = Path(config_file)

    notify(f"Initializing from config: {config_path}")
    config = load_config(config_path)
    session = config.session_name
    logger.info(
        "Config: session=%s interval=%s quality=%s",
        session,
        config.orchestrator.schedule_interval,
        config.agents.project_manager.quality_threshold,
    )

    if tmux.has_session(session):
        raise SessionExistsError(session)
    tmux.new_session(session, start_directory=str(home))

    config_copy = home / ACTIVE_CONFIG_NAME
    if config_path.resolve() != config_copy.resolve():
        shutil.copyfile(config_path, config_copy)

    notify("Starting orchestrator agent...")
    spawn = _spawn_orchestrator(tmux, session, home, cli_command)

    deliver_message(tmux, f"{session}:{ORCHESTRATOR_WINDOW}", file_config_message(config_path.read_text()))
    return OrchestratorInit(session=session, spawn=spawn, config=config, config_copy=config_copy)


def init_interactive(
    options: InteractiveOptions,
    *,
    tmux: TmuxManager | None = None,
    home: str | Path | None = None,
    cli_command: str | None = None,
    notify: Callable[[str], None] | None = None,
) -> OrchestratorInit:
    """
    Start an orchestrator from interactive answers.

    Also creates Health-Monitor (running continuous health checks),
    Agent-Registry and Logs windows.

    Raises:
        SessionExistsError: The session exists and replacing it was declined.
    """
    tmux = tmux or TmuxManager()
    home = resolve_home(home)
    notify = notify or (lambda message: None)
    session = options.session

    if tmux.has_session(session):
        if not options.replace_existing:
            raise SessionExistsError(session)
        logger.info("Killing existing session %s", session)
        tmux.kill_session(session)

    notify("Creating orchestrator session...")
    tmux.new_session(session, start_directory=str(home))

    notify("Starting orchestrator agent...")
    spawn = _spawn_orchestrator(tmux, session, home, cli_command)

    message = interactive_config_message(
        session=session,
        schedule_interval=options.schedule_interval,
        quality=options.quality.value,
        team_size=options.team_size.value,
    )
    deliver_message(tmux, f"{session}:{ORCHESTRATOR_WINDOW}", message)

    notify("Creating management windows...")
    for index, name in MANAGEMENT_WINDOWS:
        tmux.new_window(session, name, index=index, start_directory=str(home))
    tmux.send_keys(f"{session}:{MANAGEMENT_WINDOWS[0][0]}", HEALTH_MONITOR_COMMAND, enter=True)

    return OrchestratorInit(session=session, spawn=spawn)


def write_quick_commands(home: str | Path | None = None, session: str = DEFAULT_SESSION) -> Path:
    """Write the quick command reference into the crew home."""
    path = resolve_home(home) / QUICK_COMMANDS_NAME
    path.write_text(quick_commands(session))
    return path

