"""Spawn a role agent into a tmux window."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path

from crew.config import ensure_registry_dir, get_cli_command, get_spawn_log
from crew.detection import is_ready, tail
from crew.errors import AgentStartTimeout, SessionNotFoundError
from crew.models import AgentRecord
from crew.prompts import role_briefing
from crew.registry import AgentRegistry
from crew.templates import find_template
from crew.tmux_manager import TmuxManager, deliver_message

logger = logging.getLogger("crew.spawner")

READY_ATTEMPTS = 30
READY_INTERVAL = 1.0  # seconds
BRIEFING_SETTLE = 3.0  # seconds
STATUS_LINES = 30


@dataclass
class SpawnResult:
    """Outcome of a successful spawn."""

    session: str
    window: str
    role: str
    project_path: str
    status_lines: list[str] = field(default_factory=list)
    record: AgentRecord | None = None

    @property
    def target(self) -> str:
        return f"{self.session}:{self.window}"


def wait_for_ready(
    tmux: TmuxManager,
    target: str,
    attempts: int = READY_ATTEMPTS,
    interval: float = READY_INTERVAL,
) -> bool:
    """Poll a window until the assistant prints its first reply."""
    for attempt in range(attempts):
        if is_ready(tmux.capture_pane(target)):
            logger.debug("%s ready after %d attempt(s)", target, attempt + 1)
            return True
        time.sleep(interval)
    return False


def record_spawn(log_file: Path, role: str, target: str, project_path: str) -> None:
    """Append a line to the spawn log."""
    stamp = time.strftime("%Y-%m-%d %H:%M:%S")
    try:
        with open(log_file, "a") as f:
            f.write(f"[{stamp}] Spawned {role} agent in {target} at {project_path}\n")
    except OSError as e:
        logger.warning("Could not write spawn log %s: %s", log_file, e)


def spawn_agent(
    session: str,
    window: str,
    role: str,
    project_path: str | None = None,
    *,
    tmux: TmuxManager | None = None,
    cli_command: str | None = None,
    home: str | Path | None = None,
    register: bool = True,
) -> SpawnResult:
    """
    Start an assistant in session:window and brief it for a role.

    Args:
        session: Existing tmux session
        window: Window index (or name); created if missing
        role: Role whose template becomes the briefing
        project_path: Agent working directory (defaults to CWD)
        tmux: Tmux manager to use
        cli_command: Assistant command to launch
        home: Crew home for templates, registry and logs
        register: Record the agent in the registry once it is up

    Raises:
        TemplateNotFoundError: No template exists for the role.
        SessionNotFoundError: The session does not exist.
        AgentStartTimeout: The assistant never became ready.
        TmuxCommandError: tmux did not accept the briefing.
    """
    tmux = tmux or TmuxManager()
    cli_command = cli_command or get_cli_command()
    project_path = os.path.abspath(project_path or os.getcwd())
    window = str(window)

    template_file = find_template(role, home)

    if not tmux.has_session(session):
        raise SessionNotFoundError(session)

    if not tmux.window_exists(session, window):
        logger.info("Window %s does not exist in %s, creating", window, session)
        if window.isdigit():
            tmux.new_window(session, role, index=window, start_directory=project_path)
        else:
            tmux.new_window(session, window, start_directory=project_path)

    target = f"{session}:{window}"
    logger.info("Starting %s in %s", cli_command, target)
    tmux.send_keys(target, cli_command, enter=True)

    if not wait_for_ready(tmux, target):
        raise AgentStartTimeout(
            f"Agent CLI '{cli_command}' did not start properly in {target}",
            hint=f"Inspect the window with: tmux attach-session -t {session}",
        )

    briefing = role_briefing(role, project_path, template_file.read_text())
    deliver_message(tmux, target, briefing)

    # Give the agent time to start on the briefing
    time.sleep(BRIEFING_SETTLE)
    status_lines = tail(tmux.capture_pane(target), STATUS_LINES)

    ensure_registry_dir(home)
    record_spawn(get_spawn_log(home), role, target, project_path)

    record = None
    if register:
        record = AgentRegistry(home=home).add(session, window, role)

    logger.info("Spawned %s agent in %s", role, target)
    return SpawnResult(
        session=session,
        window=window,
        role=role,
        project_path=project_path,
        status_lines=status_lines,
        record=record,
    )
