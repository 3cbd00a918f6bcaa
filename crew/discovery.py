"""Live agent discovery.

Scans every tmux session and window and decides, from captured pane text,
which windows host a running agent. This is the source of truth the
registry commands report on.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from crew.config import ensure_registry_dir
from crew.detection import infer_role, is_agent_output, is_agent_window, last_nonblank
from crew.errors import SessionNotFoundError
from crew.models import AgentRecord
from crew.tmux_manager import TmuxManager, WindowInfo


@dataclass
class LiveAgent:
    """An agent found running in a tmux window."""

    session: str
    window: str
    window_name: str
    role: str
    recent: list[str] = field(default_factory=list)

    @property
    def target(self) -> str:
        return f"{self.session}:{self.window}"

    @property
    def last_line(self) -> str:
        return self.recent[-1] if self.recent else ""


@dataclass
class StatusSummary:
    """Agent counts across all sessions."""

    sessions: dict[str, int] = field(default_factory=dict)
    active: int = 0
    inactive: int = 0


def is_agent_alive(tmux: TmuxManager, session: str, window: str) -> bool:
    """Check that session:window exists and shows assistant output."""
    if not tmux.has_session(session):
        return False
    if not tmux.window_exists(session, window):
        return False
    return is_agent_output(tmux.capture_pane(f"{session}:{window}"))


def iter_windows(tmux: TmuxManager, session: str | None = None) -> Iterator[WindowInfo]:
    sessions = [session] if session else tmux.list_sessions()
    for name in sessions:
        yield from tmux.list_windows(name)


def _inspect(tmux: TmuxManager, window: WindowInfo, context_lines: int) -> LiveAgent | None:
    screen = tmux.capture_pane(window.target)
    if not is_agent_output(screen):
        return None
    return LiveAgent(
        session=window.session_name,
        window=window.index,
        window_name=window.name,
        role=infer_role(window.name),
        recent=last_nonblank(screen, context_lines),
    )


def discover_agents(
    tmux: TmuxManager,
    session: str | None = None,
    context_lines: int = 1,
) -> list[LiveAgent]:
    """
    Find every live agent.

    Args:
        tmux: Tmux manager
        session: Restrict the scan to one session
        context_lines: How many recent non-blank lines to keep per agent
    """
    agents = []
    for window in iter_windows(tmux, session):
        agent = _inspect(tmux, window, context_lines)
        if agent:
            agents.append(agent)
    return agents


def find_by_role(tmux: TmuxManager, value: str) -> list[LiveAgent]:
    """Live agents whose window name contains `value` (case-insensitive)."""
    needle = value.lower()
    return [a for a in discover_agents(tmux) if needle in a.window_name.lower()]


def find_in_session(tmux: TmuxManager, session: str) -> list[LiveAgent]:
    """
    Live agents in one session.

    Raises:
        SessionNotFoundError: If the session does not exist.
    """
    if not tmux.has_session(session):
        raise SessionNotFoundError(session)
    return discover_agents(tmux, session=session)


def summarize_status(tmux: TmuxManager) -> StatusSummary:
    """Count live agents per session.

    Windows named like agents that no longer show assistant output count as
    inactive.
    """
    summary = StatusSummary()
    for window in iter_windows(tmux):
        if is_agent_output(tmux.capture_pane(window.target)):
            summary.active += 1
            summary.sessions[window.session_name] = summary.sessions.get(window.session_name, 0) + 1
        elif is_agent_window(window.name):
            summary.inactive += 1
    return summary


def build_report(tmux: TmuxManager) -> str:
    """Render a markdown status report of every session."""
    lines = [
        "# Agent Status Report",
        f"Generated: {time.strftime('%a %b %d %H:%M:%S %Z %Y')}",
        "",
        "## Active Sessions",
    ]
    sessions = tmux.list_sessions()
    sessions_with_agents = 0

    for session in sessions:
        lines += ["", f"### Session: {session}", ""]
        agents = discover_agents(tmux, session=session, context_lines=3)
        if agents:
            sessions_with_agents += 1
        for agent in agents:
            lines.append(f"- **Window {agent.window}**: {agent.window_name}")
            if agent.recent:
                lines.append("  - Recent activity:")
                lines += [f"    {line}" for line in agent.recent]
        if not agents:
            lines.append("- No active agents")

    lines += [
        "",
        "## Statistics",
        "",
        f"- Total tmux sessions: {len(sessions)}",
        f"- Sessions with agents: {sessions_with_agents}",
    ]
    return "\n".join(lines) + "\n"


def write_report(tmux: TmuxManager, home: str | Path | None = None) -> Path:
    """Write a timestamped report into the registry directory."""
    registry_dir = ensure_registry_dir(home)
    report_file = registry_dir / f"report_{time.strftime('%Y%m%d_%H%M%S')}.md"
    report_file.write_text(build_report(tmux))
    return report_file


def stale_record_check(tmux: TmuxManager) -> Callable[[AgentRecord], bool]:
    """Predicate for registry pruning: the record's agent is gone."""
    return lambda record: not is_agent_alive(tmux, record.session, record.window)
