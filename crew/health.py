"""Agent health checks.

Inspects every agent window's scrollback, classifies it as active, waiting
or inactive, flags agents that work without committing, and scores the
whole fleet. Can run once or refresh continuously while appending a line
per cycle to the metrics log.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from crew.config import ensure_registry_dir, get_metrics_file
from crew.detection import (
    GIT_HISTORY,
    METRICS_HISTORY,
    AgentMetrics,
    GitActivity,
    compute_git_activity,
    compute_metrics,
    health_score,
    is_agent_window,
    score_tier,
)
from crew.errors import SessionNotFoundError
from crew.models import Responsiveness, utc_timestamp
from crew.tmux_manager import TmuxManager

logger = logging.getLogger("crew.health")

DEFAULT_INTERVAL = 30  # seconds
WARNING_ASSISTANT_LINES = 10
SNIPPET_LENGTH = 60

STATUS_DISPLAY = {
    Responsiveness.YES: ("green", "✓ Active"),
    Responsiveness.WAITING: ("yellow", "⏳ Waiting"),
    Responsiveness.NO: ("red", "✗ Inactive"),
}


@dataclass
class AgentHealth:
    """Health of one agent window."""

    window: str
    window_name: str
    metrics: AgentMetrics
    git: GitActivity

    @property
    def status(self) -> Responsiveness:
        return self.metrics.responsiveness

    @property
    def needs_commit_reminder(self) -> bool:
        """Busy and responsive but no git activity in recent history."""
        return (
            self.status == Responsiveness.YES
            and self.git.commands == 0
            and self.metrics.assistant_lines > WARNING_ASSISTANT_LINES
        )


@dataclass
class SessionHealth:
    name: str
    agents: list[AgentHealth] = field(default_factory=list)


@dataclass
class HealthReport:
    """Health of every agent window in the checked sessions."""

    sessions: list[SessionHealth] = field(default_factory=list)
    session_filter: str | None = None
    checked_at: float = field(default_factory=time.time)

    def _agents(self) -> list[AgentHealth]:
        return [a for s in self.sessions for a in s.agents]

    @property
    def total(self) -> int:
        return len(self._agents())

    @property
    def responsive(self) -> int:
        return sum(1 for a in self._agents() if a.status == Responsiveness.YES)

    @property
    def inactive(self) -> int:
        return sum(1 for a in self._agents() if a.status == Responsiveness.NO)

    @property
    def warnings(self) -> int:
        return sum(1 for a in self._agents() if a.needs_commit_reminder)

    @property
    def score(self) -> int | None:
        return health_score(self.responsive, self.total)

    def to_metrics_entry(self) -> dict[str, Any]:
        return {"timestamp": utc_timestamp(), "agents": self.total, "active": self.responsive}


# =============================================================================
# Collection
# =============================================================================

def get_agent_metrics(tmux: TmuxManager, target: str) -> AgentMetrics:
    return compute_metrics(tmux.capture_pane(target, start=-METRICS_HISTORY))


def get_git_activity(tmux: TmuxManager, target: str) -> GitActivity:
    return compute_git_activity(tmux.capture_pane(target, start=-GIT_HISTORY))


def collect_health(tmux: TmuxManager, session: str | None = None) -> HealthReport:
    """
    Check every agent window.

    Args:
        tmux: Tmux manager
        session: Only check this session

    Raises:
        SessionNotFoundError: If `session` is given and does not exist.
    """
    if session:
        if not tmux.has_session(session):
            raise SessionNotFoundError(session)
        session_names = [session]
    else:
        session_names = tmux.list_sessions()

    report = HealthReport(session_filter=session)
    for name in session_names:
        session_health = SessionHealth(name=name)
        for window in tmux.list_windows(name):
            if not is_agent_window(window.name):
                continue
            session_health.agents.append(
                AgentHealth(
                    window=window.index,
                    window_name=window.name,
                    metrics=get_agent_metrics(tmux, window.target),
                    git=get_git_activity(tmux, window.target),
                )
            )
        report.sessions.append(session_health)
    return report


def quick_check(tmux: TmuxManager, target: str) -> bool:
    """Whether the agent at target is responsive."""
    return get_agent_metrics(tmux, target).responsiveness == Responsiveness.YES


def append_metrics(report: HealthReport, metrics_file: Path) -> None:
    """Append one JSON line summarizing a check."""
    metrics_file.parent.mkdir(parents=True, exist_ok=True)
    with open(metrics_file, "a") as f:
        f.write(json.dumps(report.to_metrics_entry()) + "\n")


# =============================================================================
# Rendering
# =============================================================================

def _snippet(text: str) -> str:
    return f"{text[:SNIPPET_LENGTH]}..."


def build_session_table(session: SessionHealth) -> Table:
    table = Table(title=f"Session: {session.name}", title_style="cyan", expand=True)
    table.add_column("Window", style="dim", width=6)
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Interactions")
    table.add_column("Git", justify="right")
    table.add_column("Last")

    for agent in session.agents:
        color, label = STATUS_DISPLAY[agent.status]
        interactions = "-"
        if agent.metrics.total_lines > 0:
            interactions = f"H:{agent.metrics.human_lines} A:{agent.metrics.assistant_lines}"
        git = Text(str(agent.git.commands), style="green" if agent.git.commands else "dim")
        name = Text(agent.window_name)
        if agent.needs_commit_reminder:
            name.append("\n⚠️  No git activity (remember 30-min commits!)", style="yellow")
        table.add_row(
            agent.window,
            name,
            Text(label, style=color),
            interactions,
            git,
            _snippet(agent.metrics.last_activity) if agent.metrics.last_activity else "",
        )

    if not session.agents:
        table.add_row("", Text("No agents found in this session", style="yellow"), "", "", "", "")
    return table


def build_summary(report: HealthReport) -> Text:
    summary = Text()
    summary.append("Active agents: ", style="bold")
    summary.append(f"{report.responsive}/{report.total}\n", style="green")
    if report.inactive:
        summary.append(f"Inactive agents: {report.inactive}\n", style="red")
    if report.warnings:
        summary.append(f"Warnings: {report.warnings}\n", style="yellow")
    score = report.score
    if score is not None:
        summary.append(f"Health Score: {score}%", style=f"{score_tier(score)} bold")
    return summary


def build_recommendations(report: HealthReport) -> Text | None:
    if not report.inactive and not report.warnings:
        return None
    text = Text("Recommendations:\n", style="yellow")
    if report.inactive:
        text.append("  • Check inactive agents and restart if needed\n")
        text.append('  • Use: crew send <session:window> "Status update?"\n')
    if report.warnings:
        text.append("  • Remind agents about 30-minute commit rule\n")
        text.append("  • Check if agents are blocked and need assistance\n")
    return text


def render_health(report: HealthReport) -> Group:
    """Render a health report."""
    checked = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(report.checked_at))
    title = f"Health Check: {report.session_filter or 'All Sessions'}"
    parts: list[Any] = [Text(f"Time: {checked}", style="dim")]
    parts += [build_session_table(s) for s in report.sessions]
    parts.append(Panel(build_summary(report), title="Summary", border_style="blue"))
    recommendations = build_recommendations(report)
    if recommendations is not None:
        parts.append(recommendations)
    return Group(Panel(Text(title, style="bold"), border_style="blue"), *parts)


# =============================================================================
# Continuous monitoring
# =============================================================================

def monitor(
    tmux: TmuxManager,
    console: Console,
    session: str | None = None,
    interval: float = DEFAULT_INTERVAL,
    home: str | Path | None = None,
    iterations: int | None = None,
) -> int:
    """
    Re-run the health check every `interval` seconds until interrupted.

    Args:
        tmux: Tmux manager
        console: Console to render into
        session: Only check this session
        interval: Seconds between refreshes
        home: Crew home holding the metrics log
        iterations: Stop after this many cycles (None runs forever)

    Returns:
        Number of completed cycles.
    """
    ensure_registry_dir(home)
    metrics_file = get_metrics_file(home)
    console.print("[magenta]Starting continuous monitoring (Ctrl+C to stop)...[/magenta]")
    console.print(f"[magenta]Refresh interval: {interval}s[/magenta]")

    cycles = 0
    try:
        while iterations is None or cycles < iterations:
            report = collect_health(tmux, session)
            console.clear()
            console.print(render_health(report))
            append_metrics(report, metrics_file)
            cycles += 1
            logger.debug("Health cycle %d: %d/%d responsive", cycles, report.responsive, report.total)
            if iterations is None or cycles < iterations:
                time.sleep(interval)
    except KeyboardInterrupt:
        pass
    return cycles
