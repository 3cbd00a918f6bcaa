"""Heuristics over captured pane text.

An assistant CLI prints "Human:" and "Assistant:" turn markers, so the
presence and position of those markers is all we have to judge whether an
agent is alive and what it is doing. Every function here is pure: callers
capture the pane and pass the lines in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from crew.models import Responsiveness, TeamSize

HUMAN_MARKER = "Human:"
ASSISTANT_MARKER = "Assistant:"

LIVENESS_WINDOW = 5
RESPONSIVENESS_WINDOW = 20

METRICS_HISTORY = 1000
GIT_HISTORY = 500

AGENT_WINDOW_PATTERN = re.compile(r"Orchestrator|PM|Engineer|QA|Review|PRD|UX|Supabase|Doc")

# First match wins
ROLE_PATTERNS: list[tuple[str, tuple[str, ...]]] = [
    ("orchestrator", ("*Orchestrator*",)),
    ("project_manager", ("*PM*", "*Project*Manager*")),
    ("engineer", ("*Engineer*",)),
    ("qa_tester", ("*QA*", "*Test*")),
    ("code_reviewer", ("*Review*",)),
    ("prd_agent", ("*PRD*",)),
    ("ux_ui_expert", ("*UX*", "*UI*")),
    ("supabase_expert", ("*Supabase*", "*DB*")),
    ("documentation", ("*Doc*",)),
]

SOURCE_EXTENSIONS = (".js", ".ts", ".py", ".java")
SMALL_TEAM_LIMIT = 50
MEDIUM_TEAM_LIMIT = 200


@dataclass
class AgentMetrics:
    """Activity metrics from an agent's scrollback."""

    total_lines: int
    human_lines: int
    assistant_lines: int
    responsiveness: Responsiveness
    last_activity: str


@dataclass
class GitActivity:
    commands: int
    last_commit: str


def _trim_trailing_blank(lines: list[str]) -> list[str]:
    end = len(lines)
    while end and not lines[end - 1].strip():
        end -= 1
    return lines[:end]


def tail(lines: list[str], count: int) -> list[str]:
    """Last `count` lines, ignoring the blank padding below the cursor."""
    return _trim_trailing_blank(lines)[-count:]


def has_turn_marker(lines: list[str]) -> bool:
    return any(HUMAN_MARKER in line or ASSISTANT_MARKER in line for line in lines)


def is_agent_output(screen: list[str]) -> bool:
    """Whether the visible screen looks like a running assistant session."""
    return has_turn_marker(tail(screen, LIVENESS_WINDOW))


def is_ready(lines: list[str]) -> bool:
    """Whether a freshly launched assistant has printed its first reply."""
    return any(ASSISTANT_MARKER in line for line in tail(lines, RESPONSIVENESS_WINDOW))


def classify_responsiveness(lines: list[str]) -> Responsiveness:
    recent = tail(lines, RESPONSIVENESS_WINDOW)
    if any(ASSISTANT_MARKER in line for line in recent):
        return Responsiveness.YES
    if any(HUMAN_MARKER in line for line in recent):
        return Responsiveness.WAITING
    return Responsiveness.NO


def compute_metrics(lines: list[str]) -> AgentMetrics:
    """Count turns and find the most recent one."""
    lines = _trim_trailing_blank(lines)
    human = 0
    assistant = 0
    last_activity = ""
    for line in lines:
        if line.startswith(HUMAN_MARKER):
            human += 1
            last_activity = line
        elif line.startswith(ASSISTANT_MARKER):
            assistant += 1
            last_activity = line
    return AgentMetrics(
        total_lines=len(lines),
        human_lines=human,
        assistant_lines=assistant,
        responsiveness=classify_responsiveness(lines),
        last_activity=last_activity,
    )


def compute_git_activity(lines: list[str]) -> GitActivity:
    commands = 0
    last_commit = ""
    for line in lines:
        if "git " in line:
            commands += 1
        if "git commit" in line:
            last_commit = line
    return GitActivity(commands=commands, last_commit=last_commit)


def last_nonblank(lines: list[str], count: int = 1) -> list[str]:
    """The last `count` non-empty lines."""
    return [line for line in lines if line.strip()][-count:]


def is_agent_window(window_name: str) -> bool:
    return AGENT_WINDOW_PATTERN.search(window_name) is not None


def infer_role(window_name: str) -> str:
    """Guess an agent's role from its window name."""
    for role, patterns in ROLE_PATTERNS:
        if any(fnmatchcase(window_name, pattern) for pattern in patterns):
            return role
    return "unknown"


def health_score(responsive: int, total: int) -> int | None:
    """Percentage of responsive agents, or None when there are none."""
    if total <= 0:
        return None
    return responsive * 100 // total


def score_tier(score: int) -> str:
    """Map a health score to a display color."""
    if score < 50:
        return "red"
    if score < 80:
        return "yellow"
    return "green"


def count_source_files(path: str | Path) -> int:
    """Count source files under a project directory."""
    count = 0
    for file_path in Path(path).rglob("*"):
        if file_path.suffix in SOURCE_EXTENSIONS and file_path.is_file():
            count += 1
    return count


def detect_team_size(path: str | Path) -> TeamSize:
    """Size a team by how much source code a project has."""
    file_count = count_source_files(path)
    if file_count < SMALL_TEAM_LIMIT:
        return TeamSize.SMALL
    if file_count < MEDIUM_TEAM_LIMIT:
        return TeamSize.MEDIUM
    return TeamSize.LARGE
