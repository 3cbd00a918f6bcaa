"""Exceptions raised by crew operations.

Library code raises these; the CLI turns them into a red error line and a
non-zero exit.
"""

from __future__ import annotations

from crew.models import sanitize_session_name


class CrewError(Exception):
    """Base class for all crew errors."""

    hint: str | None = None

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class TmuxUnavailableError(CrewError):
    """tmux is not installed or not on PATH."""


class SessionNotFoundError(CrewError):
    def __init__(self, session: str):
        super().__init__(
            f"Session '{session}' does not exist",
            hint=f"Create it with: tmux new-session -s {session}",
        )
        self.session = session


class SessionExistsError(CrewError):
    def __init__(self, session: str):
        super().__init__(
            f"Session '{session}' already exists",
            hint=f"Kill it with: tmux kill-session -t {session}",
        )
        self.session = session


class InvalidSessionNameError(CrewError):
    def __init__(self, session: str):
        super().__init__(
            f"Invalid session name '{session}': tmux does not allow '.' or ':'",
            hint=f"Use a name like: {sanitize_session_name(session)}",
        )
        self.session = session


class TmuxCommandError(CrewError):
    """tmux refused a command."""


class WindowNotFoundError(CrewError):
    """A window could not be resolved inside an existing session."""


class TemplateNotFoundError(CrewError):
    def __init__(self, role: str, available: list[str]):
        listing = "\n".join(f"  - {name}" for name in available) or "  (none)"
        super().__init__(
            f"Template not found for role '{role}'",
            hint=f"Available roles:\n{listing}",
        )
        self.role = role
        self.available = available


class AgentNotFoundError(CrewError):
    """No live agent (or registry record) at the given target."""


class AgentStartTimeout(CrewError):
    """The assistant never showed its prompt after being launched."""


class ConfigError(CrewError):
    """Configuration file is missing or malformed."""


class ProjectPathError(CrewError):
    def __init__(self, path: str):
        super().__init__(f"Project path '{path}' does not exist")
        self.path = path
