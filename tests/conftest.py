"""Shared fixtures: an in-memory tmux and an isolated crew home."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from crew.errors import WindowNotFoundError
from crew.tmux_manager import WindowInfo, check_session_name, split_target


@dataclass
class FakeWindow:
    index: str
    name: str
    lines: list[str] = field(default_factory=list)


class FakeTmux:
    """Stands in for TmuxManager with sessions held in memory.

    Launching a command with send_keys prints an assistant reply into the
    pane when `auto_ready` is set, so spawns complete immediately. Clearing
    `accepts_messages` makes every send_message fail the way a rejected
    send-keys does.
    """

    def __init__(self, auto_ready: bool = True):
        self.auto_ready = auto_ready
        self.accepts_messages = True
        self.sessions: dict[str, list[FakeWindow]] = {}
        self.keys: list[tuple[str, str]] = []
        self.messages: list[tuple[str, str]] = []
        self.killed: list[str] = []

    # Test helpers

    def add_window(self, session: str, index: int | str, name: str, lines: list[str] | None = None) -> FakeWindow:
        window = FakeWindow(str(index), name, list(lines or []))
        self.sessions.setdefault(session, []).append(window)
        return window

    def window(self, target: str) -> FakeWindow | None:
        session, window = split_target(target)
        return self._find(session, window)

    def _find(self, session: str, window: str) -> FakeWindow | None:
        windows = self.sessions.get(session, [])
        for w in windows:
            if w.index == str(window):
                return w
        for w in windows:
            if w.name == window:
                return w
        return None

    # TmuxManager interface

    def has_session(self, session_name: str) -> bool:
        check_session_name(session_name)
        return session_name in self.sessions

    def list_sessions(self) -> list[str]:
        return list(self.sessions)

    def list_windows(self, session_name: str) -> list[WindowInfo]:
        windows = sorted(self.sessions.get(session_name, []), key=lambda w: int(w.index))
        return [WindowInfo(session_name, w.index, w.name) for w in windows]

    def window_exists(self, session_name: str, window: str) -> bool:
        return self._find(session_name, window) is not None

    def capture_pane(self, target: str, start: int | None = None) -> list[str]:
        window = self.window(target)
        return list(window.lines) if window else []

    def new_session(self, session_name: str, start_directory: str | None = None) -> None:
        check_session_name(session_name)
        self.sessions[session_name] = [FakeWindow("0", "bash")]

    def new_window(
        self,
        session_name: str,
        window_name: str,
        index: str | None = None,
        start_directory: str | None = None,
    ) -> WindowInfo:
        if session_name not in self.sessions:
            raise WindowNotFoundError(f"Cannot create window: session '{session_name}' is gone")
        if index is None:
            index = str(max((int(w.index) for w in self.sessions[session_name]), default=-1) + 1)
        self.add_window(session_name, index, window_name)
        return WindowInfo(session_name, str(index), window_name)

    def rename_window(self, target: str, name: str) -> bool:
        window = self.window(target)
        if window is None:
            return False
        window.name = name
        return True

    def send_keys(self, target: str, keys: str, enter: bool = True) -> bool:
        window = self.window(target)
        if window is None:
            return False
        self.keys.append((target, keys))
        window.lines.append(f"$ {keys}")
        if self.auto_ready:
            window.lines += ["Human: ", "Assistant: How can I help you today?", ""]
        return True

    def send_message(self, target: str, message: str, delay: float = 0.5) -> bool:
        window = self.window(target)
        if window is None or not self.accepts_messages:
            return False
        self.messages.append((target, message))
        window.lines.append(f"Human: {message.splitlines()[0] if message else ''}")
        return True

    def kill_session(self, session_name: str) -> bool:
        if self.sessions.pop(session_name, None) is None:
            return False
        self.killed.append(session_name)
        return True


ACTIVE_SCREEN = [
    "Human: please add the login form",
    "Assistant: Sure, I'll start with the component.",
    "  Editing src/login.tsx",
    "",
    "",
]

IDLE_SHELL = ["user@host:~/app$ ls", "README.md  src", "user@host:~/app$ "]


@pytest.fixture
def tmux():
    return FakeTmux()


@pytest.fixture
def home(tmp_path, monkeypatch):
    """An empty crew home, exported as CREW_HOME."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("CREW_HOME", str(path))
    monkeypatch.delenv("CREW_CLI", raising=False)
    return path


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
