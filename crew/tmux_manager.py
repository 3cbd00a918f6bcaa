"""Tmux session and window management for crew."""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass

import libtmux
from libtmux.exc import LibTmuxException

from crew.config import get_tmux_socket
from crew.errors import CrewError, InvalidSessionNameError, TmuxCommandError, WindowNotFoundError

logger = logging.getLogger("crew.tmux")


@dataclass
class WindowInfo:
    """Information about a tmux window."""

    session_name: str
    index: str
    name: str

    @property
    def target(self) -> str:
        return f"{self.session_name}:{self.index}"


def split_target(target: str) -> tuple[str, str]:
    """Split a "session:window" target into its parts."""
    session, sep, window = target.partition(":")
    if not sep or not session or not window:
        raise CrewError(f"Invalid target '{target}' (expected session:window)")
    return session, window


def check_session_name(session_name: str) -> None:
    """Reject names tmux cannot address as a session."""
    if "." in session_name or ":" in session_name:
        raise InvalidSessionNameError(session_name)


class TmuxManager:
    """Manages tmux sessions and windows hosting agents."""

    def __init__(self, socket_name: str | None = None):
        self.server = libtmux.Server(socket_name=socket_name or get_tmux_socket())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_session(self, session_name: str) -> bool:
        """Check if a session exists."""
        check_session_name(session_name)
        try:
            return self.server.has_session(session_name)
        except LibTmuxException:
            return False

    def list_sessions(self) -> list[str]:
        """Names of all sessions on the server (empty if no server runs)."""
        try:
            return [s.session_name for s in self.server.sessions]
        except LibTmuxException:
            return []

    def list_windows(self, session_name: str) -> list[WindowInfo]:
        """List windows of a session in index order."""
        session = self._get_session(session_name)
        if session is None:
            return []
        try:
            return [
                WindowInfo(
                    session_name=session_name,
                    index=str(window.window_index),
                    name=window.window_name or "",
                )
                for window in session.windows
            ]
        except LibTmuxException:
            return []

    def window_exists(self, session_name: str, window: str) -> bool:
        """Check if a window (by index or name) exists in a session."""
        return self._get_window(session_name, window) is not None

    def capture_pane(self, target: str, start: int | None = None) -> list[str]:
        """
        Capture the text of a window's active pane.

        Args:
            target: "session:window"
            start: First line to capture; negative values reach into history.
                None captures only the visible screen.

        Returns:
            Captured lines, or an empty list if the pane is gone.
        """
        pane = self._get_pane(target)
        if pane is None:
            return []
        try:
            if start is None:
                return list(pane.capture_pane())
            return list(pane.capture_pane(start=start))
        except LibTmuxException:
            return []

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def new_session(
        self,
        session_name: str,
        start_directory: str | None = None,
    ) -> None:
        """Create a detached session."""
        check_session_name(session_name)
        kwargs = {"session_name": session_name, "attach": False}
        if start_directory:
            kwargs["start_directory"] = start_directory
        try:
            self.server.new_session(**kwargs)
        except LibTmuxException as e:
            raise TmuxCommandError(f"Could not create session '{session_name}': {e}") from e
        logger.info("Created session %s", session_name)

    def new_window(
        self,
        session_name: str,
        window_name: str,
        index: str | None = None,
        start_directory: str | None = None,
    ) -> WindowInfo:
        """
        Create a window in a session.

        Args:
            session_name: Target session
            window_name: Name for the new window
            index: Window index to create it at (next free index if None)
            start_directory: Working directory for the window's shell

        Returns:
            The created window.
        """
        session = self._get_session(session_name)
        if session is None:
            raise WindowNotFoundError(f"Cannot create window: session '{session_name}' is gone")

        kwargs = {"window_name": window_name, "attach": False}
        if index is not None:
            kwargs["window_index"] = str(index)
        if start_directory:
            kwargs["start_directory"] = start_directory
        try:
            window = session.new_window(**kwargs)
        except LibTmuxException as e:
            raise TmuxCommandError(f"Could not create window '{window_name}' in '{session_name}': {e}") from e
        logger.info("Created window %s:%s (%s)", session_name, window.window_index, window_name)
        return WindowInfo(
            session_name=session_name,
            index=str(window.window_index),
            name=window_name,
        )

    def rename_window(self, target: str, name: str) -> bool:
        session_name, window_id = split_target(target)
        window = self._get_window(session_name, window_id)
        if window is None:
            return False
        try:
            window.rename_window(name)
            return True
        except LibTmuxException:
            return False

    def send_keys(self, target: str, keys: str, enter: bool = True) -> bool:
        """
        Send keys to a window's active pane.

        Returns:
            True if successful, False otherwise.
        """
        pane = self._get_pane(target)
        if pane is None:
            return False
        try:
            pane.send_keys(keys, enter=enter)
            return True
        except LibTmuxException:
            return False

    def send_message(self, target: str, message: str, delay: float = 0.5) -> bool:
        """
        Type a message into an interactive CLI and submit it.

        The text goes in literally (no key-name interpretation), then Enter
        follows after a short pause so the CLI sees one complete input.
        """
        pane = self._get_pane(target)
        if pane is None:
            return False
        try:
            # "--" keeps a leading "-" in the text from being read as a flag
            result = pane.cmd("send-keys", "-l", "--", message)
            if result.stderr:
                logger.warning("send-keys to %s failed: %s", target, " ".join(result.stderr))
                return False
            time.sleep(delay)
            result = pane.cmd("send-keys", "Enter")
            if result.stderr:
                logger.warning("send-keys Enter to %s failed: %s", target, " ".join(result.stderr))
                return False
            return True
        except LibTmuxException as e:
            logger.warning("send-keys to %s failed: %s", target, e)
            return False

    def kill_session(self, session_name: str) -> bool:
        """Kill an entire session."""
        session = self._get_session(session_name)
        if session is None:
            return False
        try:
            session.kill()
            return True
        except LibTmuxException:
            return False

    # -------------------------------------------------------------------------
    # Lookup helpers
    # -------------------------------------------------------------------------

    def _get_session(self, session_name: str) -> libtmux.Session | None:
        try:
            return self.server.sessions.get(session_name=session_name, default=None)
        except LibTmuxException:
            return None

    def _get_window(self, session_name: str, window: str) -> libtmux.Window | None:
        """Find a window by index, falling back to its name."""
        session = self._get_session(session_name)
        if session is None:
            return None
        try:
            windows = list(session.windows)
        except LibTmuxException:
            return None
        for w in windows:
            if str(w.window_index) == str(window):
                return w
        for w in windows:
            if w.window_name == window:
                return w
        return None

    def _get_pane(self, target: str) -> libtmux.Pane | None:
        session_name, window_id = split_target(target)
        window = self._get_window(session_name, window_id)
        if window is None:
            return None
        try:
            return window.active_pane
        except LibTmuxException:
            return None


def check_tmux_available() -> bool:
    """Check if tmux is available on the system."""
    try:
        result = subprocess.run(
            ["tmux", "-V"],
            capture_output=True,
            text=True,
        )
        return result.returncode == 0
    except FileNotFoundError:
        return False


def deliver_message(tmux: TmuxManager, target: str, message: str) -> None:
    """Send a message to an agent, raising if tmux does not take it."""
    if not tmux.send_message(target, message):
        raise TmuxCommandError(f"Could not deliver message to {target}")
