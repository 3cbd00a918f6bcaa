"""Tests for live agent discovery and reporting."""

import pytest

from conftest import ACTIVE_SCREEN, IDLE_SHELL, FakeTmux
from crew.discovery import (
    build_report,
    discover_agents,
    find_by_role,
    find_in_session,
    is_agent_alive,
    stale_record_check,
    summarize_status,
    write_report,
)
from crew.errors import SessionNotFoundError
from crew.models import AgentRecord


@pytest.fixture
def fleet():
    tmux = FakeTmux()
    tmux.add_window("app", 0, "Orchestrator", ACTIVE_SCREEN)
    tmux.add_window("app", 2, "PM", ["Human: plan the sprint"])
    tmux.add_window("app", 3, "Engineer-1", IDLE_SHELL)
    tmux.add_window("app", 8, "Shell", IDLE_SHELL)
    tmux.add_window("scratch", 0, "bash", IDLE_SHELL)
    return tmux


class TestDiscover:
    def test_finds_live_agents(self, fleet):
        agents = discover_agents(fleet)
        assert [a.target for a in agents] == ["app:0", "app:2"]
        assert agents[0].role == "orchestrator"
        assert agents[1].role == "project_manager"
        assert agents[0].last_line == "  Editing src/login.tsx"

    def test_context_lines(self, fleet):
        agent = discover_agents(fleet, session="app", context_lines=3)[0]
        assert agent.recent == [
            "Human: please add the login form",
            "Assistant: Sure, I'll start with the component.",
            "  Editing src/login.tsx",
        ]

    def test_no_server(self):
        assert discover_agents(FakeTmux()) == []

    def test_is_agent_alive(self, fleet):
        assert is_agent_alive(fleet, "app", "0")
        assert is_agent_alive(fleet, "app", "PM")
        assert not is_agent_alive(fleet, "app", "3")
        assert not is_agent_alive(fleet, "app", "42")
        assert not is_agent_alive(fleet, "missing", "0")


class TestFind:
    def test_by_role_is_case_insensitive(self, fleet):
        assert [a.target for a in find_by_role(fleet, "orch")] == ["app:0"]
        assert [a.target for a in find_by_role(fleet, "pm")] == ["app:2"]

    def test_by_role_skips_dead_windows(self, fleet):
        assert find_by_role(fleet, "engineer") == []

    def test_in_session(self, fleet):
        assert len(find_in_session(fleet, "app")) == 2
        assert find_in_session(fleet, "scratch") == []

    def test_in_missing_session(self, fleet):
        with pytest.raises(SessionNotFoundError) as exc_info:
            find_in_session(fleet, "nope")
        assert "tmux new-session -s nope" in exc_info.value.hint


class TestStatus:
    def test_counts(self, fleet):
        summary = summarize_status(fleet)
        assert summary.sessions == {"app": 2}
        assert summary.active == 2
        # Engineer-1 is named like an agent but shows a plain shell
        assert summary.inactive == 1

    def test_stale_record_check(self, fleet):
        is_stale = stale_record_check(fleet)
        assert not is_stale(AgentRecord(session="app", window="0", role="orchestrator"))
        assert is_stale(AgentRecord(session="app", window="3", role="engineer"))
        assert is_stale(AgentRecord(session="gone", window="1", role="engineer"))


class TestReport:
    def test_markdown(self, fleet):
        report = build_report(fleet)
        assert report.startswith("# Agent Status Report\n")
        assert "### Session: app" in report
        assert "- **Window 0**: Orchestrator" in report
        assert "  - Recent activity:" in report
        assert "    Human: plan the sprint" in report
        assert "### Session: scratch\n\n- No active agents" in report
        assert "- Total tmux sessions: 2" in report
        assert "- Sessions with agents: 1" in report

    def test_write_report(self, fleet, home):
        path = write_report(fleet, home)
        assert path.parent == home / "agents" / "registry"
        assert path.name.startswith("report_") and path.suffix == ".md"
        assert "### Session: app" in path.read_text()
