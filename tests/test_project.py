"""Tests for one-command project setup."""

import json

import pytest

from crew.errors import InvalidSessionNameError, ProjectPathError, SessionExistsError, TmuxCommandError
from crew.models import TeamSize
from crew.project import UTILITY_WINDOWS, resolve_team_size, setup_project, team_layout
from crew.registry import AgentRegistry


def window_names(tmux, session):
    return [(w.index, w.name) for w in tmux.list_windows(session)]


class TestTeamLayout:
    def test_small(self):
        layout = team_layout(TeamSize.SMALL)
        assert [(m.window, m.window_name, m.role) for m in layout] == [
            (0, "Orchestrator", "orchestrator"),
            (1, "PRD-Agent", "prd_agent"),
            (2, "PM", "project_manager"),
            (3, "Engineer", "engineer"),
        ]

    def test_medium(self):
        layout = team_layout(TeamSize.MEDIUM)
        assert [(m.window, m.window_name) for m in layout][3:] == [
            (3, "Engineer-1"),
            (4, "Engineer-2"),
            (5, "QA"),
        ]

    def test_large(self):
        layout = team_layout(TeamSize.LARGE)
        assert [(m.window, m.window_name, m.role) for m in layout][3:] == [
            (3, "Engineer-1", "engineer"),
            (4, "Engineer-2", "engineer"),
            (5, "Engineer-3", "engineer"),
            (6, "QA", "qa_tester"),
            (7, "Reviewer", "code_reviewer"),
        ]

    def test_prd_agent_is_temporary(self):
        statuses = {m.key: m.status for m in team_layout(TeamSize.SMALL)}
        assert statuses["prd_agent"] == "temporary"
        assert statuses["project_manager"] == "active"

    def test_resolve_team_size(self, tmp_path):
        assert resolve_team_size(tmp_path, "large") == TeamSize.LARGE
        assert resolve_team_size(tmp_path, TeamSize.MEDIUM) == TeamSize.MEDIUM
        assert resolve_team_size(tmp_path, "auto") == TeamSize.SMALL
        assert resolve_team_size(tmp_path, None) == TeamSize.SMALL


class TestSetupProject:
    def test_small_team(self, tmux, home, tmp_path):
        project = tmp_path / "shop"
        project.mkdir()
        notes = []
        result = setup_project("shop", str(project), "small", tmux=tmux, home=home, notify=notes.append)

        assert window_names(tmux, "shop") == [
            ("0", "Orchestrator"),
            ("1", "PRD-Agent"),
            ("2", "PM"),
            ("3", "Engineer"),
            ("4", "Shell"),
            ("5", "Dev-Server"),
            ("6", "Git"),
        ]
        assert [keys for _, keys in tmux.keys] == ["claude"] * 4
        assert len(result.spawned) == 4
        assert result.team_size == TeamSize.SMALL
        assert "Creating tmux session..." in notes

        target, briefing = tmux.messages[-1]
        assert target == "shop:0"
        assert "Project 'shop' has been initialized with a small team." in briefing

    def test_manifest(self, tmux, home, tmp_path):
        result = setup_project("shop", str(tmp_path), "medium", tmux=tmux, home=home)
        assert result.manifest_path == tmp_path / ".crew" / "project.json"

        manifest = json.loads(result.manifest_path.read_text())
        assert manifest["project_name"] == "shop"
        assert manifest["project_path"] == str(tmp_path)
        assert manifest["team_size"] == "medium"
        assert manifest["session_name"] == "shop"
        assert manifest["created_at"].endswith("Z")
        assert manifest["agents"]["prd_agent"] == {"window": 1, "status": "temporary"}
        assert manifest["agents"]["engineer_2"] == {"window": 4, "status": "active"}
        assert manifest["agents"]["qa_tester"] == {"window": 5, "status": "active"}

    def test_every_agent_registered(self, tmux, home, tmp_path):
        setup_project("shop", str(tmp_path), "large", tmux=tmux, home=home)
        records = AgentRegistry(home=home).records()
        assert [r.window for r in records] == [str(n) for n in range(8)]
        assert records[-1].role == "code_reviewer"

    def test_auto_detects_size(self, tmux, home, tmp_path):
        result = setup_project("shop", str(tmp_path), tmux=tmux, home=home)
        assert result.team_size == TeamSize.SMALL
        assert [name for _, name in window_names(tmux, "shop")][-len(UTILITY_WINDOWS):] == UTILITY_WINDOWS

    def test_missing_path(self, tmux, home, tmp_path):
        with pytest.raises(ProjectPathError):
            setup_project("shop", str(tmp_path / "missing"), tmux=tmux, home=home)
        assert tmux.sessions == {}

    def test_existing_session(self, tmux, home, tmp_path):
        tmux.new_session("shop")
        with pytest.raises(SessionExistsError) as exc_info:
            setup_project("shop", str(tmp_path), tmux=tmux, home=home)
        assert "tmux kill-session -t shop" in exc_info.value.hint
        assert tmux.keys == []

    def test_dotted_name(self, tmux, home, tmp_path):
        with pytest.raises(InvalidSessionNameError) as exc_info:
            setup_project("shop.v2", str(tmp_path), "small", tmux=tmux, home=home)
        assert exc_info.value.hint == "Use a name like: shop-v2"
        assert tmux.sessions == {}
        assert not (tmp_path / ".crew").exists()

    def test_briefing_rejected(self, tmux, home, tmp_path):
        tmux.accepts_messages = False
        with pytest.raises(TmuxCommandError):
            setup_project("shop", str(tmp_path), "small", tmux=tmux, home=home)
        assert tmux.messages == []
