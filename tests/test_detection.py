"""Tests for pane-text heuristics."""

from crew.detection import (
    classify_responsiveness,
    compute_git_activity,
    compute_metrics,
    count_source_files,
    detect_team_size,
    health_score,
    infer_role,
    is_agent_output,
    is_agent_window,
    is_ready,
    last_nonblank,
    score_tier,
    tail,
)
from crew.models import Responsiveness, TeamSize


class TestTail:
    def test_ignores_trailing_blank_lines(self):
        assert tail(["a", "b", "c", "", "  "], 2) == ["b", "c"]

    def test_keeps_inner_blank_lines(self):
        assert tail(["a", "", "b"], 3) == ["a", "", "b"]

    def test_last_nonblank(self):
        assert last_nonblank(["a", "", "b", "c", ""], 2) == ["b", "c"]
        assert last_nonblank(["", ""], 1) == []


class TestLiveness:
    def test_marker_in_last_lines(self):
        assert is_agent_output(["$ claude", "Human: hi", "", ""])
        assert is_agent_output(["Assistant: done"])

    def test_marker_scrolled_out_of_window(self):
        screen = ["Assistant: earlier"] + [f"output {n}" for n in range(5)]
        assert not is_agent_output(screen)

    def test_blank_padding_does_not_hide_marker(self):
        screen = ["Assistant: working"] + [""] * 30
        assert is_agent_output(screen)

    def test_plain_shell(self):
        assert not is_agent_output(["user@host:~$ ls", "file.txt"])
        assert not is_agent_output([])

    def test_ready_needs_assistant_reply(self):
        assert not is_ready(["$ claude", "Human: "])
        assert is_ready(["$ claude", "Assistant: How can I help?"])


class TestResponsiveness:
    def test_assistant_means_yes(self):
        assert classify_responsiveness(["Human: go", "Assistant: ok"]) == Responsiveness.YES

    def test_human_only_means_waiting(self):
        assert classify_responsiveness(["Human: are you there?"]) == Responsiveness.WAITING

    def test_no_markers_means_no(self):
        assert classify_responsiveness(["compiling..."]) == Responsiveness.NO

    def test_only_recent_lines_count(self):
        lines = ["Assistant: old reply"] + ["log line"] * 20
        assert classify_responsiveness(lines) == Responsiveness.NO


class TestMetrics:
    def test_counts_turns(self):
        lines = [
            "Human: build it",
            "Assistant: on it",
            "  some output mentioning Assistant: inline",
            "Human: status?",
            "",
        ]
        metrics = compute_metrics(lines)
        assert metrics.total_lines == 4
        assert metrics.human_lines == 2
        assert metrics.assistant_lines == 1
        assert metrics.last_activity == "Human: status?"
        assert metrics.responsiveness == Responsiveness.YES

    def test_empty_pane(self):
        metrics = compute_metrics([])
        assert metrics.total_lines == 0
        assert metrics.last_activity == ""
        assert metrics.responsiveness == Responsiveness.NO

    def test_git_activity(self):
        lines = ["$ git status", "$ git add .", "$ git commit -m 'wip'", "pytest"]
        activity = compute_git_activity(lines)
        assert activity.commands == 3
        assert activity.last_commit == "$ git commit -m 'wip'"

    def test_no_git(self):
        activity = compute_git_activity(["npm test"])
        assert activity.commands == 0
        assert activity.last_commit == ""


class TestWindowNames:
    def test_agent_windows(self):
        for name in ["Orchestrator", "PM", "Engineer-2", "QA", "Reviewer", "PRD-Agent", "UX", "Docs"]:
            assert is_agent_window(name), name

    def test_other_windows(self):
        for name in ["Shell", "Dev-Server", "Git", "bash"]:
            assert not is_agent_window(name), name

    def test_infer_role(self):
        assert infer_role("Orchestrator") == "orchestrator"
        assert infer_role("PM") == "project_manager"
        assert infer_role("Engineer-3") == "engineer"
        assert infer_role("QA") == "qa_tester"
        assert infer_role("Integration-Tests") == "qa_tester"
        assert infer_role("Reviewer") == "code_reviewer"
        assert infer_role("PRD-Agent") == "prd_agent"
        assert infer_role("UX-Designer") == "ux_ui_expert"
        assert infer_role("Supabase") == "supabase_expert"
        assert infer_role("Docs") == "documentation"
        assert infer_role("bash") == "unknown"

    def test_infer_role_is_case_sensitive(self):
        assert infer_role("engineer") == "unknown"


class TestHealthScore:
    def test_no_agents(self):
        assert health_score(0, 0) is None

    def test_rounds_down(self):
        assert health_score(2, 3) == 66
        assert health_score(3, 3) == 100

    def test_tiers(self):
        assert score_tier(0) == "red"
        assert score_tier(49) == "red"
        assert score_tier(50) == "yellow"
        assert score_tier(79) == "yellow"
        assert score_tier(80) == "green"
        assert score_tier(100) == "green"


class TestTeamSize:
    @staticmethod
    def _make_files(root, count, suffix=".py"):
        src = root / "src"
        src.mkdir(exist_ok=True)
        for n in range(count):
            (src / f"module_{n}{suffix}").write_text("")

    def test_counts_only_source_files(self, tmp_path):
        self._make_files(tmp_path, 3)
        self._make_files(tmp_path, 2, suffix=".md")
        (tmp_path / "app.ts").write_text("")
        assert count_source_files(tmp_path) == 4

    def test_empty_project_is_small(self, tmp_path):
        assert detect_team_size(tmp_path) == TeamSize.SMALL

    def test_small_boundary(self, tmp_path):
        self._make_files(tmp_path, 49)
        assert detect_team_size(tmp_path) == TeamSize.SMALL
        (tmp_path / "one_more.js").write_text("")
        assert detect_team_size(tmp_path) == TeamSize.MEDIUM

    def test_large_boundary(self, tmp_path):
        self._make_files(tmp_path, 199, suffix=".java")
        assert detect_team_size(tmp_path) == TeamSize.MEDIUM
        (tmp_path / "Main.java").write_text("")
        assert detect_team_size(tmp_path) == TeamSize.LARGE
