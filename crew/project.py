"""One-command project setup with a multi-agent team."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from crew.config import get_project_dir
from crew.detection import detect_team_size
from crew.errors import ProjectPathError, SessionExistsError
from crew.models import ManifestAgent, ProjectManifest, TeamSize
from crew.prompts import project_briefing
from crew.spawner import SpawnResult, spawn_agent
from crew.tmux_manager import TmuxManager, deliver_message

logger = logging.getLogger("crew.project")

UTILITY_WINDOWS = ["Shell", "Dev-Server", "Git"]


@dataclass
class TeamMember:
    """One agent slot in a project session."""

    key: str
    role: str
    window: int
    window_name: str
    label: str
    settle: float = 0.0  # seconds to pause after spawning
    status: str = "active"


CORE_TEAM = [
    TeamMember("orchestrator", "orchestrator", 0, "Orchestrator", "Orchestrator", settle=5.0),
    # Temporary: closes once the PRD is written
    TeamMember("prd_agent", "prd_agent", 1, "PRD-Agent", "PRD Agent", settle=5.0, status="temporary"),
    TeamMember("project_manager", "project_manager", 2, "PM", "Project Manager", settle=3.0),
]


def _engineers(count: int, first_window: int) -> list[TeamMember]:
    return [
        TeamMember(
            f"engineer_{n}", "engineer", first_window + n - 1, f"Engineer-{n}", f"Engineer {n}", settle=2.0
        )
        for n in range(1, count + 1)
    ]


def team_layout(team_size: TeamSize) -> list[TeamMember]:
    """Agent slots for a team size, in spawn order."""
    members = list(CORE_TEAM)
    if team_size == TeamSize.SMALL:
        members.append(TeamMember("engineer", "engineer", 3, "Engineer", "Engineer"))
    elif team_size == TeamSize.MEDIUM:
        members += _engineers(2, 3)
        members.append(TeamMember("qa_tester", "qa_tester", 5, "QA", "QA/Tester"))
    else:
        members += _engineers(3, 3)
        members.append(TeamMember("qa_tester", "qa_tester", 6, "QA", "QA/Tester"))
        members.append(TeamMember("code_reviewer", "code_reviewer", 7, "Reviewer", "Code Reviewer"))
    return members


def resolve_team_size(project_path: str | Path, team_size: TeamSize | str | None) -> TeamSize:
    """Use the requested size, or detect one when it is "auto" or missing."""
    if team_size is None or team_size == "auto":
        return detect_team_size(project_path)
    return TeamSize(team_size)


@dataclass
class ProjectSetup:
    """Result of a project setup."""

    project_name: str
    project_path: str
    team_size: TeamSize
    members: list[TeamMember]
    manifest_path: Path
    spawned: list[SpawnResult] = field(default_factory=list)


def build_manifest(
    project_name: str,
    project_path: str,
    team_size: TeamSize,
    members: list[TeamMember],
) -> ProjectManifest:
    return ProjectManifest(
        project_name=project_name,
        project_path=project_path,
        team_size=team_size,
        session_name=project_name,
        agents={m.key: ManifestAgent(window=m.window, status=m.status) for m in members},
    )


def write_manifest(manifest: ProjectManifest) -> Path:
    """Write project.json into the project's crew folder."""
    project_dir = get_project_dir(manifest.project_path)
    project_dir.mkdir(parents=True, exist_ok=True)
    manifest_path = project_dir / "project.json"
    manifest_path.write_text(manifest.model_dump_json(indent=2) + "\n")
    return manifest_path


def setup_project(
    project_name: str,
    project_path: str,
    team_size: TeamSize | str | None = "auto",
    *,
    tmux: TmuxManager | None = None,
    cli_command: str | None = None,
    home: str | Path | None = None,
    notify: Callable[[str], None] | None = None,
) -> ProjectSetup:
    """
    Create a tmux session for a project and staff it with agents.

    Args:
        project_name: Session and project name
        project_path: Existing project directory
        team_size: small, medium, large, or auto to detect from the source tree
        tmux: Tmux manager to use
        cli_command: Assistant command to launch in each agent window
        home: Crew home for templates, registry and logs
        notify: Called with a short progress message before each step

    Raises:
        ProjectPathError: The project path is not a directory.
        InvalidSessionNameError: The name contains "." or ":".
        SessionExistsError: A session with the project name already exists.
    """
    tmux = tmux or TmuxManager()
    notify = notify or (lambda message: None)

    if not os.path.isdir(project_path):
        raise ProjectPathError(project_path)
    project_path = os.path.abspath(project_path)

    size = resolve_team_size(project_path, team_size)
    if tmux.has_session(project_name):
        raise SessionExistsError(project_name)

    members = team_layout(size)
    logger.info("Setting up %s at %s with a %s team", project_name, project_path, size.value)

    notify("Creating tmux session...")
    tmux.new_session(project_name, start_directory=project_path)
    tmux.rename_window(f"{project_name}:0", CORE_TEAM[0].window_name)

    spawned = []
    for member in members:
        notify(f"Setting up {member.label}...")
        if member.window != 0:
            tmux.new_window(
                project_name,
                member.window_name,
                index=str(member.window),
                start_directory=project_path,
            )
        spawned.append(
            spawn_agent(
                project_name,
                str(member.window),
                member.role,
                project_path,
                tmux=tmux,
                cli_command=cli_command,
                home=home,
            )
        )
        if member.settle:
            time.sleep(member.settle)

    notify("Creating utility windows...")
    for name in UTILITY_WINDOWS:
        tmux.new_window(project_name, name, start_directory=project_path)

    manifest_path = write_manifest(build_manifest(project_name, project_path, size, members))

    notify("Sending initial project briefing to Orchestrator...")
    deliver_message(tmux, f"{project_name}:0", project_briefing(project_name, project_path, size))

    return ProjectSetup(
        project_name=project_name,
        project_path=project_path,
        team_size=size,
        members=members,
        manifest_path=manifest_path,
        spawned=spawned,
    )
