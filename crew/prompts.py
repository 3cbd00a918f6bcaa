"""Message templates sent to agents."""

from __future__ import annotations

from crew.models import TeamSize

ROLE_BRIEFING_TEMPLATE = """You are being deployed as a {role} agent.

Your working directory is: {project_path}

Please read and internalize the following role definition and instructions:

{template}

Once you understand your role, please acknowledge and provide a brief summary of your responsibilities."""


INTERACTIVE_CONFIG_TEMPLATE = """You have been initialized with the following configuration:

Session: {session}
Check-in Interval: {schedule_interval} minutes
Quality Standard: {quality}
Default Team Size: {team_size}

Your responsibilities:
1. Monitor all active projects across sessions
2. Deploy appropriate agent teams for new projects
3. Ensure quality standards are maintained
4. Schedule regular check-ins every {schedule_interval} minutes
5. Coordinate cross-project dependencies

Available commands:
- Use `crew spawn` to create new agents
- Use `crew send` for agent communication
- Use `crew health` to monitor agent status
- Use `crew registry` to track all agents

Please acknowledge this configuration and schedule your first check-in."""


FILE_CONFIG_TEMPLATE = """You have been initialized with this configuration:

{config_text}

Please parse this configuration and set up your monitoring accordingly."""


PROJECT_BRIEFING_TEMPLATE = """Project '{project_name}' has been initialized with a {team_size} team.

Project path: {project_path}

Your team is ready in the following windows:
- Window 1: PRD Agent (temporary - for initial specification)
- Window 2: Project Manager
{team_lines}

Utility windows:
- Shell: For command line operations
- Dev-Server: For running development servers
- Git: For version control operations

Please start by working with the PRD Agent in window 1 to create a detailed specification for this project. Once the PRD is complete, brief the Project Manager and let them coordinate the team.

Use `crew send <session:window> "message"` to reach any agent and schedule regular check-ins."""


TEAM_LINES = {
    TeamSize.SMALL: "- Window 3: Engineer",
    TeamSize.MEDIUM: "- Windows 3-4: Engineers\n- Window 5: QA/Tester",
    TeamSize.LARGE: "- Windows 3-5: Engineers\n- Window 6: QA/Tester\n- Window 7: Code Reviewer",
}


QUICK_COMMANDS = """# Orchestrator Quick Commands

1. View all agents:        crew registry list
2. Health check:           crew health
3. Continuous monitoring:  crew health --continuous
4. Spawn new agent:        crew spawn <session> <window> <role>
5. Setup new project:      crew setup <name> <path>
6. Send message:           crew send <session:window> "message"

## Tmux commands

Attach to orchestrator:    tmux attach-session -t {session}
List all sessions:         tmux list-sessions
Switch windows:            Ctrl+b [number]
Detach from session:       Ctrl+b d
"""


def role_briefing(role: str, project_path: str, template: str) -> str:
    """Briefing that turns a fresh assistant into a role agent."""
    return ROLE_BRIEFING_TEMPLATE.format(
        role=role,
        project_path=project_path,
        template=template,
    )


def interactive_config_message(
    session: str,
    schedule_interval: int,
    quality: str,
    team_size: str,
) -> str:
    return INTERACTIVE_CONFIG_TEMPLATE.format(
        session=session,
        schedule_interval=schedule_interval,
        quality=quality,
        team_size=team_size,
    )


def file_config_message(config_text: str) -> str:
    return FILE_CONFIG_TEMPLATE.format(config_text=config_text)


def project_briefing(project_name: str, project_path: str, team_size: TeamSize) -> str:
    return PROJECT_BRIEFING_TEMPLATE.format(
        project_name=project_name,
        project_path=project_path,
        team_size=team_size.value,
        team_lines=TEAM_LINES[team_size],
    )


def quick_commands(session: str = "ai-orchestrator") -> str:
    return QUICK_COMMANDS.format(session=session)
