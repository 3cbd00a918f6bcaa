"""CLI interface for crew."""

from __future__ import annotations

import logging
import os
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from crew import __version__
from crew.config import get_default_config_path, resolve_home, write_default_config
from crew.discovery import (
    LiveAgent,
    discover_agents,
    find_by_role,
    find_in_session,
    is_agent_alive,
    stale_record_check,
    summarize_status,
    write_report,
)
from crew.errors import (
    AgentNotFoundError,
    CrewError,
    SessionExistsError,
    TmuxCommandError,
    TmuxUnavailableError,
    WindowNotFoundError,
)
from crew.health import DEFAULT_INTERVAL, collect_health, monitor, quick_check, render_health
from crew.models import TeamSize
from crew.orchestrator import (
    DEFAULT_SCHEDULE_INTERVAL,
    DEFAULT_SESSION,
    InteractiveOptions,
    OrchestratorInit,
    init_from_config,
    init_interactive,
    quality_from_choice,
    write_quick_commands,
)
from crew.project import setup_project
from crew.prompts import quick_commands
from crew.registry import AgentRegistry
from crew.spawner import spawn_agent
from crew.templates import available_roles
from crew.tmux_manager import TmuxManager, check_tmux_available, split_target

console = Console()

RULE = "═" * 55


def get_tmux() -> TmuxManager:
    """Get a tmux manager, failing early when tmux is missing."""
    if not check_tmux_available():
        raise TmuxUnavailableError("tmux is not installed or not in PATH")
    return TmuxManager()


def fail(error: CrewError) -> NoReturn:
    """Print an error (and its hint) and exit non-zero."""
    console.print(f"[red]Error:[/red] {error}")
    if error.hint:
        console.print(error.hint, markup=False, highlight=False)
    sys.exit(1)


def _notify(message: str) -> None:
    console.print(f"[yellow]{message}[/yellow]")


@click.group()
@click.version_option(version=__version__)
@click.option("--home", default=None, help="Crew home directory (default: $CREW_HOME or CWD)")
@click.option("--log-level", default="WARNING", help="Log level (DEBUG, INFO, WARNING, ...)")
@click.pass_context
def main(ctx: click.Context, home: str | None, log_level: str):
    """Crew - tmux-driven teams of AI coding assistants."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["home"] = str(resolve_home(home))


# =============================================================================
# Agents
# =============================================================================

@main.command()
@click.argument("session")
@click.argument("window")
@click.argument("role")
@click.argument("project_path", required=False)
@click.option("--cli", "cli_command", default=None, help="Assistant CLI to launch (default: $CREW_CLI or 'claude')")
@click.option("--no-register", is_flag=True, help="Do not record the agent in the registry")
@click.pass_context
def spawn(
    ctx: click.Context,
    session: str,
    window: str,
    role: str,
    project_path: str | None,
    cli_command: str | None,
    no_register: bool,
):
    """Spawn a ROLE agent into SESSION:WINDOW."""
    try:
        tmux = get_tmux()
        console.print(f"[blue]Starting agent in {session}:{window}...[/blue]")
        result = spawn_agent(
            session,
            window,
            role,
            project_path,
            tmux=tmux,
            cli_command=cli_command,
            home=ctx.obj["home"],
            register=not no_register,
        )
    except CrewError as e:
        fail(e)

    console.print("[green]✓[/green] Agent spawned successfully!")
    console.print("[yellow]Checking agent status...[/yellow]")
    for line in result.status_lines:
        console.print(line, markup=False, highlight=False)
    console.print("\n[green]✓[/green] Agent deployment complete!")
    console.print(f"  You can interact with the agent at: [cyan]{result.target}[/cyan]")
    console.print(f'  To send messages: [cyan]crew send {result.target} "Your message"[/cyan]')


@main.command()
@click.pass_context
def roles(ctx: click.Context):
    """List roles that have a template."""
    names = available_roles(ctx.obj["home"])
    if not names:
        console.print("[yellow]No role templates found[/yellow]")
        return
    console.print("Available roles:")
    for name in names:
        console.print(f"  - {name}")


@main.command()
@click.argument("target")
@click.argument("message")
def send(target: str, message: str):
    """Send MESSAGE to the agent at TARGET (session:window)."""
    try:
        tmux = get_tmux()
        session, window = split_target(target)
        if not tmux.window_exists(session, window):
            raise WindowNotFoundError(f"No window at {target}")
        if not tmux.send_message(target, message):
            raise TmuxCommandError(f"tmux did not accept the message for {target}")
    except CrewError as e:
        fail(e)
    console.print(f"[green]✓[/green] Message sent to {target}")


# =============================================================================
# Registry
# =============================================================================

def _print_live_agents(agents: list[LiveAgent]) -> None:
    table = Table(title="Active AI Agents", border_style="blue")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Target", style="green")
    table.add_column("Window")
    table.add_column("Role", style="cyan")
    table.add_column("Last", style="yellow", overflow="ellipsis", no_wrap=True)

    for n, agent in enumerate(agents, start=1):
        last = f"{agent.last_line[:60]}..." if agent.last_line else ""
        table.add_row(str(n), agent.target, agent.window_name, agent.role, last)
    console.print(table)


@main.group(invoke_without_command=True)
@click.pass_context
def registry(ctx: click.Context):
    """Track and manage agents across all sessions (default: list)."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(registry_list)


@registry.command("list")
def registry_list():
    """List all live agents."""
    try:
        agents = discover_agents(get_tmux())
    except CrewError as e:
        fail(e)

    if not agents:
        console.print("[yellow]No active agents found.[/yellow]")
        return
    _print_live_agents(agents)
    console.print(f"[blue]Total active agents: {len(agents)}[/blue]")


@registry.command("add")
@click.argument("target")
@click.argument("role")
@click.pass_context
def registry_add(ctx: click.Context, target: str, role: str):
    """Record the live agent at TARGET (session:window) with ROLE."""
    try:
        session, window = split_target(target)
        if not is_agent_alive(get_tmux(), session, window):
            raise AgentNotFoundError(f"No active agent found at {target}")
        AgentRegistry(home=ctx.obj["home"]).add(session, window, role)
    except CrewError as e:
        fail(e)
    console.print(f"[green]✓[/green] Agent added to registry: {target} ({role})")


@registry.command("remove")
@click.argument("target")
@click.pass_context
def registry_remove(ctx: click.Context, target: str):
    """Remove registry entries for TARGET (session:window)."""
    try:
        session, window = split_target(target)
        removed = AgentRegistry(home=ctx.obj["home"]).remove(session, window)
    except CrewError as e:
        fail(e)
    console.print(f"[green]✓[/green] Removed {len(removed)} registry entr{'y' if len(removed) == 1 else 'ies'} for {target}")


@registry.command("entries")
@click.option("--role", default=None, help="Only entries with this role")
@click.option("--session", default=None, help="Only entries in this session")
@click.pass_context
def registry_entries(ctx: click.Context, role: str | None, session: str | None):
    """Show what the registry file records."""
    try:
        records = AgentRegistry(home=ctx.obj["home"]).find(role=role, session=session)
    except CrewError as e:
        fail(e)

    if not records:
        console.print("[yellow]Registry is empty[/yellow]")
        return
    table = Table(title="Registered Agents")
    table.add_column("Target", style="cyan")
    table.add_column("Role", style="green")
    table.add_column("Created")
    table.add_column("Status")
    for record in records:
        table.add_row(record.target, record.role, record.created_at, record.status)
    console.print(table)


@registry.command("status")
def registry_status():
    """Count live agents per session."""
    console.print("[blue]Checking agent status...[/blue]\n")
    try:
        summary = summarize_status(get_tmux())
    except CrewError as e:
        fail(e)

    for session, count in summary.sessions.items():
        console.print(f"[green]Session: {session} - {count} active agents[/green]")
    console.print("\n[cyan]Summary:[/cyan]")
    console.print(f"[green]  Active agents: {summary.active}[/green]")
    console.print(f"[yellow]  Inactive agents: {summary.inactive}[/yellow]")


@registry.command("find")
@click.argument("search_type", type=click.Choice(["role", "session"]))
@click.argument("value")
def registry_find(search_type: str, value: str):
    """Find live agents by window-name ROLE match or by SESSION."""
    console.print("[blue]Searching for agents...[/blue]")
    try:
        tmux = get_tmux()
        if search_type == "role":
            agents = find_by_role(tmux, value)
        else:
            agents = find_in_session(tmux, value)
    except CrewError as e:
        fail(e)

    for agent in agents:
        console.print(f"[green]Found: {agent.target} ({agent.window_name})[/green]")
    if not agents:
        console.print(f"[yellow]No agents found with {search_type}: {value}[/yellow]")


@registry.command("report")
@click.pass_context
def registry_report(ctx: click.Context):
    """Write a markdown status report."""
    try:
        report_file = write_report(get_tmux(), ctx.obj["home"])
    except CrewError as e:
        fail(e)
    console.print(f"[green]✓[/green] Report generated: {report_file}")


@registry.command("cleanup")
@click.option("--dry-run", is_flag=True, help="Only show what would be removed")
@click.pass_context
def registry_cleanup(ctx: click.Context, dry_run: bool):
    """Remove registry entries whose agent is gone."""
    console.print("[yellow]Cleaning up inactive agents...[/yellow]")
    try:
        stale = AgentRegistry(home=ctx.obj["home"]).prune(stale_record_check(get_tmux()), dry_run=dry_run)
    except CrewError as e:
        fail(e)

    verb = "Would clean" if dry_run else "Cleaned"
    for record in stale:
        console.print(f"[yellow]{verb}: {record.target} ({record.role})[/yellow]")
    if stale:
        console.print(f"[green]{verb} {len(stale)} inactive entries[/green]")
    else:
        console.print("[green]Registry is clean - no inactive agents[/green]")


# =============================================================================
# Health
# =============================================================================

@main.command()
@click.argument("session", required=False)
@click.option("--continuous", "-c", is_flag=True, help="Run continuous monitoring")
@click.option("--interval", "-i", default=DEFAULT_INTERVAL, show_default=True, help="Refresh interval in seconds")
@click.pass_context
def health(ctx: click.Context, session: str | None, continuous: bool, interval: int):
    """Check agent health in SESSION (default: all sessions)."""
    try:
        tmux = get_tmux()
        if continuous:
            monitor(tmux, console, session=session, interval=interval, home=ctx.obj["home"])
            return
        report = collect_health(tmux, session)
    except CrewError as e:
        fail(e)
    console.print(render_health(report))


@main.command()
@click.argument("target")
def quick(target: str):
    """Quick responsiveness check of the agent at TARGET (session:window)."""
    try:
        responsive = quick_check(get_tmux(), target)
    except CrewError as e:
        fail(e)
    if responsive:
        console.print("[green]✓ Agent is responsive[/green]")
    else:
        console.print("[red]✗ Agent is not responsive[/red]")
        sys.exit(1)


# =============================================================================
# Project & orchestrator setup
# =============================================================================

@main.command()
@click.argument("project_name")
@click.argument("project_path")
@click.argument(
    "team_size",
    required=False,
    default="auto",
    type=click.Choice(["small", "medium", "large", "auto"]),
)
@click.option("--cli", "cli_command", default=None, help="Assistant CLI to launch")
@click.pass_context
def setup(ctx: click.Context, project_name: str, project_path: str, team_size: str, cli_command: str | None):
    """Set up PROJECT_NAME at PROJECT_PATH with a multi-agent team.

    \b
    Team sizes:
      small  - 1 PM + 1 Engineer
      medium - 1 PM + 2 Engineers + 1 QA
      large  - 1 PM + 3 Engineers + 1 QA + 1 Reviewer
      auto   - pick from the number of source files (default)
    """
    try:
        tmux = get_tmux()
        console.print(Panel(
            f"Setting up project: [bold]{project_name}[/bold]\nPath: {project_path}\nTeam size: {team_size}",
            border_style="blue",
        ))
        result = setup_project(
            project_name,
            project_path,
            team_size,
            tmux=tmux,
            cli_command=cli_command,
            home=ctx.obj["home"],
            notify=_notify,
        )
    except CrewError as e:
        fail(e)

    if team_size == "auto":
        console.print(f"[yellow]Auto-detected team size: {result.team_size.value}[/yellow]")
    console.print(f"[green]{RULE}[/green]")
    console.print("[green]✓ Project setup complete![/green]")
    console.print(f"[green]{RULE}[/green]")
    console.print(f"  Manifest: {result.manifest_path}")
    console.print(f"\n  To attach to the orchestrator: [cyan]tmux attach-session -t {project_name}[/cyan]")
    console.print(f"  To see all windows: [cyan]tmux list-windows -t {project_name}[/cyan]")
    console.print(f'  To message any agent: [cyan]crew send {project_name}:<window> "Your message"[/cyan]')
    console.print("\n[magenta]The Orchestrator is now ready to receive your project requirements![/magenta]")


def _ask_interactive_options(tmux: TmuxManager) -> InteractiveOptions:
    console.print(f"[blue]{RULE}[/blue]")
    console.print("[blue]Orchestrator Interactive Setup[/blue]")
    console.print(f"[blue]{RULE}[/blue]")

    session = Prompt.ask("Enter orchestrator session name", default=DEFAULT_SESSION)
    replace = False
    if tmux.has_session(session):
        console.print(f"[red]Session '{session}' already exists![/red]")
        replace = Confirm.ask("Kill existing session?", default=False)
        if not replace:
            raise SessionExistsError(session)

    interval = IntPrompt.ask("Check-in interval in minutes", default=DEFAULT_SCHEDULE_INTERVAL)

    console.print("\n[yellow]Quality Standards:[/yellow]")
    console.print("1. High - No compromises, extensive testing")
    console.print("2. Balanced - Good quality with pragmatic trade-offs")
    console.print("3. Rapid - Focus on speed, minimum viable quality")
    quality = quality_from_choice(Prompt.ask("Select quality standard", default="1"))

    team_size = Prompt.ask(
        "Default team size",
        choices=[s.value for s in TeamSize],
        default=TeamSize.MEDIUM.value,
    )
    return InteractiveOptions(
        session=session,
        schedule_interval=interval,
        quality=quality,
        team_size=TeamSize(team_size),
        replace_existing=replace,
    )


def _print_interactive_done(result: OrchestratorInit) -> None:
    console.print(f"[green]{RULE}[/green]")
    console.print("[green]✓ Orchestrator initialized successfully![/green]")
    console.print(f"[green]{RULE}[/green]")
    console.print(f"\nTo attach to orchestrator: [cyan]tmux attach-session -t {result.session}[/cyan]")
    console.print("\nWindows:")
    console.print("  0: Orchestrator (main agent)")
    console.print("  1: Health Monitor (continuous monitoring)")
    console.print("  2: Agent Registry (for manual checks)")
    console.print("  3: Logs (for debugging)")


@main.command()
@click.argument("config_file", required=False, type=click.Path(dir_okay=False))
@click.option("--cli", "cli_command", default=None, help="Assistant CLI to launch")
@click.pass_context
def init(ctx: click.Context, config_file: str | None, cli_command: str | None):
    """Initialize an orchestrator from CONFIG_FILE or interactively."""
    home = ctx.obj["home"]
    console.print("[magenta]Crew Orchestrator Initialization[/magenta]")
    console.print("[magenta]" + "=" * 32 + "[/magenta]")

    try:
        tmux = get_tmux()
        kwargs = {"tmux": tmux, "home": home, "cli_command": cli_command, "notify": _notify}

        if config_file is None:
            default_config = get_default_config_path(home)
            if default_config.exists():
                console.print(f"[yellow]Found default config at: {default_config}[/yellow]")
                if Confirm.ask("Use this config?", default=True):
                    config_file = str(default_config)
            else:
                console.print("[yellow]No config found. Creating default config...[/yellow]")
                write_default_config(default_config)
                console.print(f"[green]Default config created at: {default_config}[/green]\n")

        if config_file is not None:
            result = init_from_config(config_file, **kwargs)
            console.print("[green]✓[/green] Orchestrator initialized from config")
        else:
            result = init_interactive(_ask_interactive_options(tmux), **kwargs)
            _print_interactive_done(result)
    except CrewError as e:
        fail(e)

    reference = write_quick_commands(home, result.session)
    console.print(f"\n[blue]Quick reference created at: {os.path.relpath(reference)}[/blue]")


@main.command()
@click.option("--session", default=DEFAULT_SESSION, help="Orchestrator session to show in the reference")
def commands(session: str):
    """Print the quick command reference."""
    console.print(quick_commands(session), markup=False, highlight=False)


if __name__ == "__main__":
    main()
