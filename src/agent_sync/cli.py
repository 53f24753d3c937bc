from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent_sync.core.config import (
    AgentSyncConfig,
    ConfigError,
    add_agent,
    get_agent_file,
    list_agents,
    load_config,
    remove_agent,
    save_config,
)
from agent_sync.core.errors import LinkError
from agent_sync.core.links import (
    create_link,
    ensure_canonical,
    exists,
    is_link,
    link_infos,
    remove_link,
    repair_all,
    scan_conflicts,
    sync_all,
)
from agent_sync.core.links.batch import resolve_path
from agent_sync.core.links.probe import same_file
from agent_sync.core.models import LinkKind, SyncResult
from agent_sync.core.project import Project, ProjectError, create_project_config, detect_project
from agent_sync.core.registry import (
    RegistryError,
    default_registry_path,
    load_registry,
    register_project,
    save_registry,
    validate_projects,
)
from agent_sync.core.timestamps import utc_to_local
from agent_sync.logging_config import setup_logging


def _version_callback(value: bool) -> None:
    if value:
        try:
            print(f"agent-sync {version('agent-sync')}")
        except PackageNotFoundError:
            print("agent-sync (not installed)")
        raise typer.Exit()


app = typer.Typer(
    name="agent-sync",
    help="Unified agent document management: keep per-agent guides linked to one main guide.",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    version_flag: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        is_eager=True,
        callback=_version_callback,
        is_flag=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        is_flag=True,
        help="Log every classification and filesystem change",
    ),
):
    """Agent-sync: Unified agent document management."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{escape(message)}[/red]")
    return typer.Exit(code=1)


def _load_project() -> tuple[Project, AgentSyncConfig]:
    try:
        project = detect_project()
    except ProjectError as e:
        raise _fail(f"Error: {e}")
    try:
        config = load_config(project.config_path)
    except ConfigError as e:
        raise _fail(f"Configuration error: {e}")
    return project, config


def _print_conflicts(conflicts: list[tuple[str, str]], advice: str) -> None:
    console.print(
        "[red]Error: Found existing agent files with content that would be overwritten:[/red]"
    )
    for agent, mirror in conflicts:
        console.print(f"  - {escape(agent)}: {escape(mirror)}")
    console.print(f"\n{advice}")


def _print_result(result: SyncResult, done: str, failed: str) -> None:
    if result.successes:
        console.print(f"[green]{done} {len(result.successes)} agents:[/green]")
        for agent in result.successes:
            console.print(f"  [green]✓[/green] {escape(agent)}")
    if result.failures:
        console.print(f"[red]{failed} {len(result.failures)} agents:[/red]")
        for agent, error in result.failures:
            console.print(f"  [red]✗[/red] {escape(agent)}: {escape(error)}")


def _register(project: Project, config: AgentSyncConfig) -> None:
    try:
        register_project(project, config, default_registry_path())
    except RegistryError as e:
        console.print(f"[yellow]Warning: Could not update project registry: {escape(str(e))}[/yellow]")
    else:
        console.print("Project registered in system registry.")


@app.command("init")
def init_command():
    """Initialize a new agent-sync project in the current directory."""
    try:
        project = create_project_config(Path.cwd())
    except ProjectError as e:
        raise _fail(f"Failed to initialize project: {e}")
    console.print(f"Created agent-sync configuration: {project.config_path}")

    try:
        config = load_config(project.config_path)
    except ConfigError as e:
        console.print(f"[yellow]Warning: Could not load created configuration: {escape(str(e))}[/yellow]")
        return

    conflicts = scan_conflicts(config.main_guide, config.agents, config.link_kind, root=project.root)
    if conflicts:
        _print_conflicts(conflicts, "Please backup these files or remove them before running init.")
        raise typer.Exit(code=1)

    console.print("Creating initial links...")
    result = sync_all(config.main_guide, config.agents, config.link_kind, root=project.root)
    _print_result(result, "Successfully created links for", "Failed to create links for")
    _register(project, config)


@app.command("add")
def add_command(
    agent: str = typer.Argument(..., help="Agent name, e.g. 'copilot'"),
    filename: str = typer.Argument(..., help="Agent file, e.g. 'COPILOT.md'"),
):
    """Add a new agent file mapping and link it to the main guide."""
    project, config = _load_project()
    updated = add_agent(config, agent, filename)
    try:
        save_config(updated, project.config_path)
    except ConfigError as e:
        raise _fail(f"Failed to save configuration: {e}")

    try:
        create_link(
            resolve_path(updated.main_guide, project.root),
            resolve_path(filename, project.root),
            updated.link_kind,
        )
    except LinkError as e:
        console.print(f"[yellow]Warning: Failed to create link: {escape(str(e))}[/yellow]")
        console.print(f"Added agent '{escape(agent)}' -> '{escape(filename)}' (link creation failed)")
        return
    console.print(f"Added agent '{escape(agent)}' -> '{escape(filename)}'")
    console.print("Created link to main guide.")


@app.command("remove")
def remove_command(
    agent: str = typer.Argument(..., help="Agent name to remove"),
):
    """Remove an agent mapping; its link is deleted, a regular file is left in place."""
    project, config = _load_project()
    filename = get_agent_file(config, agent)
    if filename is None:
        raise _fail(f"Unknown agent: {agent}")
    try:
        save_config(remove_agent(config, agent), project.config_path)
    except ConfigError as e:
        raise _fail(f"Failed to save configuration: {e}")
    console.print(f"Removed agent '{escape(agent)}'")

    mirror = resolve_path(filename, project.root)
    hard_linked = config.link_kind is LinkKind.HARDLINK and same_file(
        resolve_path(config.main_guide, project.root), mirror
    )
    if is_link(mirror) or hard_linked:
        try:
            remove_link(mirror)
        except LinkError as e:
            console.print(f"[yellow]Warning: Failed to remove link: {escape(str(e))}[/yellow]")
        else:
            console.print(f"Removed link {escape(filename)}")
    elif exists(mirror):
        console.print(f"Left {escape(filename)} in place (not a link)")


def _show_all_projects() -> None:
    path = default_registry_path()
    try:
        registry = load_registry(path)
        valid = validate_projects(registry)
        save_registry(valid, path)
    except RegistryError as e:
        raise _fail(f"Error loading project registry: {e}")

    if not valid.projects:
        console.print("No agent-sync projects found in registry.")
        return

    console.print(f"Found {len(valid.projects)} agent-sync projects:\n")
    for i, p in enumerate(valid.projects, start=1):
        console.print(f"{i}. [bold]{escape(p.directory)}[/bold]")
        console.print(f"   Main guide: {escape(p.main_guide)}")
        console.print(f"   Agents: {escape(', '.join(a.name for a in p.agents))}")
        if p.updated_at:
            console.print(f"   Last synced: {utc_to_local(p.updated_at)}")
        status = "[green]✓ Valid[/green]" if p.has_valid_config else "[red]✗ Invalid (config missing)[/red]"
        console.print(f"   Status: {status}\n")


@app.command("status")
def status_command(
    all_projects: bool = typer.Option(
        False,
        "--all",
        "-a",
        is_flag=True,
        help="Show all registered projects",
    ),
):
    """Show link status of every configured agent."""
    if all_projects:
        _show_all_projects()
        return

    project, config = _load_project()
    console.print(f"Project: {project.root}")
    console.print(f"Main guide: {escape(config.main_guide)}")
    if config.link_kind is not LinkKind.SYMLINK:
        console.print(f"Link kind: {config.link_kind.value}")

    agent_names = list_agents(config)
    if not agent_names:
        console.print("  No agents configured")
        return

    table = Table(title=f"Configured Agents ({len(agent_names)})")
    table.add_column("Agent", style="cyan", no_wrap=True)
    table.add_column("File", style="white")
    table.add_column("Status")

    for info in link_infos(config.main_guide, config.agents, config.link_kind, root=project.root):
        style = "green" if info.status.is_linked else "red"
        mark = "✓" if info.status.is_linked else "✗"
        table.add_row(
            info.agent_name,
            info.mirror_path,
            f"[{style}]{mark} {escape(info.status.label)}[/{style}]",
        )
    console.print(table)


@app.command("check")
def check_command():
    """List agent files with content that a repair would merge into the main guide."""
    project, config = _load_project()
    conflicts = scan_conflicts(config.main_guide, config.agents, config.link_kind, root=project.root)
    if not conflicts:
        console.print("[green]No conflicting agent files.[/green]")
        return
    console.print(f"[yellow]{len(conflicts)} agent files hold content not in the main guide:[/yellow]")
    for agent, mirror in conflicts:
        console.print(f"  - {escape(agent)}: {escape(mirror)}")
    raise typer.Exit(code=1)


@app.command("diff")
def diff_command(
    agent: str = typer.Argument(..., help="Agent whose file to compare with the main guide"),
):
    """Show a unified diff from the main guide to an agent file."""
    from agent_sync.core.diff import format_link_diff

    project, config = _load_project()
    filename = get_agent_file(config, agent)
    if filename is None:
        raise _fail(f"Unknown agent: {agent}")
    console.print(
        format_link_diff(
            resolve_path(config.main_guide, project.root),
            resolve_path(filename, project.root),
        )
    )


@app.command("repair")
def repair_command(
    merge: bool = typer.Option(
        False,
        "--merge",
        "-m",
        is_flag=True,
        help="Merge conflicting agent file content into the main guide instead of refusing",
    ),
):
    """Repair broken agent file links."""
    project, config = _load_project()
    main_guide = resolve_path(config.main_guide, project.root)

    try:
        if ensure_canonical(main_guide):
            console.print(f"Main guide file '{escape(config.main_guide)}' not found, created empty file.")
    except LinkError as e:
        raise _fail(f"Failed to create main guide file: {e}")

    conflicts = scan_conflicts(config.main_guide, config.agents, config.link_kind, root=project.root)
    if conflicts and not merge:
        _print_conflicts(
            conflicts,
            "Please backup these files or manually merge their content before running repair,\n"
            "or run `agent-sync repair --merge` to append their content to the main guide.",
        )
        raise typer.Exit(code=1)
    if conflicts:
        console.print(
            f"[yellow]Merging content of {len(conflicts)} agent files into {escape(config.main_guide)}[/yellow]"
        )

    console.print("Repairing agent file links...")
    result = repair_all(config.main_guide, config.agents, config.link_kind, root=project.root)
    _print_result(result, "Successfully repaired", "Failed to repair")
    if result.is_empty:
        console.print("No agents configured.")
    _register(project, config)
    if not result.ok:
        raise typer.Exit(code=1)


@app.command("review")
def review_command():
    """Review agent files interactively and repair them one by one."""
    from agent_sync.tui.app import AgentSyncApp

    project, config = _load_project()
    tui_app = AgentSyncApp(project=project, config=config)
    tui_app.run()
    if tui_app.result is not None and not tui_app.result.is_empty:
        _print_result(tui_app.result, "Repaired", "Failed to repair")
