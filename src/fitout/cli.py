"""fitout command line interface.

Examples
--------
Show what the current project wants and what is installed:

    fitout status

Install missing plugins (what the SessionStart hook runs, quietly):

    fitout install --hook
"""

from __future__ import annotations

import logging
import typing as t
from pathlib import Path

import rich.console
import typer
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import (
    create_global_config,
    get_configured_marketplaces,
    get_project_config_content,
    has_global_config,
    load_config,
)
from .context import find_config_path, resolve_project_root
from .diff import local_plugins
from .exceptions import ClaudeCommandError, ConfigFileError
from .hooks import install_session_hook, write_hook_error
from .install import (
    NOT_CONFIGURED_HOOK_MESSAGE,
    apply_install_plan,
    format_dry_run,
    format_install_result,
    format_install_result_hook,
    plan_install,
)
from .inventory import ClaudeInventory
from .marketplace import ensure_marketplaces, refresh_marketplaces
from .models import ProjectConfig, ResolutionResult
from .output import SYMBOLS, dim, format_context_line, header, version_label
from .paths import profiles_dir, project_config_path
from .profiles import DirectoryProfileStore, resolve_profiles
from .skill import install_skill
from .status import build_status, format_status
from .update import format_update_plan, plan_update
from .versions import find_outdated_plugins

app = typer.Typer(
    help="Context-aware plugin manager for Claude Code.",
    no_args_is_help=True,
)
marketplace_app = typer.Typer(help="Manage plugin marketplaces.", no_args_is_help=True)
app.add_typer(marketplace_app, name="marketplace")

console = rich.console.Console()
err_console = rich.console.Console(stderr=True)

NO_CONFIG_MESSAGE = "No fitout.toml found. Run `fitout init` to create one."


def get_inventory() -> ClaudeInventory:
    return ClaudeInventory()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"fitout {__version__}")
        raise typer.Exit()


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    verbose: t.Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
    version: t.Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version."),
    ] = False,
) -> None:
    """Context-aware plugin manager for Claude Code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> t.NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(1)


def _load_project(cwd: Path) -> tuple[Path, ProjectConfig] | None:
    config_path = find_config_path(cwd)
    if config_path is None:
        return None
    return resolve_project_root(cwd), load_config(config_path)


def _resolve(config: ProjectConfig) -> ResolutionResult:
    return resolve_profiles(DirectoryProfileStore(profiles_dir()), config)


def _refresh() -> None:
    try:
        refresh_marketplaces()
    except ClaudeCommandError as exc:
        err_console.print(
            f"[yellow]Warning:[/yellow] marketplace refresh failed: {escape(str(exc))}"
        )


def _complete_update_ids(incomplete: str) -> list[str]:
    """Outdated plugin ids, or every local plugin when no marketplace data exists."""
    try:
        project_root = str(resolve_project_root(Path.cwd()))
        inventory = get_inventory()
        installed = inventory.list_installed()
        available = inventory.list_available()
    except ClaudeCommandError:
        return []

    local = local_plugins(installed, project_root)
    if available:
        ids = [p.id for p in find_outdated_plugins(local, available)]
    else:
        ids = [p.id for p in local]
    return [plugin_id for plugin_id in ids if plugin_id.startswith(incomplete)]


@app.command()
def status(
    refresh: t.Annotated[
        bool, typer.Option("--refresh", help="Update marketplaces before checking.")
    ] = False,
) -> None:
    """Show desired vs installed plugins for this project."""
    cwd = Path.cwd()
    try:
        project = _load_project(cwd)
    except ConfigFileError as exc:
        _fail(f"Failed to read config: {exc}")
    if project is None:
        _fail(NO_CONFIG_MESSAGE)
    project_root, config = project

    if refresh:
        _refresh()

    resolution = _resolve(config)
    inventory = get_inventory()
    try:
        report = build_status(
            resolution, inventory.list_installed(), inventory.list_available(), str(project_root)
        )
    except ClaudeCommandError as exc:
        _fail(str(exc))

    console.print(format_context_line(project_root, cwd) + format_status(report))
    raise SystemExit(report.exit_code)


def _install_hook_mode(cwd: Path, *, dry_run: bool) -> None:
    try:
        project = _load_project(cwd)
    except ConfigFileError as exc:
        write_hook_error(f"Failed to read config: {exc}")
        raise SystemExit(1) from exc
    if project is None:
        console.print(NOT_CONFIGURED_HOOK_MESSAGE, markup=False, highlight=False, soft_wrap=True)
        return
    project_root, config = project

    resolution = _resolve(config)
    if resolution.errors:
        write_hook_error("Profile errors:\n" + "\n".join(f"  - {e}" for e in resolution.errors))
        raise SystemExit(1)

    inventory = get_inventory()
    try:
        plan = plan_install(
            resolution.plugins,
            inventory.list_installed(),
            inventory.list_available(),
            str(project_root),
        )
    except ClaudeCommandError as exc:
        write_hook_error(str(exc))
        raise SystemExit(1) from exc

    if dry_run:
        console.print(format_dry_run(plan))
        return

    result = apply_install_plan(plan, inventory)
    for failure in result.failed:
        write_hook_error(f"Failed to install {failure.id}: {failure.error}")
    for entry in result.unsatisfiable:
        write_hook_error(
            f"{entry.plugin_id} {version_label(entry.installed_version)} does not satisfy"
            f" >= {entry.required_constraint}"
        )

    output = format_install_result_hook(result)
    if output:
        console.print(output, markup=False, highlight=False, soft_wrap=True)
    if result.failed:
        raise SystemExit(1)


@app.command()
def install(
    dry_run: t.Annotated[
        bool, typer.Option("--dry-run", help="Show what would change without applying.")
    ] = False,
    hook: t.Annotated[
        bool, typer.Option("--hook", help="Session hook mode: quiet, errors on stderr.")
    ] = False,
) -> None:
    """Install missing plugins and update ones below their minimum version."""
    cwd = Path.cwd()
    if hook:
        _install_hook_mode(cwd, dry_run=dry_run)
        return

    try:
        project = _load_project(cwd)
    except ConfigFileError as exc:
        _fail(f"Failed to read config: {exc}")
    if project is None:
        _fail(NO_CONFIG_MESSAGE)
    project_root, config = project

    if has_global_config() and get_configured_marketplaces():
        added = ensure_marketplaces()
        if added.added:
            console.print(header("Marketplaces:"))
            for name in added.added:
                console.print(f"  {SYMBOLS['install']} {escape(name)}")
            console.print()
        for name, error in added.failed:
            err_console.print(
                f"[yellow]Warning:[/yellow] could not add marketplace {escape(name)}:"
                f" {escape(error)}"
            )

    resolution = _resolve(config)
    if resolution.errors:
        console.print(header("Profile errors:"))
        for error in resolution.errors:
            console.print(f"  {SYMBOLS['missing']} {escape(error)}")
        raise SystemExit(1)

    inventory = get_inventory()
    try:
        plan = plan_install(
            resolution.plugins,
            inventory.list_installed(),
            inventory.list_available(),
            str(project_root),
        )
    except ClaudeCommandError as exc:
        _fail(str(exc))

    context = format_context_line(project_root, cwd)
    if dry_run:
        console.print(context + format_dry_run(plan))
        return

    result = apply_install_plan(plan, inventory)
    console.print(context + format_install_result(result))
    if not result.ok:
        raise SystemExit(1)


@app.command()
def update(
    plugins: t.Annotated[
        list[str] | None,
        typer.Argument(
            help="Plugins to update (default: all outdated).",
            autocompletion=_complete_update_ids,
        ),
    ] = None,
    refresh: t.Annotated[
        bool, typer.Option("--refresh", help="Update marketplaces before checking.")
    ] = False,
    dry_run: t.Annotated[
        bool, typer.Option("--dry-run", help="Show what would change without applying.")
    ] = False,
) -> None:
    """Update outdated plugins installed for this project."""
    project_root = resolve_project_root(Path.cwd())
    if refresh:
        _refresh()

    inventory = get_inventory()
    try:
        plan = plan_update(
            str(project_root),
            inventory.list_installed(),
            inventory.list_available(),
            plugins or [],
        )
    except ClaudeCommandError as exc:
        _fail(str(exc))

    if plan.error:
        _fail(plan.error)

    console.print(format_update_plan(plan, dry_run=dry_run))
    if dry_run or not plan.to_update:
        return

    failed = 0
    for outdated in plan.to_update:
        try:
            inventory.update(outdated.id, outdated.scope)
        except ClaudeCommandError as exc:
            failed += 1
            console.print(f"  {SYMBOLS['missing']} {escape(outdated.id)} {dim(f'- {exc}')}")
        else:
            console.print(f"  {SYMBOLS['present']} {escape(outdated.id)}")

    if failed:
        console.print(f"\n[red bold]{failed} update(s) failed.[/red bold]")
        raise SystemExit(1)


@marketplace_app.command("refresh")
def marketplace_refresh() -> None:
    """Pull the latest plugin listings for every marketplace."""
    try:
        refresh_marketplaces()
    except ClaudeCommandError as exc:
        _fail(str(exc))
    console.print("[green]Marketplaces refreshed.[/green]")


@app.command()
def init(
    yes: t.Annotated[bool, typer.Option("--yes", "-y", help="Accept all defaults.")] = False,
    hook_only: t.Annotated[
        bool, typer.Option("--hook-only", help="Only register the SessionStart hook.")
    ] = False,
) -> None:
    """Set up fitout for this project and register the session hook."""
    if not hook_only:
        project_root = resolve_project_root(Path.cwd())
        config_path = project_config_path(project_root)
        if config_path.exists():
            console.print(f"{SYMBOLS['present']} {escape(str(config_path))} already exists")
        elif yes or typer.confirm(f"Create {config_path}?", default=True):
            config_path.parent.mkdir(parents=True, exist_ok=True)
            _ = config_path.write_text(get_project_config_content(), encoding="utf-8")
            console.print(f"{SYMBOLS['install']} Created {escape(str(config_path))}")

        if create_global_config():
            console.print(f"{SYMBOLS['install']} Created global config")
        if install_skill():
            console.print(f"{SYMBOLS['install']} Installed fitout skill")

    wants_hook = yes or hook_only or typer.confirm(
        "Install plugins automatically on session start?", default=True
    )
    if not wants_hook:
        return
    try:
        added = install_session_hook()
    except ConfigFileError as exc:
        _fail(str(exc))
    if added:
        console.print(f"{SYMBOLS['install']} Added SessionStart hook")
    else:
        console.print(f"{SYMBOLS['present']} SessionStart hook already installed")


if __name__ == "__main__":
    app()
