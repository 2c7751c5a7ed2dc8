"""Plan updates for a project's outdated local plugins."""

from __future__ import annotations

import typing as t

import pydantic
from rich.markup import escape

from .diff import local_plugins
from .models import AvailablePlugin, InstalledPlugin, OutdatedPlugin
from .output import SYMBOLS, header, plural, version_label
from .versions import find_outdated_plugins


class UpdatePlan(pydantic.BaseModel):
    """Which outdated plugins to update, and why any requested ones are skipped."""

    to_update: list[OutdatedPlugin] = pydantic.Field(default_factory=list)
    up_to_date: dict[str, str | None] = pydantic.Field(default_factory=dict)
    error: str | None = None


def plan_update(
    project_path: str,
    installed: t.Iterable[InstalledPlugin],
    available: t.Iterable[AvailablePlugin],
    plugin_ids: t.Sequence[str] = (),
) -> UpdatePlan:
    """Pick the outdated plugins to update, optionally limited to *plugin_ids*.

    Parameters
    ----------
    project_path : str
        Project whose local installs are considered.
    installed : Iterable[InstalledPlugin]
        The full installed inventory.
    available : Iterable[AvailablePlugin]
        Marketplace snapshot.
    plugin_ids : Sequence[str]
        Requested plugins. Empty means every outdated plugin.

    Returns
    -------
    UpdatePlan
        ``error`` is set when a requested plugin is not installed for the
        project; requested plugins that are current land in ``up_to_date``.

    Examples
    --------
    >>> installed = [InstalledPlugin(id="a@m", version="1.0.0", scope="local", project_path="/p")]
    >>> available = [AvailablePlugin(id="a@m", version="1.1.0", marketplace="m")]
    >>> [p.available_version for p in plan_update("/p", installed, available).to_update]
    ['1.1.0']
    >>> plan_update("/p", installed, available, ["b@m"]).error
    'Plugin "b@m" not installed'
    """
    local = {plugin.id: plugin for plugin in local_plugins(installed, project_path)}
    outdated = find_outdated_plugins(local.values(), available)
    if not plugin_ids:
        return UpdatePlan(to_update=outdated)

    outdated_ids = {plugin.id for plugin in outdated}
    plan = UpdatePlan()
    for plugin_id in plugin_ids:
        if plugin_id not in local:
            return UpdatePlan(error=f'Plugin "{plugin_id}" not installed')
        if plugin_id not in outdated_ids:
            plan.up_to_date[plugin_id] = local[plugin_id].version
    plan.to_update = [plugin for plugin in outdated if plugin.id in plugin_ids]
    return plan


def format_update_plan(plan: UpdatePlan, *, dry_run: bool = False) -> str:
    """Summarize an update plan before (or instead of) running it."""
    lines = [
        f"{SYMBOLS['present']} {escape(plugin_id)} is already up-to-date"
        f" ({escape(version_label(version))})"
        for plugin_id, version in plan.up_to_date.items()
    ]
    if not plan.to_update:
        if not lines:
            lines.append("[green]All plugins are up-to-date.[/green]")
        return "\n".join(lines)

    count = plural(len(plan.to_update), "plugin")
    lines.append(header(f"Would update {count}:" if dry_run else f"Updating {count}..."))
    lines.extend(
        f"  {SYMBOLS['outdated']} {escape(p.id)} v{escape(p.installed_version)}"
        f" → v{escape(p.available_version)}"
        for p in plan.to_update
    )
    return "\n".join(lines)
