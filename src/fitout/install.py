"""Plan and apply installs that bring a project in line with its config.

Missing plugins are installed. Present plugins whose version is below the
resolved constraint are updated when the marketplace offers a satisfying
version, and reported as unsatisfiable otherwise. Extra plugins are left
alone.
"""

from __future__ import annotations

import typing as t

import pydantic
from rich.markup import escape

from .diff import diff_plugins
from .exceptions import ClaudeCommandError
from .models import AvailablePlugin, InstalledPlugin, PluginDiff, PresentPlugin, ResolvedPlugin
from .output import SYMBOLS, dim, header, plural, version_label
from .versions import satisfies

NOT_CONFIGURED_HOOK_MESSAGE = "\n".join(
    [
        "⚠️ FITOUT NOT CONFIGURED FOR THIS PROJECT ⚠️",
        "",
        "IMPORTANT: Before doing anything else, inform the user:",
        "\"I notice fitout (your plugin manager) isn't set up for this project.",
        'Run `fitout init` to configure plugins, or create an empty .claude/fitout.toml to skip."',
        "",
        "This message will stop appearing once fitout is configured.",
    ]
)


class Installer(t.Protocol):
    def install(self, plugin_id: str) -> None: ...

    def update(self, plugin_id: str, scope: str = "local") -> None: ...


class UnsatisfiableConstraint(pydantic.BaseModel):
    """An installed plugin below its minimum that no marketplace version fixes."""

    plugin_id: str
    installed_version: str | None = None
    required_constraint: str
    marketplace_version: str | None = None


class InstallFailure(pydantic.BaseModel):
    id: str
    error: str


class InstallPlan(pydantic.BaseModel):
    diff: PluginDiff
    to_update: list[PresentPlugin] = pydantic.Field(default_factory=list)
    unsatisfiable: list[UnsatisfiableConstraint] = pydantic.Field(default_factory=list)

    @property
    def to_install(self) -> list[ResolvedPlugin]:
        return self.diff.missing

    @property
    def already_present(self) -> list[str]:
        pending = {p.id for p in self.to_update} | {u.plugin_id for u in self.unsatisfiable}
        return [p.id for p in self.diff.present if p.id not in pending]

    @property
    def has_work(self) -> bool:
        return bool(self.to_install or self.to_update)


class InstallResult(pydantic.BaseModel):
    installed: list[str] = pydantic.Field(default_factory=list)
    updated: list[str] = pydantic.Field(default_factory=list)
    failed: list[InstallFailure] = pydantic.Field(default_factory=list)
    already_present: list[str] = pydantic.Field(default_factory=list)
    unsatisfiable: list[UnsatisfiableConstraint] = pydantic.Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.unsatisfiable


def plan_install(
    desired: t.Sequence[ResolvedPlugin],
    installed: t.Iterable[InstalledPlugin],
    available: t.Iterable[AvailablePlugin],
    project_path: str,
) -> InstallPlan:
    """Decide what to install and update for *project_path*.

    Examples
    --------
    >>> plan = plan_install(
    ...     [ResolvedPlugin(id="a@m", source="project", constraint="2.0")],
    ...     [InstalledPlugin(id="a@m", version="1.0", scope="local", project_path="/p")],
    ...     [AvailablePlugin(id="a@m", version="2.1", marketplace="m")],
    ...     "/p",
    ... )
    >>> [p.id for p in plan.to_update], plan.unsatisfiable
    (['a@m'], [])
    """
    diff = diff_plugins(desired, installed, project_path)
    offers = {plugin.id: plugin.version for plugin in available}
    plan = InstallPlan(diff=diff)

    for plugin in diff.present:
        if satisfies(plugin.version, plugin.constraint):
            continue
        constraint = t.cast("str", plugin.constraint)
        offered = offers.get(plugin.id)
        if offered and satisfies(offered, constraint):
            plan.to_update.append(plugin)
        else:
            plan.unsatisfiable.append(
                UnsatisfiableConstraint(
                    plugin_id=plugin.id,
                    installed_version=plugin.version,
                    required_constraint=constraint,
                    marketplace_version=offered,
                )
            )
    return plan


def apply_install_plan(plan: InstallPlan, installer: Installer) -> InstallResult:
    """Run the plan's installs and updates, collecting every failure."""
    result = InstallResult(
        already_present=plan.already_present,
        unsatisfiable=list(plan.unsatisfiable),
    )
    for missing in plan.to_install:
        try:
            installer.install(missing.id)
        except ClaudeCommandError as exc:
            result.failed.append(InstallFailure(id=missing.id, error=str(exc)))
        else:
            result.installed.append(missing.id)

    for present in plan.to_update:
        try:
            installer.update(present.id, present.scope)
        except ClaudeCommandError as exc:
            result.failed.append(InstallFailure(id=present.id, error=str(exc)))
        else:
            result.updated.append(present.id)
    return result


def format_dry_run(plan: InstallPlan) -> str:
    """Describe what `apply_install_plan` would do."""
    if not plan.has_work and not plan.unsatisfiable:
        return f"{SYMBOLS['present']} [green]All {len(plan.diff.present)} plugins present[/green]"

    lines: list[str] = []
    if plan.to_install:
        lines.append(header("Would install:"))
        lines.extend(f"  {SYMBOLS['install']} {escape(p.id)}" for p in plan.to_install)
    if plan.to_update:
        lines.append(header("Would update:"))
        for p in plan.to_update:
            needs = dim(f"{version_label(p.version)}, needs >= {p.constraint}")
            lines.append(f"  {SYMBOLS['outdated']} {escape(p.id)} {needs}")
    if plan.unsatisfiable:
        lines.extend(_format_unsatisfiable(plan.unsatisfiable))
    return "\n".join(lines)


def _format_unsatisfiable(entries: t.Sequence[UnsatisfiableConstraint]) -> list[str]:
    lines = [header("Cannot satisfy constraints:")]
    for entry in entries:
        lines.append(f"  {SYMBOLS['missing']} {escape(entry.plugin_id)}")
        lines.append(f"      Installed: {escape(entry.installed_version or 'unknown')}")
        lines.append(f"      Required:  >= {escape(entry.required_constraint)}")
        lines.append(f"      Marketplace: {escape(entry.marketplace_version or 'not found')}")
    return lines


def format_install_result(result: InstallResult) -> str:
    """Render an install run for the terminal."""
    if not (result.installed or result.updated or result.failed or result.unsatisfiable):
        return (
            f"{SYMBOLS['present']} "
            f"[green]All {len(result.already_present)} plugins present[/green]"
        )

    sections: list[list[str]] = []
    if result.installed:
        sections.append(
            [header("Installed:")]
            + [f"  {SYMBOLS['install']} {escape(i)}" for i in result.installed]
        )
    if result.updated:
        sections.append(
            [header("Updated:")] + [f"  {SYMBOLS['outdated']} {escape(i)}" for i in result.updated]
        )
    if result.failed:
        sections.append(
            [header("Failed:")]
            + [
                f"  {SYMBOLS['missing']} {escape(f.id)} {dim(f'- {f.error}')}"
                for f in result.failed
            ]
        )
    if result.unsatisfiable:
        sections.append(_format_unsatisfiable(result.unsatisfiable))

    summary = [
        f"[cyan]{len(result.installed)} installed[/cyan]" if result.installed else None,
        f"[cyan]{len(result.updated)} updated[/cyan]" if result.updated else None,
        f"[red]{len(result.failed)} failed[/red]" if result.failed else None,
        f"[red]{len(result.unsatisfiable)} unsatisfiable[/red]" if result.unsatisfiable else None,
    ]
    body = "\n\n".join("\n".join(section) for section in sections)
    return f"{body}\n\n{', '.join(s for s in summary if s)}"


def format_install_result_hook(result: InstallResult) -> str:
    """Render an install run as context for a Claude Code session hook.

    Silent unless something was installed; failures go to stderr instead.

    Examples
    --------
    >>> format_install_result_hook(InstallResult(already_present=["a@m"]))
    ''
    >>> print(format_install_result_hook(InstallResult(installed=["a@m"])))
    <system-reminder>
    Fitout installed 1 plugin for this project:
      - a@m
    <BLANKLINE>
    User should restart Claude Code to activate them.
    User can run `fitout status` to see configured plugins.
    </system-reminder>
    """
    if not result.installed:
        return ""

    return "\n".join(
        [
            "<system-reminder>",
            f"Fitout installed {plural(len(result.installed), 'plugin')} for this project:",
            *(f"  - {plugin_id}" for plugin_id in result.installed),
            "",
            "User should restart Claude Code to activate them.",
            "User can run `fitout status` to see configured plugins.",
            "</system-reminder>",
        ]
    )
