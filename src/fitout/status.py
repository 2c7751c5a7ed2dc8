"""Read-only view of desired vs installed plugins for a project.

Unlike ``install``, status keeps going when resolution reported errors: it
lists them first and then shows whatever could be resolved.
"""

from __future__ import annotations

import typing as t

import pydantic
from rich.markup import escape

from .diff import diff_plugins
from .models import (
    AvailablePlugin,
    InstalledPlugin,
    OutdatedPlugin,
    PluginDiff,
    ResolutionResult,
)
from .output import SYMBOLS, dim, header, provenance, version_label
from .versions import find_outdated_plugins, satisfies


class StatusReport(pydantic.BaseModel):
    resolution: ResolutionResult
    diff: PluginDiff
    outdated: list[OutdatedPlugin] = pydantic.Field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.resolution.errors or self.diff.missing else 0


def build_status(
    resolution: ResolutionResult,
    installed: t.Iterable[InstalledPlugin],
    available: t.Iterable[AvailablePlugin],
    project_path: str,
) -> StatusReport:
    diff = diff_plugins(resolution.plugins, installed, project_path)
    return StatusReport(
        resolution=resolution,
        diff=diff,
        outdated=find_outdated_plugins(diff.present, available),
    )


def format_status(report: StatusReport) -> str:
    """Render a status report.

    One line per plugin: ``✓`` present, ``✗`` missing, ``?`` installed but
    not configured. Present plugins show their version, an ``↑`` marker when
    the marketplace has something newer, and the minimum they fail to meet.
    """
    lines: list[str] = []
    errors = report.resolution.errors
    if errors:
        lines.append(header("Configuration errors:"))
        lines.extend(f"  {SYMBOLS['missing']} {escape(error)}" for error in errors)
        lines.append("")

    newer = {p.id: p.available_version for p in report.outdated}
    for plugin in report.diff.present:
        line = f"{SYMBOLS['present']} {escape(plugin.id)} {dim(version_label(plugin.version))}"
        if plugin.id in newer:
            line += f" {SYMBOLS['outdated']} [yellow]v{escape(newer[plugin.id])} available[/yellow]"
        if not satisfies(plugin.version, plugin.constraint):
            line += f" [red](needs >= {escape(str(plugin.constraint))})[/red]"
        lines.append(f"{line} {provenance(plugin.source)}")

    for missing in report.diff.missing:
        wanted = f" >= {missing.constraint}" if missing.constraint else ""
        lines.append(
            f"{SYMBOLS['missing']} {escape(missing.id + wanted)} "
            f"[red](missing)[/red] {provenance(missing.source)}"
        )

    for extra in report.diff.extra:
        lines.append(f"{SYMBOLS['extra']} {escape(extra.id)} {dim('(not in config)')}")

    overrides = report.resolution.constraint_overrides
    if overrides:
        lines.append("")
        lines.extend(
            f"{SYMBOLS['warning']} {escape(o.plugin_id)}: project wants >= "
            f"{escape(o.project_constraint)}, {escape(o.winning_source)} requires >= "
            f"{escape(o.winning_constraint)}"
            for o in overrides
        )

    summary = [
        f"{len(report.diff.present)} present" if report.diff.present else None,
        f"[red]{len(report.diff.missing)} missing[/red]" if report.diff.missing else None,
        f"[yellow]{len(report.diff.extra)} extra[/yellow]" if report.diff.extra else None,
        f"[yellow]{len(report.outdated)} outdated[/yellow]" if report.outdated else None,
    ]
    lines.append("")
    lines.append(", ".join(s for s in summary if s) or "No plugins configured")
    return "\n".join(lines)
