"""Compare the desired plugin set against what is installed for a project."""

from __future__ import annotations

import typing as t

from .models import InstalledPlugin, PluginDiff, PresentPlugin, ResolvedPlugin


def local_plugins(
    installed: t.Iterable[InstalledPlugin], project_path: str
) -> list[InstalledPlugin]:
    """Keep only ``local`` scope installs bound to *project_path*."""
    return [p for p in installed if p.scope == "local" and p.project_path == project_path]


def diff_plugins(
    desired: t.Sequence[ResolvedPlugin],
    installed: t.Iterable[InstalledPlugin],
    project_path: str,
) -> PluginDiff:
    """Classify desired and installed plugins as missing, present or extra.

    User and global installs, and local installs for other projects, are
    ignored entirely.

    Parameters
    ----------
    desired : Sequence[ResolvedPlugin]
        The resolved desired set.
    installed : Iterable[InstalledPlugin]
        The full inventory across every scope and project.
    project_path : str
        Project root the diff is computed for.

    Returns
    -------
    PluginDiff
        ``missing`` and ``present`` follow desired order, ``extra`` follows
        inventory order. Present entries keep the desired source and
        constraint.

    Examples
    --------
    >>> desired = [ResolvedPlugin(id="y@m", source="project")]
    >>> installed = [
    ...     InstalledPlugin(id="x@m", version="1.0", scope="local", project_path="/p"),
    ...     InstalledPlugin(id="y@m", version="1.0", scope="user"),
    ... ]
    >>> diff = diff_plugins(desired, installed, "/p")
    >>> [p.id for p in diff.missing], [p.id for p in diff.extra], diff.present
    (['y@m'], ['x@m'], [])
    """
    local = local_plugins(installed, project_path)
    installed_by_id = {plugin.id: plugin for plugin in local}
    desired_ids = {plugin.id for plugin in desired}

    diff = PluginDiff()
    for wanted in desired:
        found = installed_by_id.get(wanted.id)
        if found is None:
            diff.missing.append(wanted)
        else:
            diff.present.append(
                PresentPlugin(
                    id=found.id,
                    version=found.version,
                    scope=found.scope,
                    enabled=found.enabled,
                    project_path=found.project_path,
                    source=wanted.source,
                    constraint=wanted.constraint,
                )
            )
    diff.extra = [plugin for plugin in local if plugin.id not in desired_ids]
    return diff
