"""Version comparison and outdated-plugin detection."""

from __future__ import annotations

import re
import typing as t

from .models import AvailablePlugin, InstalledPlugin, OutdatedPlugin

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def leading_int(segment: str) -> int | None:
    """Read the integer at the start of *segment*, ignoring trailing junk.

    Examples
    --------
    >>> leading_int("10")
    10
    >>> leading_int("3rc1")
    3
    >>> leading_int("rc1") is None
    True
    """
    match = _LEADING_INT.match(segment)
    if match is None:
        return None
    return int(match.group(1))


def _segments(version: str) -> list[int]:
    # Unparseable segments count as zero.
    return [leading_int(part) or 0 for part in version.split(".")]


def compare_versions(a: str, b: str) -> int:
    """Compare two dotted versions numerically.

    Returns ``-1`` if *a* < *b*, ``0`` if equal, ``1`` if *a* > *b*. The
    shorter version is padded with zeros.

    Examples
    --------
    >>> compare_versions("1.9.0", "1.10.0")
    -1
    >>> compare_versions("1.0", "1.0.0")
    0
    >>> compare_versions("2", "1.99")
    1
    """
    a_parts = _segments(a)
    b_parts = _segments(b)
    width = max(len(a_parts), len(b_parts))
    a_parts += [0] * (width - len(a_parts))
    b_parts += [0] * (width - len(b_parts))

    for a_val, b_val in zip(a_parts, b_parts, strict=True):
        if a_val < b_val:
            return -1
        if a_val > b_val:
            return 1
    return 0


def satisfies(version: str | None, constraint: str | None) -> bool:
    """Check *version* against a ``>=`` *constraint* (``None`` always passes).

    An unknown version never satisfies a constraint.

    Examples
    --------
    >>> satisfies("1.2.0", "1.2")
    True
    >>> satisfies("1.1.9", "1.2")
    False
    >>> satisfies("0.1", None)
    True
    >>> satisfies(None, "1.0")
    False
    """
    if constraint is None:
        return True
    return bool(version) and compare_versions(t.cast("str", version), constraint) >= 0


def find_outdated_plugins(
    plugins: t.Iterable[InstalledPlugin],
    available: t.Iterable[AvailablePlugin],
) -> list[OutdatedPlugin]:
    """Flag plugins whose marketplace version is newer than the installed one.

    Plugins missing from the marketplace, or with an unknown version on
    either side, are never flagged.
    """
    by_id = {plugin.id: plugin for plugin in available}
    outdated: list[OutdatedPlugin] = []

    for plugin in plugins:
        offer = by_id.get(plugin.id)
        if offer is None or not plugin.version or not offer.version:
            continue
        if compare_versions(plugin.version, offer.version) < 0:
            outdated.append(
                OutdatedPlugin(
                    id=plugin.id,
                    installed_version=plugin.version,
                    available_version=offer.version,
                    scope=plugin.scope,
                    project_path=plugin.project_path,
                )
            )
    return outdated
