"""Plugin reference parsing and constraint merging.

A plugin reference is a config line such as ``git@pickled`` or
``git@pickled >= 1.2.0``. Only the ``>=`` operator is supported; other
comparison operators are rejected with a message naming the operator.
"""

from __future__ import annotations

import re
import typing as t

from .models import ParseFailure, PluginReference
from .versions import compare_versions, leading_int

UNSUPPORTED_OPERATORS = ("<", "<=", ">", "=", "^", "~")
"""Operators rejected with a helpful message, checked in this order."""

_GEQ = re.compile(r"^(.+?)\s*>=\s*(.*)$")


def is_valid_version(version: str) -> bool:
    """Check that *version* is made of dot-separated non-negative numbers.

    Examples
    --------
    >>> [is_valid_version(v) for v in ("1.0.0", "1.0", "2")]
    [True, True, True]
    >>> [is_valid_version(v) for v in ("1..0", "abc", "-1", "")]
    [False, False, False, False]
    """
    if not version.strip():
        return False
    for part in version.split("."):
        if not part:
            return False
        number = leading_int(part)
        if number is None or number < 0:
            return False
    return True


def _unsupported_operator(line: str) -> str | None:
    for op in UNSUPPORTED_OPERATORS:
        quoted = re.escape(op)
        # attached to the version (^1.0.0) or separated by spaces (< 1.0.0)
        if re.match(rf"^(.+?)\s*{quoted}(\S+)$", line):
            return op
        if re.match(rf"^(.+?)\s+{quoted}\s+(.*)$", line):
            return op
    return None


def parse_plugin_reference(line: str) -> PluginReference | ParseFailure:
    """Parse one plugin reference line.

    Parameters
    ----------
    line : str
        ``<id>`` or ``<id> >= <version>``; surrounding whitespace is ignored.

    Returns
    -------
    PluginReference or ParseFailure
        The parsed reference, or the raw line paired with an error message.

    Examples
    --------
    >>> parse_plugin_reference("git@pickled")
    PluginReference(id='git@pickled', constraint=None)
    >>> parse_plugin_reference("  git@pickled >= 1.2.0 ")
    PluginReference(id='git@pickled', constraint='1.2.0')

    Problems are returned, not raised:

    >>> parse_plugin_reference("git@pickled >=").message
    'Missing version after ">="'
    >>> parse_plugin_reference("git@pickled ^1.0.0").message
    'Unsupported operator "^". Only ">=" is supported.'
    """
    trimmed = line.strip()

    match = _GEQ.match(trimmed)
    if match:
        plugin_id, version = match.group(1), match.group(2).strip()
        if not version:
            return ParseFailure(input=line, message='Missing version after ">="')
        if not is_valid_version(version):
            return ParseFailure(
                input=line,
                message=f'Invalid version "{version}" - expected number segments (e.g., 1.0.0)',
            )
        return PluginReference(id=plugin_id.strip(), constraint=version)

    op = _unsupported_operator(trimmed)
    if op is not None:
        return ParseFailure(
            input=line, message=f'Unsupported operator "{op}". Only ">=" is supported.'
        )

    return PluginReference(id=trimmed, constraint=None)


def parse_plugin_list(
    lines: t.Iterable[str],
) -> tuple[list[PluginReference], list[ParseFailure]]:
    """Parse every line, splitting results into references and failures.

    Examples
    --------
    >>> refs, failures = parse_plugin_list(["a@m", "b@m < 2", "c@m >= 1"])
    >>> [r.id for r in refs]
    ['a@m', 'c@m']
    >>> [f.input for f in failures]
    ['b@m < 2']
    """
    references: list[PluginReference] = []
    failures: list[ParseFailure] = []
    for line in lines:
        result = parse_plugin_reference(line)
        if isinstance(result, ParseFailure):
            failures.append(result)
        else:
            references.append(result)
    return references, failures


def merge_constraints(existing: str | None, incoming: str | None) -> str | None:
    """Combine two minimum versions into the binding one.

    Examples
    --------
    >>> merge_constraints(None, "1.0.0")
    '1.0.0'
    >>> merge_constraints("2.0.0", "1.0.0")
    '2.0.0'
    >>> merge_constraints(None, None) is None
    True
    """
    if existing is None:
        return incoming
    if incoming is None:
        return existing
    if compare_versions(incoming, existing) > 0:
        return incoming
    return existing
