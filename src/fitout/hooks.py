"""Claude Code SessionStart hook that runs ``fitout install --hook``."""

from __future__ import annotations

import json
import logging
import sys
import typing as t
from pathlib import Path

from .exceptions import ConfigFileError
from .paths import claude_settings_path

logger = logging.getLogger(__name__)

HOOK_COMMAND = "fitout install --hook"


def format_hook_error(message: str) -> str:
    """Prefix a hook-mode error so it is recognizable in Claude's stderr.

    Examples
    --------
    >>> format_hook_error("config not found")
    '[fitout] config not found\\n'
    """
    return f"[fitout] {message}\n"


def write_hook_error(message: str) -> None:
    _ = sys.stderr.write(format_hook_error(message))


def read_settings(path: Path) -> dict[str, t.Any]:
    """Read Claude's ``settings.json``; a missing file reads as ``{}``."""
    if not path.exists():
        return {}
    try:
        data = t.cast("object", json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigFileError(f"Failed to read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigFileError(f"{path}: top-level value must be an object")
    return t.cast("dict[str, t.Any]", data)


def _session_start_entries(settings: dict[str, t.Any]) -> list[object]:
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        return []
    entries = t.cast("dict[str, object]", hooks).get("SessionStart")
    if not isinstance(entries, list):
        return []
    return list(t.cast("list[object]", entries))


def has_session_hook(settings: dict[str, t.Any]) -> bool:
    """Check whether a SessionStart hook already runs fitout.

    Examples
    --------
    >>> has_session_hook({})
    False
    >>> has_session_hook(add_session_hook({}))
    True
    >>> has_session_hook({"hooks": {"SessionStart": [{"hooks": None}]}})
    False
    """
    for entry in _session_start_entries(settings):
        if not isinstance(entry, dict):
            continue
        commands = t.cast("dict[str, object]", entry).get("hooks")
        if not isinstance(commands, list):
            continue
        for hook in t.cast("list[object]", commands):
            if isinstance(hook, dict) and HOOK_COMMAND in str(hook.get("command", "")):
                return True
    return False


def add_session_hook(settings: dict[str, t.Any]) -> dict[str, t.Any]:
    """Return a copy of *settings* with the fitout SessionStart hook appended.

    Existing SessionStart entries are kept as they are, including ones fitout
    does not understand.
    """
    updated = dict(settings)
    existing = updated.get("hooks")
    hooks = dict(t.cast("dict[str, t.Any]", existing)) if isinstance(existing, dict) else {}
    session_start = _session_start_entries(updated)
    session_start.append({"hooks": [{"type": "command", "command": HOOK_COMMAND}]})
    hooks["SessionStart"] = session_start
    updated["hooks"] = hooks
    return updated


def install_session_hook(path: Path | None = None) -> bool:
    """Register the hook in Claude's settings.

    Returns
    -------
    bool
        False if the hook was already present.
    """
    path = path or claude_settings_path()
    settings = read_settings(path)
    if has_session_hook(settings):
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(json.dumps(add_session_hook(settings), indent=2) + "\n", encoding="utf-8")
    logger.info(f"Added SessionStart hook to {path}")
    return True
