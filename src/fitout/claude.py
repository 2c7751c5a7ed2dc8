"""Thin wrapper around the ``claude`` CLI plugin commands."""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import typing as t

import pydantic

from .exceptions import ClaudeCommandError
from .models import InstalledPlugin

logger = logging.getLogger(__name__)

LIST_TIMEOUT = 60
INSTALL_TIMEOUT = 300

_installed_list = pydantic.TypeAdapter(list[InstalledPlugin])


def claude_env() -> dict[str, str]:
    """Environment for child ``claude`` processes.

    ``CLAUDECODE`` is dropped so the CLI still runs when fitout is itself
    launched from a Claude Code session hook.
    """
    return {key: value for key, value in os.environ.items() if key != "CLAUDECODE"}


def run_claude(args: list[str], timeout: int = LIST_TIMEOUT) -> str:
    """Run ``claude`` with *args* and return its stdout.

    Raises
    ------
    ClaudeCommandError
        If the CLI is not on PATH, times out, or exits non-zero.
    """
    if shutil.which("claude") is None:
        raise ClaudeCommandError("'claude' CLI not found in PATH")

    logger.debug(f"Running claude {' '.join(args)}")
    try:
        result = subprocess.run(  # noqa: S603
            ["claude", *args],  # noqa: S607
            capture_output=True,
            text=True,
            env=claude_env(),
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise ClaudeCommandError(f"claude {args[0]} timed out ({timeout}s)") from exc

    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip() or f"exit {result.returncode}"
        raise ClaudeCommandError(detail)
    return result.stdout


def parse_plugin_list(json_output: str) -> list[InstalledPlugin]:
    """Parse ``claude plugin list --json`` output.

    Examples
    --------
    >>> plugins = parse_plugin_list(
    ...     '[{"id": "a@m", "version": "4.0.3", "scope": "local",'
    ...     ' "enabled": true, "projectPath": "/work/app"}]'
    ... )
    >>> plugins[0].id, plugins[0].project_path
    ('a@m', '/work/app')
    >>> parse_plugin_list('{"unexpected": true}')
    []
    """
    try:
        data = t.cast("object", json.loads(json_output))
    except json.JSONDecodeError as exc:
        raise ClaudeCommandError(f"Unparseable plugin list: {exc}") from exc
    if not isinstance(data, list):
        return []
    try:
        return _installed_list.validate_python(data)
    except pydantic.ValidationError as exc:
        raise ClaudeCommandError(f"Unexpected plugin list format: {exc}") from exc


def list_plugins() -> list[InstalledPlugin]:
    """Return every installed plugin across all scopes and projects."""
    return parse_plugin_list(run_claude(["plugin", "list", "--json"]))


def install_plugin(plugin_id: str, scope: str = "local") -> None:
    run_claude(["plugin", "install", plugin_id, "--scope", scope], timeout=INSTALL_TIMEOUT)
    logger.info(f"Installed {plugin_id} ({scope})")


def update_plugin(plugin_id: str, scope: str = "local") -> None:
    run_claude(["plugin", "update", plugin_id, "--scope", scope], timeout=INSTALL_TIMEOUT)
    logger.info(f"Updated {plugin_id} ({scope})")

