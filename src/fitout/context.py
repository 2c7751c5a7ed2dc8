"""Locate the project a command is running for."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .paths import project_config_path

logger = logging.getLogger(__name__)


def resolve_project_root(cwd: Path) -> Path:
    """Return the git top-level directory containing *cwd*, or *cwd* itself."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],  # noqa: S607
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug(f"git rev-parse failed in {cwd}: {exc}")
        return cwd

    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        return cwd
    return Path(root)


def find_config_path(cwd: Path) -> Path | None:
    """Return the project's ``fitout.toml`` if it exists."""
    path = project_config_path(resolve_project_root(cwd))
    return path if path.exists() else None
