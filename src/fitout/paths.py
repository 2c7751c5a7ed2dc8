"""Filesystem locations used by fitout and the Claude CLI.

``CLAUDE_CONFIG_DIR`` relocates the Claude home (default ``~/.claude``) and
``FITOUT_CONFIG_HOME`` relocates fitout's own config (default
``~/.config/fitout``). Both are read on every call so tests can set them
with ``monkeypatch.setenv``.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_CONFIG_NAME = "fitout.toml"

# === Base directories ===


def claude_home() -> Path:
    """Return the Claude config directory."""
    override = os.environ.get("CLAUDE_CONFIG_DIR")
    return Path(override) if override else Path.home() / ".claude"


def fitout_config_home() -> Path:
    """Return fitout's global config directory."""
    override = os.environ.get("FITOUT_CONFIG_HOME")
    return Path(override) if override else Path.home() / ".config" / "fitout"


# === Claude Code paths ===


def claude_settings_path() -> Path:
    return claude_home() / "settings.json"


def claude_skills_dir() -> Path:
    return claude_home() / "skills"


def fitout_skill_path() -> Path:
    return claude_skills_dir() / "fitout" / "SKILL.md"


def marketplaces_dir() -> Path:
    return claude_home() / "plugins" / "marketplaces"


# === fitout paths ===


def global_config_path() -> Path:
    return fitout_config_home() / "config.toml"


def profiles_dir() -> Path:
    return fitout_config_home() / "profiles"


def project_config_path(project_root: Path) -> Path:
    """Return where a project's ``fitout.toml`` lives.

    Examples
    --------
    >>> project_config_path(Path("/work/app")).as_posix()
    '/work/app/.claude/fitout.toml'
    """
    return project_root / ".claude" / PROJECT_CONFIG_NAME
