"""Project and global configuration documents.

The project document (``.claude/fitout.toml``) lists plugin references and
profile names. The global document (``config.toml`` in fitout's config
home) maps marketplace names to their sources.
"""

from __future__ import annotations

import logging
import tomllib
import typing as t
from pathlib import Path

from .exceptions import ConfigFileError
from .models import ProjectConfig
from .paths import global_config_path

logger = logging.getLogger(__name__)

PROJECT_CONFIG_TEMPLATE = """\
# fitout: plugins this project wants installed locally.
# Pin a minimum version with ">=", e.g. "git@pickled-claude-plugins >= 1.2.0".

profiles = []

plugins = [
{plugins}]
"""


def _string_list(data: dict[str, t.Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in t.cast("list[object]", value) if isinstance(item, str)]


def parse_toml(text: str, origin: str) -> dict[str, t.Any]:
    """Parse a TOML document, raising `ConfigFileError` with *origin* on failure."""
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(f"Invalid TOML in {origin}: {exc}") from exc


def parse_config(text: str, origin: str = "fitout.toml") -> ProjectConfig:
    """Parse a project config document.

    Non-string entries in ``plugins`` and ``profiles`` are ignored.

    Examples
    --------
    >>> parse_config('plugins = ["a@m", 3]')
    ProjectConfig(plugins=['a@m'], profiles=[])
    >>> parse_config("plugins = [")  # doctest: +ELLIPSIS
    Traceback (most recent call last):
    ...
    fitout.exceptions.ConfigFileError: Invalid TOML in fitout.toml: ...
    """
    data = parse_toml(text, origin)
    return ProjectConfig(
        plugins=_string_list(data, "plugins"),
        profiles=_string_list(data, "profiles"),
    )


def load_config(path: Path) -> ProjectConfig:
    """Read and parse the project config at *path*."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(f"Failed to read {path}: {exc}") from exc
    return parse_config(text, origin=str(path))


def load_plugin_lines(path: Path) -> list[str]:
    """Read the ``plugins`` array of a profile document."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(f"Failed to read {path}: {exc}") from exc
    return _string_list(parse_toml(text, str(path)), "plugins")


def get_project_config_content(plugins: t.Sequence[str] = ()) -> str:
    """Render a starter ``fitout.toml`` listing *plugins*.

    Examples
    --------
    >>> 'plugins = [\\n  "a@m",\\n]' in get_project_config_content(["a@m"])
    True
    """
    lines = "".join(f'  "{plugin}",\n' for plugin in plugins)
    return PROJECT_CONFIG_TEMPLATE.format(plugins=lines)


# ===== Global config =====


def has_global_config() -> bool:
    return global_config_path().exists()


def read_global_config() -> dict[str, t.Any]:
    """Read the global config, returning ``{}`` if missing or unreadable."""
    path = global_config_path()
    if not path.exists():
        return {}
    try:
        return parse_toml(path.read_text(encoding="utf-8"), str(path))
    except (OSError, ConfigFileError) as exc:
        logger.warning(f"Ignoring global config {path}: {exc}")
        return {}


def get_configured_marketplaces() -> dict[str, str]:
    """Return the ``[marketplaces]`` table as ``{name: source}``."""
    table = read_global_config().get("marketplaces")
    if not isinstance(table, dict):
        return {}
    entries = t.cast("dict[str, object]", table)
    return {name: source for name, source in entries.items() if isinstance(source, str)}


def get_global_config_content(marketplaces: t.Mapping[str, str] | None = None) -> str:
    """Render the global config document.

    Examples
    --------
    >>> print(get_global_config_content({"pickled": "https://github.com/o/pickled"}))
    # fitout global config
    # Marketplaces and their sources
    <BLANKLINE>
    [marketplaces]
    pickled = "https://github.com/o/pickled"
    <BLANKLINE>
    """
    lines = [
        "# fitout global config",
        "# Marketplaces and their sources",
        "",
        "[marketplaces]",
    ]
    if not marketplaces:
        lines.append('# pickled = "https://github.com/technicalpickles/pickled-claude-plugins"')
    else:
        lines.extend(f'{name} = "{source}"' for name, source in marketplaces.items())
    return "\n".join(lines) + "\n"


def create_global_config(marketplaces: t.Mapping[str, str] | None = None) -> bool:
    """Write the global config unless one already exists.

    Returns
    -------
    bool
        True if the file was created.
    """
    path = global_config_path()
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(get_global_config_content(marketplaces), encoding="utf-8")
    logger.info(f"Created global config at {path}")
    return True
