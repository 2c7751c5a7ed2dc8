"""Marketplace discovery and management.

Marketplaces are git clones under ``~/.claude/plugins/marketplaces/<name>``,
each carrying a ``.claude-plugin/marketplace.json`` manifest.
"""

from __future__ import annotations

import json
import logging
import re
import typing as t
from pathlib import Path

import pydantic

from .claude import INSTALL_TIMEOUT, run_claude
from .config import get_configured_marketplaces
from .exceptions import ClaudeCommandError
from .models import AvailablePlugin
from .paths import marketplaces_dir

logger = logging.getLogger(__name__)

_GITHUB_REPO = re.compile(r"github\.com/([^/]+/[^/.]+)")


class MarketplacePlugin(pydantic.BaseModel):
    """A plugin entry in a marketplace manifest.

    Examples
    --------
    >>> MarketplacePlugin(name="git", version="1.0.0", source="./plugins/git")
    MarketplacePlugin(name='git', version='1.0.0', source='./plugins/git')
    """

    name: str
    version: str | None = None
    source: str | dict[str, t.Any] | None = None


class MarketplaceManifest(pydantic.BaseModel):
    """The parts of ``marketplace.json`` fitout reads."""

    name: str
    plugins: list[MarketplacePlugin] = pydantic.Field(default_factory=list)


class InstalledMarketplace(pydantic.BaseModel):
    """A marketplace as reported by ``claude plugin marketplace list --json``."""

    name: str
    source: str
    repo: str | None = None
    url: str | None = None
    install_location: str | None = pydantic.Field(default=None, alias="installLocation")


class EnsureMarketplacesResult(pydantic.BaseModel):
    added: list[str] = pydantic.Field(default_factory=list)
    already_installed: list[str] = pydantic.Field(default_factory=list)
    failed: list[tuple[str, str]] = pydantic.Field(default_factory=list)


def _marketplace_dirs(root: Path) -> list[Path]:
    if not root.is_dir():
        return []
    return sorted(d for d in root.iterdir() if d.is_dir())


def load_manifest(path: Path) -> MarketplaceManifest | None:
    """Load a marketplace manifest, returning None if it is malformed."""
    try:
        raw = t.cast("object", json.loads(path.read_text(encoding="utf-8")))
        return MarketplaceManifest.model_validate(raw)
    except (OSError, json.JSONDecodeError, pydantic.ValidationError) as exc:
        logger.warning(f"Skipping malformed marketplace manifest {path}: {exc}")
        return None


def list_available_plugins(root: Path) -> list[AvailablePlugin]:
    """List plugins offered by every marketplace cloned under *root*.

    Plugin ids are ``<plugin>@<marketplace directory>``.
    """
    plugins: list[AvailablePlugin] = []
    for directory in _marketplace_dirs(root):
        manifest_path = directory / ".claude-plugin" / "marketplace.json"
        if not manifest_path.exists():
            continue
        manifest = load_manifest(manifest_path)
        if manifest is None:
            continue
        plugins.extend(
            AvailablePlugin(
                id=f"{entry.name}@{directory.name}",
                version=entry.version,
                marketplace=directory.name,
            )
            for entry in manifest.plugins
        )
    return plugins


def get_installed_marketplaces() -> list[str]:
    """Names of marketplaces cloned locally."""
    return [d.name for d in _marketplace_dirs(marketplaces_dir())]


def is_marketplace_installed(name: str) -> bool:
    return (marketplaces_dir() / name).exists()


def refresh_marketplaces() -> None:
    """Pull the latest manifests for every marketplace."""
    run_claude(["plugin", "marketplace", "update"], timeout=INSTALL_TIMEOUT)


def add_marketplace(source: str) -> None:
    run_claude(["plugin", "marketplace", "add", source], timeout=INSTALL_TIMEOUT)
    logger.info(f"Added marketplace {source}")


def ensure_marketplaces() -> EnsureMarketplacesResult:
    """Add every marketplace from the global config that is not cloned yet.

    A marketplace counts as installed when its directory exists or when
    ``claude`` already knows its source under another name.
    """
    result = EnsureMarketplacesResult()
    for name, source in get_configured_marketplaces().items():
        if is_marketplace_installed(name) or is_marketplace_source_installed(source):
            result.already_installed.append(name)
            continue
        try:
            add_marketplace(source)
        except ClaudeCommandError as exc:
            result.failed.append((name, str(exc)))
        else:
            result.added.append(name)
    return result


def list_installed_marketplaces() -> list[InstalledMarketplace]:
    """Marketplaces known to the ``claude`` CLI, or ``[]`` if it cannot tell."""
    try:
        raw = t.cast("object", json.loads(run_claude(["plugin", "marketplace", "list", "--json"])))
        return pydantic.TypeAdapter(list[InstalledMarketplace]).validate_python(raw)
    except (ClaudeCommandError, json.JSONDecodeError, pydantic.ValidationError) as exc:
        logger.debug(f"Could not list marketplaces: {exc}")
        return []


def normalize_github_source(source: str) -> str | None:
    """Extract ``owner/repo`` from a GitHub URL.

    Examples
    --------
    >>> normalize_github_source("https://github.com/technicalpickles/pickled-claude-plugins.git")
    'technicalpickles/pickled-claude-plugins'
    >>> normalize_github_source("https://gitlab.com/o/r") is None
    True
    """
    match = _GITHUB_REPO.search(source)
    return match.group(1) if match else None


def is_marketplace_source_installed(source: str) -> bool:
    """Check whether a marketplace with this source URL is already added."""
    github_repo = normalize_github_source(source)
    for marketplace in list_installed_marketplaces():
        if marketplace.source == "github" and marketplace.repo and github_repo:
            if marketplace.repo == github_repo:
                return True
        elif marketplace.source == "git" and marketplace.url == source:
            return True
    return False
