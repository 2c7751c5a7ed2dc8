"""Shared fixtures for fitout tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from rich.text import Text

from fitout.exceptions import ClaudeCommandError
from fitout.models import AvailablePlugin, InstalledPlugin


def plain(markup: str) -> str:
    """Strip rich markup so assertions read like terminal output."""
    return Text.from_markup(markup).plain


class FakeInventory:
    """In-memory stand-in for `fitout.inventory.ClaudeInventory`."""

    def __init__(
        self,
        installed: list[InstalledPlugin] | None = None,
        available: list[AvailablePlugin] | None = None,
        failing: set[str] | None = None,
    ):
        self.installed = installed or []
        self.available = available or []
        self.failing = failing or set()
        self.installs: list[str] = []
        self.updates: list[tuple[str, str]] = []

    def list_installed(self) -> list[InstalledPlugin]:
        return self.installed

    def list_available(self) -> list[AvailablePlugin]:
        return self.available

    def install(self, plugin_id: str) -> None:
        if plugin_id in self.failing:
            raise ClaudeCommandError("not found")
        self.installs.append(plugin_id)

    def update(self, plugin_id: str, scope: str = "local") -> None:
        if plugin_id in self.failing:
            raise ClaudeCommandError("update failed")
        self.updates.append((plugin_id, scope))


@pytest.fixture(autouse=True)
def isolated_homes(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Point Claude and fitout config homes at temp directories."""
    claude_home = tmp_path / "home" / ".claude"
    fitout_home = tmp_path / "home" / ".config" / "fitout"
    monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(claude_home))
    monkeypatch.setenv("FITOUT_CONFIG_HOME", str(fitout_home))
    return {"claude": claude_home, "fitout": fitout_home}


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory that is the current working directory."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(root)
    return Path.cwd()


def local(plugin_id: str, version: str | None, project_path: Path | str) -> InstalledPlugin:
    return InstalledPlugin(
        id=plugin_id, version=version, scope="local", enabled=True, project_path=str(project_path)
    )


def offer(plugin_id: str, version: str) -> AvailablePlugin:
    return AvailablePlugin(id=plugin_id, version=version, marketplace=plugin_id.split("@")[-1])
