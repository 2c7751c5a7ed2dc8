"""The live plugin inventory backed by the ``claude`` CLI and marketplace clones."""

from __future__ import annotations

from pathlib import Path

from .claude import install_plugin, list_plugins, update_plugin
from .marketplace import list_available_plugins
from .models import AvailablePlugin, InstalledPlugin
from .paths import marketplaces_dir


class ClaudeInventory:
    """Reads installed plugins from ``claude`` and available ones from disk.

    Also performs installs and updates, so the reconciliation drivers only
    need this one object.
    """

    def __init__(self, marketplaces_root: Path | None = None):
        self.marketplaces_root = marketplaces_root

    def list_installed(self) -> list[InstalledPlugin]:
        return list_plugins()

    def list_available(self) -> list[AvailablePlugin]:
        return list_available_plugins(self.marketplaces_root or marketplaces_dir())

    def install(self, plugin_id: str) -> None:
        install_plugin(plugin_id)

    def update(self, plugin_id: str, scope: str = "local") -> None:
        update_plugin(plugin_id, scope)
