"""Tests for the fitout command line interface."""

import json

import pytest
from conftest import FakeInventory, local, offer
from typer.testing import CliRunner

from fitout import __version__
from fitout import cli
from fitout.config import create_global_config
from fitout.exceptions import ClaudeCommandError
from fitout.hooks import HOOK_COMMAND
from fitout.marketplace import EnsureMarketplacesResult
from fitout.paths import claude_settings_path
from fitout.paths import fitout_skill_path
from fitout.paths import global_config_path
from fitout.paths import profiles_dir
from fitout.paths import project_config_path

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_git_above(tmp_path, monkeypatch):
    """Keep project root discovery inside the temp directory."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))


@pytest.fixture
def inventory(monkeypatch):
    fake = FakeInventory()
    monkeypatch.setattr(cli, "get_inventory", lambda: fake)
    return fake


def write_config(project, body: str) -> None:
    path = project_config_path(project)
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(body, encoding="utf-8")


def test_version():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert f"fitout {__version__}" in result.output


class TestStatus:
    """Test `fitout status`."""

    @pytest.mark.usefixtures("project")
    def test_no_config(self, inventory):
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 1
        assert "No fitout.toml found" in result.output

    def test_missing_plugin_fails(self, project, inventory):
        write_config(project, 'plugins = ["a@m", "b@m"]')
        inventory.installed = [local("a@m", "1.0", project)]
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 1
        assert "✓ a@m v1.0 (project)" in result.output
        assert "✗ b@m (missing) (project)" in result.output

    def test_all_present(self, project, inventory):
        write_config(project, 'plugins = ["a@m"]')
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.1")]
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 0
        assert "1 present, 1 outdated" in result.output

    def test_profile_errors_reported(self, project, inventory):
        write_config(project, 'profiles = ["gone"]\nplugins = ["a@m"]')
        inventory.installed = [local("a@m", "1.0", project)]
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 1
        assert "Profile not found: gone" in result.output
        assert "✓ a@m" in result.output

    def test_invalid_config(self, project, inventory):
        write_config(project, "plugins = [")
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 1
        assert "Failed to read config" in result.output

    def test_claude_failure(self, project, monkeypatch):
        write_config(project, 'plugins = ["a@m"]')

        class Broken(FakeInventory):
            def list_installed(self):
                raise ClaudeCommandError("'claude' CLI not found in PATH")

        monkeypatch.setattr(cli, "get_inventory", Broken)
        result = runner.invoke(cli.app, ["status"])
        assert result.exit_code == 1
        assert "not found in PATH" in result.output


class TestInstall:
    """Test `fitout install`."""

    def test_installs_missing(self, project, inventory):
        write_config(project, 'plugins = ["a@m", "b@m"]')
        inventory.installed = [local("a@m", "1.0", project)]
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 0
        assert inventory.installs == ["b@m"]
        assert "1 installed" in result.output

    def test_uses_profiles(self, project, inventory):
        profiles_dir().mkdir(parents=True)
        _ = (profiles_dir() / "default.toml").write_text('plugins = ["d@m"]', encoding="utf-8")
        write_config(project, "plugins = []")
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 0
        assert inventory.installs == ["d@m"]

    def test_dry_run(self, project, inventory):
        write_config(project, 'plugins = ["a@m"]')
        result = runner.invoke(cli.app, ["install", "--dry-run"])
        assert result.exit_code == 0
        assert "Would install:" in result.output
        assert inventory.installs == []

    def test_refuses_on_resolution_errors(self, project, inventory):
        write_config(project, 'plugins = ["a@m < 2.0", "b@m"]')
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 1
        assert "Profile errors:" in result.output
        assert inventory.installs == []

    def test_failure_exit_code(self, project, inventory):
        write_config(project, 'plugins = ["bad@m", "good@m"]')
        inventory.failing = {"bad@m"}
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 1
        assert inventory.installs == ["good@m"]
        assert "1 failed" in result.output

    def test_updates_below_minimum(self, project, inventory):
        write_config(project, 'plugins = ["a@m >= 2.0"]')
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "2.0")]
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 0
        assert inventory.updates == [("a@m", "local")]

    def test_unsatisfiable_exit_code(self, project, inventory):
        write_config(project, 'plugins = ["a@m >= 3.0"]')
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "2.0")]
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 1
        assert "Cannot satisfy constraints:" in result.output

    def test_adds_configured_marketplaces(self, project, inventory, monkeypatch):
        write_config(project, "plugins = []")
        assert create_global_config({"pickled": "https://github.com/o/pickled"})
        monkeypatch.setattr(
            cli, "ensure_marketplaces", lambda: EnsureMarketplacesResult(added=["pickled"])
        )
        result = runner.invoke(cli.app, ["install"])
        assert result.exit_code == 0
        assert "Marketplaces:" in result.output
        assert "+ pickled" in result.output


class TestInstallHook:
    """Test `fitout install --hook`."""

    @pytest.mark.usefixtures("project")
    def test_not_configured(self, inventory):
        result = runner.invoke(cli.app, ["install", "--hook"])
        assert result.exit_code == 0
        assert "FITOUT NOT CONFIGURED" in result.output
        assert "fitout init" in result.output

    def test_reports_installs_as_context(self, project, inventory):
        write_config(project, 'plugins = ["a@m"]')
        result = runner.invoke(cli.app, ["install", "--hook"])
        assert result.exit_code == 0
        assert "<system-reminder>" in result.output
        assert "Fitout installed 1 plugin for this project:" in result.output

    def test_silent_when_nothing_to_do(self, project, inventory):
        write_config(project, 'plugins = ["a@m"]')
        inventory.installed = [local("a@m", "1.0", project)]
        result = runner.invoke(cli.app, ["install", "--hook"])
        assert result.exit_code == 0
        assert "<system-reminder>" not in result.output
        assert inventory.installs == []

    def test_dry_run_changes_nothing(self, project, inventory):
        write_config(project, 'plugins = ["a@m", "b@m >= 2.0"]')
        inventory.installed = [local("b@m", "1.0", project)]
        inventory.available = [offer("b@m", "2.0")]
        result = runner.invoke(cli.app, ["install", "--hook", "--dry-run"])
        assert result.exit_code == 0
        assert "Would install:" in result.output
        assert "<system-reminder>" not in result.output
        assert inventory.installs == []
        assert inventory.updates == []

    def test_errors_prefixed(self, project, inventory):
        write_config(project, 'profiles = ["gone"]')
        result = runner.invoke(cli.app, ["install", "--hook"])
        assert result.exit_code == 1
        assert "[fitout] Profile errors:" in result.output


class TestUpdate:
    """Test `fitout update`."""

    def test_updates_outdated(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project), local("b@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.1"), offer("b@m", "1.0")]
        result = runner.invoke(cli.app, ["update"])
        assert result.exit_code == 0
        assert inventory.updates == [("a@m", "local")]
        assert "Updating 1 plugin..." in result.output

    def test_dry_run(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.1")]
        result = runner.invoke(cli.app, ["update", "--dry-run"])
        assert result.exit_code == 0
        assert "Would update 1 plugin:" in result.output
        assert inventory.updates == []

    def test_unknown_plugin(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project)]
        result = runner.invoke(cli.app, ["update", "ghost@m"])
        assert result.exit_code == 1
        assert 'Plugin "ghost@m" not installed' in result.output

    def test_up_to_date(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.0")]
        result = runner.invoke(cli.app, ["update"])
        assert result.exit_code == 0
        assert "All plugins are up-to-date." in result.output

    def test_failed_update(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.1")]
        inventory.failing = {"a@m"}
        result = runner.invoke(cli.app, ["update", "a@m"])
        assert result.exit_code == 1
        assert "1 update(s) failed." in result.output

    def test_completion_lists_outdated(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project), local("b@m", "1.0", project)]
        inventory.available = [offer("a@m", "1.1"), offer("b@m", "1.0")]
        assert cli._complete_update_ids("") == ["a@m"]
        assert cli._complete_update_ids("b") == []

    def test_completion_without_marketplaces(self, project, inventory):
        inventory.installed = [local("a@m", "1.0", project), local("b@m", "1.0", project)]
        assert cli._complete_update_ids("b") == ["b@m"]


def test_marketplace_refresh(monkeypatch):
    calls: list[bool] = []
    monkeypatch.setattr(cli, "refresh_marketplaces", lambda: calls.append(True))
    result = runner.invoke(cli.app, ["marketplace", "refresh"])
    assert result.exit_code == 0
    assert calls == [True]
    assert "Marketplaces refreshed." in result.output


class TestInit:
    """Test `fitout init`."""

    def test_yes_creates_everything(self, project):
        result = runner.invoke(cli.app, ["init", "--yes"])
        assert result.exit_code == 0
        assert project_config_path(project).exists()
        assert global_config_path().exists()
        assert fitout_skill_path().exists()
        settings = json.loads(claude_settings_path().read_text(encoding="utf-8"))
        assert HOOK_COMMAND in json.dumps(settings["hooks"]["SessionStart"])

    def test_keeps_existing_config(self, project):
        write_config(project, 'plugins = ["mine@m"]')
        result = runner.invoke(cli.app, ["init", "-y"])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert "mine@m" in project_config_path(project).read_text(encoding="utf-8")

    def test_hook_only(self, project):
        result = runner.invoke(cli.app, ["init", "--hook-only"])
        assert result.exit_code == 0
        assert not project_config_path(project).exists()
        assert not fitout_skill_path().exists()
        assert claude_settings_path().exists()

    def test_second_run_reports_existing_hook(self, project):
        _ = runner.invoke(cli.app, ["init", "--hook-only"])
        result = runner.invoke(cli.app, ["init", "--hook-only"])
        assert "SessionStart hook already installed" in result.output

    def test_declined_prompts(self, project):
        result = runner.invoke(cli.app, ["init"], input="n\nn\n")
        assert result.exit_code == 0
        assert not project_config_path(project).exists()
        assert not claude_settings_path().exists()
