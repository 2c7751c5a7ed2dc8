"""Tests for the claude CLI wrapper."""

import subprocess

import pytest

from fitout import claude
from fitout.exceptions import ClaudeCommandError
from fitout.models import InstalledPlugin


class Recorder:
    """Stands in for subprocess.run and remembers the last call."""

    def __init__(self, returncode=0, stdout="", stderr=""):
        self.result = subprocess.CompletedProcess([], returncode, stdout, stderr)
        self.calls: list[tuple[list[str], dict]] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return self.result


@pytest.fixture
def claude_on_path(monkeypatch):
    monkeypatch.setattr(claude.shutil, "which", lambda name: f"/usr/bin/{name}")


class TestParsePluginList:
    """Test parse_plugin_list."""

    def test_full_entry(self):
        output = (
            '[{"id": "superpowers@superpowers-marketplace", "version": "4.0.3",'
            ' "scope": "local", "enabled": true, "projectPath": "/Users/josh/project",'
            ' "installedAt": "2025-01-01T00:00:00Z"}]'
        )
        assert claude.parse_plugin_list(output) == [
            InstalledPlugin(
                id="superpowers@superpowers-marketplace",
                version="4.0.3",
                scope="local",
                enabled=True,
                project_path="/Users/josh/project",
            )
        ]

    def test_user_scope_has_no_project(self):
        plugins = claude.parse_plugin_list('[{"id": "a@m", "version": "1", "scope": "user"}]')
        assert plugins[0].project_path is None
        assert plugins[0].enabled is True

    def test_empty(self):
        assert claude.parse_plugin_list("[]") == []

    def test_invalid_json(self):
        with pytest.raises(ClaudeCommandError, match="Unparseable"):
            _ = claude.parse_plugin_list("not json")

    def test_entry_without_version(self):
        plugins = claude.parse_plugin_list(
            '[{"id": "a@m", "scope": "user"}, {"id": "b@m", "version": "2.0", "scope": "user"}]'
        )
        assert [(p.id, p.version) for p in plugins] == [("a@m", None), ("b@m", "2.0")]

    def test_invalid_entry(self):
        with pytest.raises(ClaudeCommandError, match="Unexpected plugin list format"):
            _ = claude.parse_plugin_list('[{"version": "1.0"}]')


class TestRunClaude:
    """Test run_claude."""

    def test_missing_cli(self, monkeypatch):
        monkeypatch.setattr(claude.shutil, "which", lambda name: None)
        with pytest.raises(ClaudeCommandError, match="not found in PATH"):
            _ = claude.run_claude(["plugin", "list"])

    @pytest.mark.usefixtures("claude_on_path")
    def test_success(self, monkeypatch):
        recorder = Recorder(stdout="[]")
        monkeypatch.setattr(claude.subprocess, "run", recorder)
        monkeypatch.setenv("CLAUDECODE", "1")
        assert claude.run_claude(["plugin", "list", "--json"]) == "[]"
        cmd, kwargs = recorder.calls[0]
        assert cmd == ["claude", "plugin", "list", "--json"]
        assert kwargs["timeout"] == claude.LIST_TIMEOUT
        assert "CLAUDECODE" not in kwargs["env"]

    @pytest.mark.usefixtures("claude_on_path")
    def test_failure_uses_stderr(self, monkeypatch):
        recorder = Recorder(returncode=1, stderr="Plugin not found\n")
        monkeypatch.setattr(claude.subprocess, "run", recorder)
        with pytest.raises(ClaudeCommandError, match="^Plugin not found$"):
            _ = claude.run_claude(["plugin", "install", "x@m"])

    @pytest.mark.usefixtures("claude_on_path")
    def test_failure_without_output(self, monkeypatch):
        monkeypatch.setattr(claude.subprocess, "run", Recorder(returncode=2))
        with pytest.raises(ClaudeCommandError, match="exit 2"):
            _ = claude.run_claude(["plugin", "install", "x@m"])

    @pytest.mark.usefixtures("claude_on_path")
    def test_timeout(self, monkeypatch):
        def slow(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(claude.subprocess, "run", slow)
        with pytest.raises(ClaudeCommandError, match="timed out"):
            _ = claude.run_claude(["plugin", "install", "x@m"], timeout=1)


@pytest.mark.usefixtures("claude_on_path")
def test_install_uses_local_scope(monkeypatch):
    recorder = Recorder()
    monkeypatch.setattr(claude.subprocess, "run", recorder)
    claude.install_plugin("a@m")
    cmd, kwargs = recorder.calls[0]
    assert cmd == ["claude", "plugin", "install", "a@m", "--scope", "local"]
    assert kwargs["timeout"] == claude.INSTALL_TIMEOUT


def test_claude_env_drops_nested_session_marker(monkeypatch):
    monkeypatch.setenv("CLAUDECODE", "1")
    monkeypatch.setenv("KEEP_ME", "yes")
    env = claude.claude_env()
    assert "CLAUDECODE" not in env
    assert env["KEEP_ME"] == "yes"
