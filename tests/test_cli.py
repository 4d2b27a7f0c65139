"""Tests for the command-line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from proxydeck.adapters.cli import profiles
from proxydeck.adapters.cli.app import app
from proxydeck.infrastructure.bridge import local

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_engine(monkeypatch):
    monkeypatch.setattr(local, "find_engine", lambda: None)
    for name in ("HEADLESS", "STATE_DIR", "REQUIRE_ENGINE", "ENGINE_PATH", "LOG_FILE"):
        monkeypatch.delenv(f"PROXYDECK_{name}", raising=False)


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


def invoke(state_dir: Path, *args, **kwargs):
    env = {"PROXYDECK_REQUIRE_ENGINE": "false"}
    return runner.invoke(app, ["--log-level", "ERROR", "--state-dir", str(state_dir), *args], env=env, **kwargs)


class TestHeadless:
    def test_profile_list_shows_demo_summary(self):
        result = runner.invoke(app, ["--log-level", "ERROR", "--headless", "profile", "list"])
        assert result.exit_code == 0
        assert "1/2 profiles active" in result.output

    def test_status(self):
        result = runner.invoke(app, ["--log-level", "ERROR", "--headless", "status"])
        assert result.exit_code == 0
        assert "3.2.4" in result.output

    def test_router_rejects_bad_address(self):
        result = runner.invoke(app, ["--log-level", "ERROR", "--headless", "hosts", "router", "start", "8080"])
        assert result.exit_code == 1
        assert "Listen address must look like :8080" in result.output


class TestProfileCommands:
    def test_add_then_list(self, state_dir):
        added = invoke(state_dir, "profile", "add", "--name", "edge", "--listen", ":1080", "--remote", "10.0.0.1:1080")
        assert added.exit_code == 0, added.output
        assert "Added profile 'edge' (id 1)" in added.output

        listed = invoke(state_dir, "profile", "list")
        assert listed.exit_code == 0
        assert "0/1 profiles active" in listed.output

    def test_add_validates_before_backend(self, state_dir):
        result = invoke(state_dir, "profile", "add", "--name", "edge", "--listen", ":1080", "--type", "ftp", "--remote", "x")
        assert result.exit_code == 1
        assert "Invalid type: ftp" in result.output

    def test_add_documented_example(self):
        result = runner.invoke(
            app,
            ["--log-level", "ERROR", "--headless", "profile", "add",
             "-n", "Local SOCKS5", "-L", ":1080", "-F", "127.0.0.1:1080", "-t", "forward"],
        )
        assert result.exit_code == 0, result.output
        assert "Added profile 'Local SOCKS5'" in result.output

    def test_add_requires_remote(self, state_dir):
        result = invoke(state_dir, "profile", "add", "-n", "Local SOCKS5", "-L", ":1080", "-t", "forward")
        assert result.exit_code == 2
        assert "--remote" in result.output

    def test_add_prompts_for_missing_password(self, state_dir, monkeypatch):
        asked = []

        def fake_prompt(message, default=None, password=False):
            asked.append((message, password))
            return "s3cret"

        monkeypatch.setattr(profiles.prompt_provider, "prompt", fake_prompt)
        result = invoke(
            state_dir, "profile", "add", "-n", "edge", "-L", ":8080", "-F", "10.0.0.2:3128", "-t", "http",
            "-u", "alice",
        )
        assert result.exit_code == 0, result.output
        assert asked == [("Password for alice", True)]
        assert "s3cret" in (state_dir / "profiles.json").read_text()

    def test_start_stop(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "10.0.0.1:1080")

        started = invoke(state_dir, "profile", "start", "1")
        assert started.exit_code == 0, started.output
        assert "1/1 profiles active" in invoke(state_dir, "profile", "list").output

        again = invoke(state_dir, "profile", "start", "1")
        assert again.exit_code == 1
        assert "profile is already running" in again.output

        assert invoke(state_dir, "profile", "stop", "1").exit_code == 0

    def test_start_without_engine(self, state_dir):
        runner.invoke(app, ["--state-dir", str(state_dir), "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r"])
        result = runner.invoke(app, ["--log-level", "ERROR", "--state-dir", str(state_dir), "profile", "start", "1"])
        assert result.exit_code == 1
        assert "GOST is not available" in result.output

    def test_update(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r")
        result = invoke(state_dir, "profile", "update", "1", "--name", "core")
        assert result.exit_code == 0, result.output
        assert "Updated profile 'core'" in result.output

    def test_remove_asks_for_confirmation(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r")

        declined = invoke(state_dir, "profile", "remove", "1", input="n\n")
        assert "Cancelled" in declined.output
        assert "0/1 profiles active" in invoke(state_dir, "profile", "list").output

        confirmed = invoke(state_dir, "profile", "remove", "1", input="y\n")
        assert confirmed.exit_code == 0, confirmed.output
        assert "Deleted profile 'edge'" in confirmed.output
        assert "No profiles" in invoke(state_dir, "profile", "list").output

    def test_remove_running_profile_fails(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r")
        invoke(state_dir, "profile", "start", "1")
        result = invoke(state_dir, "profile", "remove", "1", "--yes")
        assert result.exit_code == 1
        assert "cannot delete a running profile" in result.output

    def test_remove_unknown(self, state_dir):
        result = invoke(state_dir, "profile", "remove", "9", "--yes")
        assert result.exit_code == 1
        assert "Profile 9 not found" in result.output


class TestHostCommands:
    def test_mapping_and_router(self, state_dir):
        added = invoke(state_dir, "hosts", "add", "-H", "app.local", "--ip", "127.0.0.1", "-p", "3000")
        assert added.exit_code == 0, added.output
        assert "app.local -> http://127.0.0.1:3000 (id 1)" in added.output

        started = invoke(state_dir, "hosts", "router", "start", ":8080")
        assert started.exit_code == 0, started.output

        status = invoke(state_dir, "hosts", "router", "status")
        assert "running on :8080" in status.output

        removed = invoke(state_dir, "hosts", "remove", "1", "--yes")
        assert removed.exit_code == 0, removed.output
        assert "No host mappings" in invoke(state_dir, "hosts", "list").output

    def test_invalid_mapping(self, state_dir):
        result = invoke(state_dir, "hosts", "add", "-H", "app.local", "--ip", "127.0.0.1", "-p", "0")
        assert result.exit_code == 1
        assert "Port must be a positive number" in result.output


class TestLogsCommands:
    def test_recent_and_clear(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r")

        recent = invoke(state_dir, "logs", "recent", "--level", "info")
        assert recent.exit_code == 0
        assert "No log entries" not in recent.output

        assert invoke(state_dir, "logs", "clear").exit_code == 0
        assert "No log entries" in invoke(state_dir, "logs", "recent").output

    def test_recent_by_source(self, state_dir):
        invoke(state_dir, "profile", "add", "-n", "edge", "-L", ":1080", "-F", "r")

        assert "No log entries" not in invoke(state_dir, "logs", "recent", "--source", "api").output
        assert "No log entries" in invoke(state_dir, "logs", "recent", "--source", "gost").output

    def test_timeline_empty(self, state_dir):
        result = invoke(state_dir, "logs", "timeline")
        assert "No activity yet" in result.output


class TestConfigErrors:
    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "missing.toml"), "status"])
        assert result.exit_code == 1
        assert "Configuration file not found" in result.output


class TestLogging:
    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "proxydeck.log"
        result = runner.invoke(app, ["--log-level", "DEBUG", "--log-file", str(log_file), "--headless", "status"])
        assert result.exit_code == 0, result.output
        assert "proxydeck.adapters.cli.app - DEBUG - Configuration" in log_file.read_text()
