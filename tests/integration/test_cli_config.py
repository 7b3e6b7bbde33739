"""Integration tests for configuration commands and global options."""

import json

import pytest
from typer.testing import CliRunner

from drivelink import __version__
from drivelink.app import app, register_commands
from drivelink.config import ENV_OVERRIDES

register_commands()


class TestConfigCommands:
    """Integration tests for the config command group."""

    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch):
        for env_var in ENV_OVERRIDES:
            monkeypatch.delenv(env_var, raising=False)

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def invoke(self, runner, tmp_path):
        def _invoke(*args):
            return runner.invoke(app, ["--config-dir", str(tmp_path), *args])
        return _invoke

    def test_show_defaults(self, invoke):
        """Test showing default settings as JSON."""
        result = invoke("-o", "json", "config", "show")

        assert result.exit_code == 0
        values = json.loads(result.stdout)
        assert values["probe_timeout"] == 10.0
        assert values["format_sweep"] is False

    def test_set_then_show(self, invoke, tmp_path):
        """Test that a set value is persisted and shown."""
        result = invoke("config", "set", "probe_timeout", "4.5")
        assert result.exit_code == 0
        assert "probe_timeout = 4.5" in result.output
        assert (tmp_path / "config.toml").exists()

        values = json.loads(invoke("-o", "json", "config", "show").stdout)
        assert values["probe_timeout"] == 4.5

    def test_show_table_sources(self, invoke, monkeypatch):
        """Test that the table lists where values come from."""
        invoke("config", "set", "max_workers", "8")
        monkeypatch.setenv("DRIVELINK_PROBE_TIMEOUT", "3")

        result = invoke("-o", "table", "config", "show")

        assert result.exit_code == 0
        assert "file" in result.stdout
        assert "env" in result.stdout
        assert "default" in result.stdout

    def test_set_invalid_value(self, invoke):
        """Test that an invalid value fails with a configuration error."""
        result = invoke("config", "set", "placeholder_url", "https://drive.google.com/uc?id=X")

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_set_unknown_key(self, invoke):
        """Test that unknown settings are rejected."""
        result = invoke("config", "set", "retries", "3")

        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_reset(self, invoke, tmp_path):
        """Test resetting without a prompt."""
        invoke("config", "set", "max_workers", "8")

        result = invoke("config", "reset", "--yes")

        assert result.exit_code == 0
        assert not (tmp_path / "config.toml").exists()

    def test_reset_cancelled(self, runner, tmp_path):
        """Test that declining the prompt keeps the settings."""
        runner.invoke(app, ["--config-dir", str(tmp_path), "config", "set", "max_workers", "8"])

        result = runner.invoke(app, ["--config-dir", str(tmp_path), "config", "reset"], input="n\n")

        assert result.exit_code == 0
        assert (tmp_path / "config.toml").exists()

    def test_path(self, invoke, tmp_path):
        """Test printing the config file path."""
        result = invoke("config", "path")

        assert result.stdout.strip() == str(tmp_path / "config.toml")


class TestGlobalOptions:
    """Integration tests for options handled by the app callback."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_version(self, runner):
        """Test --version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.stdout.strip() == f"drivelink {__version__}"

    def test_corrupt_config_file(self, runner, tmp_path):
        """Test that an unreadable config file stops the CLI."""
        (tmp_path / "config.toml").write_text("[settings\n")

        result = runner.invoke(app, ["--config-dir", str(tmp_path), "config", "show"])

        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output

    def test_config_dir_from_environment(self, runner, tmp_path, monkeypatch):
        """Test DRIVELINK_CONFIG_DIR."""
        monkeypatch.setenv("DRIVELINK_CONFIG_DIR", str(tmp_path))

        result = runner.invoke(app, ["config", "path"])

        assert result.stdout.strip() == str(tmp_path / "config.toml")

    def test_unknown_output_format(self, runner, tmp_path):
        """Test that an unknown output format is reported."""
        result = runner.invoke(
            app,
            ["--config-dir", str(tmp_path), "-o", "xml", "links", "classify", "https://example.com/a.jpg"],
        )

        assert result.exit_code == 1
        assert "Unknown output format" in result.output
