"""Tests for the top-level CLI app."""

from typer.testing import CliRunner

from namekit import __version__
from namekit.cli.main import app

runner = CliRunner()


class TestMainApp:
    """Tests for command registration and global options."""

    def test_version(self):
        """Test --version prints the package version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"namekit version {__version__}" in result.output

    def test_help_lists_commands(self):
        """Test every command is registered."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("suggest", "apply", "convert", "formats", "config"):
            assert command in result.output

    def test_config_subcommand(self):
        """Test the config sub-app is reachable."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "Preferences file:" in result.output
