"""Tests for apply command."""

import pytest
import typer
from typer.testing import CliRunner

from namekit.cli.commands.apply import apply


@pytest.fixture
def cli():
    """Single-command app wrapping apply."""
    app = typer.Typer()
    app.command()(apply)
    return app


runner = CliRunner()


class TestApplyCommand:
    """Tests for the apply command."""

    def test_rename_create_new(self, cli, sample_text_file):
        """Test renaming keeps the original in create-new mode."""
        result = runner.invoke(cli, [str(sample_text_file), "--name", "meeting-summary"])

        assert result.exit_code == 0
        assert sample_text_file.exists()
        assert (sample_text_file.parent / "meeting-summary.txt").exists()

    def test_convert_replace(self, cli, sample_jpg):
        """Test converting in replace mode removes the original."""
        result = runner.invoke(cli, [str(sample_jpg), "--ext", ".PNG", "--mode", "replace"])

        assert result.exit_code == 0
        assert (sample_jpg.parent / "cat.png").exists()
        assert not sample_jpg.exists()

    def test_extension_for_many_files(self, cli, sample_jpg, sample_png):
        """Test --ext applies to every file given."""
        result = runner.invoke(cli, [str(sample_jpg), str(sample_png), "--ext", "gif"])

        assert result.exit_code == 0
        assert (sample_jpg.parent / "cat.gif").exists()
        assert (sample_png.parent / "logo.gif").exists()

    def test_name_requires_single_file(self, cli, sample_jpg, sample_text_file):
        """Test --name is rejected for several files."""
        result = runner.invoke(cli, [str(sample_jpg), str(sample_text_file), "--name", "x"])

        assert result.exit_code == 1
        assert "single file" in result.output

    def test_nothing_to_apply(self, cli, sample_text_file):
        """Test running without --name or --ext fails."""
        result = runner.invoke(cli, [str(sample_text_file)])

        assert result.exit_code == 1
        assert "Nothing to apply" in result.output

    def test_no_changes(self, cli, sample_text_file):
        """Test a name equal to the current one is a no-op."""
        result = runner.invoke(cli, [str(sample_text_file), "--name", "note"])

        assert result.exit_code == 0
        assert "No changes to apply" in result.output

    def test_unknown_extension(self, cli, sample_text_file):
        """Test unknown extensions are usage errors."""
        result = runner.invoke(cli, [str(sample_text_file), "--ext", "xyz"])

        assert result.exit_code == 2

    def test_target_exists_exits_with_error(self, cli, temp_dir):
        """Test a failing entry makes the command exit 1."""
        source = temp_dir / "a.txt"
        source.write_text("a", encoding="utf-8")
        (temp_dir / "b.txt").write_text("b", encoding="utf-8")

        result = runner.invoke(cli, [str(source), "--name", "b", "--mode", "replace"])

        assert result.exit_code == 1
        assert "1 failed" in result.output
        assert source.exists()
        assert (temp_dir / "b.txt").read_text(encoding="utf-8") == "b"
