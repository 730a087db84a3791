"""Tests for the verify command."""

from pathlib import Path

from click.testing import CliRunner

from dckit.cli.cli import cli
from tests.test_utils.bundle_helpers import build_test_installer, make_context, write_bundle


def test_verify_clean_installer(tmp_path: Path) -> None:
    """Test that a freshly built installer verifies cleanly."""
    build_test_installer(tmp_path, {"a.cfg": "x=1\n", "b.sh": "echo hi\n"})

    runner = CliRunner()
    result = runner.invoke(cli, ["verify"], obj=make_context(tmp_path))

    assert result.exit_code == 0, result.output
    assert "install.py is up to date (2 files)" in result.output


def test_verify_stale_installer_fails(tmp_path: Path) -> None:
    """Test that an edited source makes verify exit 1."""
    config = build_test_installer(tmp_path, {"a.cfg": "x=1\n", "b.sh": "echo hi\n"})
    (config.source_dir / "a.cfg").write_text("x=2\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["verify"], obj=make_context(tmp_path))

    assert result.exit_code == 1
    assert "stale" in result.output
    assert "install.py does not match the bundle sources" in result.output
    assert "Regenerate with: dckit build" in result.output


def test_verify_reordered_manifest_fails(tmp_path: Path) -> None:
    """Test that a manifest reorder is reported."""
    build_test_installer(tmp_path, {"a.cfg": "x=1\n", "b.sh": "echo hi\n"})
    write_bundle(tmp_path, {"a.cfg": "x=1\n", "b.sh": "echo hi\n"}, manifest=["b.sh", "a.cfg"])

    runner = CliRunner()
    result = runner.invoke(cli, ["verify"], obj=make_context(tmp_path))

    assert result.exit_code == 1
    assert "Embedded files are not in bundle.toml order" in result.output


def test_verify_without_installer_fails(tmp_path: Path) -> None:
    """Test that verify before any build exits 1."""
    write_bundle(tmp_path, {"a.cfg": "x=1\n"})

    runner = CliRunner()
    result = runner.invoke(cli, ["verify"], obj=make_context(tmp_path))

    assert result.exit_code == 1
    assert "Installer not found" in result.output
