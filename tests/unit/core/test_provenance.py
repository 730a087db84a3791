"""Tests for build provenance from git."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from dckit.core.provenance import BuildProvenance, RealRevisionSource


def _completed(stdout: str, returncode: int = 0) -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = ""
    return result


def test_read_provenance_returns_short_revision_and_commit_date(tmp_path: Path) -> None:
    """Test that revision and commit date come from git."""
    with patch("dckit.core.provenance.subprocess.run") as mock_run:
        mock_run.side_effect = [_completed("abc1234\n"), _completed("2025-10-13 16:56:35\n")]

        provenance = RealRevisionSource().read_provenance(tmp_path)

    assert provenance == BuildProvenance(revision="abc1234", timestamp="2025-10-13 16:56:35")
    assert provenance.is_known
    first_call = mock_run.call_args_list[0]
    assert first_call.args[0] == ["git", "rev-parse", "--short", "HEAD"]
    assert first_call.kwargs["cwd"] == tmp_path


def test_read_provenance_outside_repository_is_unknown(tmp_path: Path) -> None:
    """Test that a failing git rev-parse yields the unknown provenance."""
    with patch("dckit.core.provenance.subprocess.run") as mock_run:
        mock_run.return_value = _completed("", returncode=128)

        provenance = RealRevisionSource().read_provenance(tmp_path)

    assert provenance == BuildProvenance.unknown()
    assert not provenance.is_known
    assert mock_run.call_count == 1


def test_read_provenance_without_git_is_unknown(tmp_path: Path) -> None:
    """Test that a missing git executable yields the unknown provenance."""
    with patch("dckit.core.provenance.subprocess.run", side_effect=FileNotFoundError):
        provenance = RealRevisionSource().read_provenance(tmp_path)

    assert provenance == BuildProvenance.unknown()


def test_read_provenance_with_unreadable_date(tmp_path: Path) -> None:
    """Test that a known revision with a failing date lookup keeps the revision."""
    with patch("dckit.core.provenance.subprocess.run") as mock_run:
        mock_run.side_effect = [_completed("abc1234\n"), _completed("", returncode=1)]

        provenance = RealRevisionSource().read_provenance(tmp_path)

    assert provenance == BuildProvenance(revision="abc1234", timestamp="unknown")
