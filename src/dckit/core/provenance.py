"""Build provenance: which commit a generated installer came from."""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"

# Matches `git log --date=format:...`; commit date keeps rebuilds of one commit identical
COMMIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class BuildProvenance:
    """Revision metadata stamped into a generated installer header.

    Purely diagnostic: installer behavior never depends on it.
    """

    revision: str
    timestamp: str

    @classmethod
    def unknown(cls) -> "BuildProvenance":
        return cls(revision=UNKNOWN, timestamp=UNKNOWN)

    @property
    def is_known(self) -> bool:
        return self.revision != UNKNOWN


class RevisionSource(ABC):
    """Abstract source of build provenance for dependency injection."""

    @abstractmethod
    def read_provenance(self, repo_root: Path) -> BuildProvenance:
        """Read the short HEAD revision and its commit date.

        Args:
            repo_root: Directory to query

        Returns:
            Provenance of HEAD, or BuildProvenance.unknown() outside a git
            repository or before the first commit
        """
        ...


class RealRevisionSource(RevisionSource):
    """Production implementation using the git command line."""

    def _git(self, repo_root: Path, *args: str) -> str | None:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=repo_root,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.debug("git executable not found")
            return None
        if result.returncode != 0:
            logger.debug("git %s failed: %s", " ".join(args), result.stderr.strip())
            return None
        return result.stdout.strip()

    def read_provenance(self, repo_root: Path) -> BuildProvenance:
        revision = self._git(repo_root, "rev-parse", "--short", "HEAD")
        if revision is None:
            return BuildProvenance.unknown()
        timestamp = self._git(
            repo_root, "log", "-1", "--format=%cd", f"--date=format:{COMMIT_DATE_FORMAT}"
        )
        return BuildProvenance(revision=revision, timestamp=timestamp or UNKNOWN)
