"""Fake RevisionSource implementation for testing."""

from pathlib import Path

from dckit.core.provenance import BuildProvenance, RevisionSource


class FakeRevisionSource(RevisionSource):
    """Returns a fixed provenance and records which roots were queried."""

    def __init__(self, *, provenance: BuildProvenance) -> None:
        self._provenance = provenance
        self._queried: list[Path] = []

    def read_provenance(self, repo_root: Path) -> BuildProvenance:
        self._queried.append(repo_root)
        return self._provenance

    @property
    def queried(self) -> list[Path]:
        return list(self._queried)
