"""Manifest loading: the ordered source files a bundle embeds."""

from dataclasses import dataclass
from pathlib import Path

from dckit.installer import DckitError


@dataclass(frozen=True)
class SourceFile:
    """A file to embed. Identity is its relative path."""

    path: str
    content: bytes


@dataclass(frozen=True)
class Manifest:
    """Ordered source files. Order drives emission, listing and extraction."""

    files: tuple[SourceFile, ...]

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(source.path for source in self.files)


class ManifestError(DckitError):
    """One or more manifest files are missing.

    Lists every missing file, not just the first one found.
    """

    def __init__(
        self,
        message: str,
        *,
        remediation: tuple[str, ...] = (),
        missing: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message, remediation=remediation)
        self.missing = missing


def missing_files_error(missing: tuple[str, ...], source_dir: Path) -> ManifestError:
    listing = "\n".join(f"  Missing: {path}" for path in missing)
    return ManifestError(
        f"{len(missing)} source file(s) missing from {source_dir}:\n{listing}",
        remediation=(
            "Some source files are missing. Cannot build installer.",
            f"Restore them under {source_dir} or remove them from bundle.toml.",
        ),
        missing=missing,
    )


def find_missing(source_dir: Path, paths: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(path for path in paths if not (source_dir / path).is_file())


def load_manifest(source_dir: Path, paths: tuple[str, ...]) -> Manifest:
    """Read every manifest file, in order.

    Args:
        source_dir: Directory the manifest paths are relative to
        paths: Manifest entries in emission order

    Returns:
        Manifest holding each file's exact bytes

    Raises:
        ManifestError: If any file is missing (all of them are listed)
    """
    missing = find_missing(source_dir, paths)
    if missing:
        raise missing_files_error(missing, source_dir)

    files = tuple(SourceFile(path=path, content=(source_dir / path).read_bytes()) for path in paths)
    return Manifest(files=files)
