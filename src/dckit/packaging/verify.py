"""Compare a generated installer against the current bundle sources."""

from dataclasses import dataclass

from dckit.core.config import BundleConfig
from dckit.installer import ArtifactFormatError, parse_payloads
from dckit.packaging.manifest import load_manifest


@dataclass(frozen=True)
class DriftReport:
    """Differences between the embedded payloads and the source files."""

    missing: tuple[str, ...]  # in the manifest, not embedded
    stale: tuple[str, ...]  # embedded with different content
    extra: tuple[str, ...]  # embedded, no longer in the manifest
    out_of_order: bool

    @property
    def is_clean(self) -> bool:
        return not (self.missing or self.stale or self.extra or self.out_of_order)


def verify_installer(config: BundleConfig) -> DriftReport:
    """Check that the installer at config.output embeds exactly the current sources.

    Raises:
        ArtifactFormatError: If the installer does not exist or cannot be parsed
        ManifestError: If a source file is missing
    """
    if not config.output.exists():
        raise ArtifactFormatError(
            f"Installer not found: {config.output}",
            remediation=("Generate it with: dckit build",),
        )

    embedded = {
        payload.path: payload.content
        for payload in parse_payloads(config.output.read_bytes().decode("utf-8"))
    }
    embedded_order = [path for path in embedded if path in config.files]
    manifest = load_manifest(config.source_dir, config.files)

    missing = tuple(source.path for source in manifest.files if source.path not in embedded)
    stale = tuple(
        source.path
        for source in manifest.files
        if source.path in embedded and embedded[source.path] != source.content
    )
    extra = tuple(path for path in embedded if path not in config.files)
    expected_order = [path for path in config.files if path in embedded]
    return DriftReport(
        missing=missing,
        stale=stale,
        extra=extra,
        out_of_order=embedded_order != expected_order,
    )
