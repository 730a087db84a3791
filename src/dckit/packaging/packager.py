"""Generate the self-contained installer script.

A generated installer has four parts, in order:

1. Header: shebang, title and build provenance comments.
2. Runtime: a check that click is importable, then the source of
   `dckit.installer`, verbatim.
3. Payloads: one block per manifest file between the payload section
   markers. A block is `#<<TOKEN ENCODING path`, then `#` + each encoded
   line, then `#TOKEN`. Text files are stored line for line; any other bytes
   are stored as base64. Everything is a comment, so Python never parses
   payload content.
4. Footer: an `InstallPlan` literal and the `__main__` entry point.
"""

import logging
import os
from dataclasses import dataclass
from functools import cache
from pathlib import Path

from dckit import installer
from dckit.core.config import BundleConfig
from dckit.core.provenance import BuildProvenance
from dckit.installer import (
    BLOCK_OPEN,
    LINE_PREFIX,
    PAYLOAD_SECTION_END,
    PAYLOAD_SECTION_MARKER,
    InstallPlan,
    encode_payload,
    make_executable,
    payload_encoding,
)
from dckit.packaging.manifest import SourceFile, load_manifest
from dckit.packaging.terminator import assign_terminators

logger = logging.getLogger(__name__)

SHEBANG = "#!/usr/bin/env python3"

# Runs before the runtime imports click, so a missing click is a clear error
DEPENDENCY_CHECK = """\
try:
    import click  # noqa: F401
except ImportError:
    import sys

    sys.stderr.write(
        "This installer needs the click package.\\n"
        "Install it with: python3 -m pip install --user click\\n"
    )
    raise SystemExit(1) from None
"""


@cache
def get_runtime_source() -> str:
    """Source of the installer runtime that every generated script carries."""
    return Path(installer.__file__).read_text(encoding="utf-8")


@dataclass(frozen=True)
class EmbeddingBlock:
    """One payload and the token that bounds it."""

    source: SourceFile
    terminator: str

    @property
    def encoding(self) -> str:
        return payload_encoding(self.source.content)

    def render(self) -> str:
        lines = encode_payload(self.source.content, self.encoding)
        body = "".join(f"{LINE_PREFIX}{line}\n" for line in lines)
        return (
            f"{BLOCK_OPEN}{self.terminator} {self.encoding} {self.source.path}\n"
            f"{body}"
            f"{LINE_PREFIX}{self.terminator}\n"
        )


@dataclass(frozen=True)
class GeneratedScript:
    """A fully rendered installer, before it is written to disk."""

    provenance: BuildProvenance
    header: str
    runtime: str
    blocks: tuple[EmbeddingBlock, ...]
    footer: str

    @property
    def terminators(self) -> tuple[str, ...]:
        return tuple(block.terminator for block in self.blocks)

    def render(self) -> str:
        runtime = self.runtime if self.runtime.endswith("\n") else self.runtime + "\n"
        payloads = "\n".join(block.render() for block in self.blocks)
        return (
            f"{self.header}\n"
            f"{DEPENDENCY_CHECK}\n\n"
            f"{runtime}\n\n"
            f"{PAYLOAD_SECTION_MARKER}\n"
            f"{payloads}"
            f"{PAYLOAD_SECTION_END}\n\n"
            f"{self.footer}"
        )


@dataclass(frozen=True)
class BuildResult:
    """Result of writing an installer."""

    output: Path
    size: int
    script: GeneratedScript


def render_header(title: str, provenance: BuildProvenance) -> str:
    return (
        f"{SHEBANG}\n"
        f"# {title}\n"
        "# Self-contained installer with all configuration files embedded\n"
        f"# Generated from commit: {provenance.revision}\n"
        f"# Build date: {provenance.timestamp}\n"
    )


def _render_tuple(values: tuple[str, ...]) -> str:
    if not values:
        return "()"
    items = "".join(f"        {value!r},\n" for value in values)
    return f"(\n{items}    )"


def render_footer(plan: InstallPlan) -> str:
    """Render the plan as a Python literal plus the installer entry point."""
    return (
        "PLAN = InstallPlan(\n"
        f"    title={plan.title!r},\n"
        f"    target_dir={plan.target_dir!r},\n"
        f"    files={_render_tuple(plan.files)},\n"
        f"    executable={plan.executable!r},\n"
        f"    ignore_entries={_render_tuple(plan.ignore_entries)},\n"
        f"    features={_render_tuple(plan.features)},\n"
        f"    next_steps={_render_tuple(plan.next_steps)},\n"
        f"    ignore_comment={plan.ignore_comment!r},\n"
        ")\n"
        "\n"
        'if __name__ == "__main__":\n'
        "    raise SystemExit(main(PLAN, Path(__file__).resolve()))\n"
    )


def generate_script(config: BundleConfig, provenance: BuildProvenance) -> GeneratedScript:
    """Render an installer for config without touching the output path.

    Raises:
        ManifestError: If any manifest file is missing
    """
    manifest = load_manifest(config.source_dir, config.files)
    terminators = assign_terminators(manifest.files)
    blocks = tuple(
        EmbeddingBlock(source=source, terminator=terminator)
        for source, terminator in zip(manifest.files, terminators, strict=True)
    )
    return GeneratedScript(
        provenance=provenance,
        header=render_header(config.title, provenance),
        runtime=get_runtime_source(),
        blocks=blocks,
        footer=render_footer(config.to_install_plan()),
    )


def write_script(script: GeneratedScript, output: Path) -> int:
    """Write script to output atomically and mark it executable.

    The script is written to a temporary sibling first, so output is either
    the previous installer or the complete new one.

    Returns:
        Number of bytes written
    """
    data = script.render().encode("utf-8")
    output.parent.mkdir(parents=True, exist_ok=True)
    temporary = output.with_name(f".{output.name}.tmp")
    try:
        temporary.write_bytes(data)
        make_executable(temporary)
        os.replace(temporary, output)
    finally:
        temporary.unlink(missing_ok=True)
    logger.debug("Wrote %d bytes to %s", len(data), output)
    return len(data)


def build_installer(config: BundleConfig, provenance: BuildProvenance) -> BuildResult:
    """Build the installer described by config.

    Raises:
        ManifestError: If any manifest file is missing; nothing is written
    """
    script = generate_script(config, provenance)
    size = write_script(script, config.output)
    return BuildResult(output=config.output, size=size, script=script)
