"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from dckit.core.provenance import RealRevisionSource, RevisionSource
from dckit.installer import OutputStyle, Printer


@dataclass(frozen=True)
class DckitContext:
    """Immutable context holding all dependencies for dckit commands.

    Created at CLI entry point and threaded through the application.
    Tests construct it directly with fakes.
    """

    revision_source: RevisionSource
    printer: Printer
    cwd: Path  # Current working directory at CLI invocation


def create_context() -> DckitContext:
    """Create the production context."""
    return DckitContext(
        revision_source=RealRevisionSource(),
        printer=Printer(OutputStyle()),
        cwd=Path.cwd(),
    )
