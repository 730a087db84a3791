"""dckit CLI entry point.

This package builds a single self-contained installer script that embeds a
bundle of configuration files. See `dckit --help` for details.
"""

from dckit.cli.cli import cli


def main() -> None:
    """CLI entry point used by the `dckit` console script."""
    cli()
