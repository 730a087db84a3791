"""Helpers shared by dckit commands."""

from pathlib import Path

from dckit.core.config import (
    BUNDLE_CONFIG_FILENAME,
    BundleConfig,
    find_bundle_root,
    load_bundle_config,
)
from dckit.installer import DckitError, Printer


def load_config_or_exit(cwd: Path, printer: Printer) -> BundleConfig:
    """Find and load bundle.toml above cwd, exiting with status 1 on failure."""
    root = find_bundle_root(cwd)
    if root is None:
        printer.error(f"No {BUNDLE_CONFIG_FILENAME} found in {cwd} or any parent directory")
        printer.line("  Run this command from inside a bundle repository.")
        raise SystemExit(1)
    try:
        return load_bundle_config(root)
    except DckitError as e:
        printer.report(e)
        raise SystemExit(1) from e
