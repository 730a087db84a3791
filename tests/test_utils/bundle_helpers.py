"""Helpers for writing bundle fixtures and building installers in tests."""

import json
from pathlib import Path

from dckit.core.config import BundleConfig, load_bundle_config
from dckit.core.context import DckitContext
from dckit.core.provenance import BuildProvenance
from dckit.installer import (
    EmbeddedFile,
    InstallPlan,
    Installer,
    OutputStyle,
    Printer,
    load_payloads,
)
from dckit.packaging.packager import build_installer
from tests.fakes.console import FakeConsole
from tests.fakes.git import FakeGit
from tests.fakes.revision import FakeRevisionSource

TEST_PROVENANCE = BuildProvenance(revision="abc1234", timestamp="2025-10-13 16:56:35")


def _toml_list(values: list[str] | tuple[str, ...]) -> str:
    # JSON strings are valid TOML basic strings
    return "[" + ", ".join(json.dumps(value) for value in values) + "]"


def write_bundle(
    root: Path,
    files: dict[str, str | bytes],
    *,
    title: str = "Test Installer",
    target_dir: str = ".target",
    executable: str | None = None,
    ignore_entries: tuple[str, ...] = (),
    ignore_comment: str | None = None,
    features: tuple[str, ...] = (),
    next_steps: tuple[str, ...] = (),
    source_dir: str = "src",
    output: str = "install.py",
    manifest: list[str] | None = None,
) -> BundleConfig:
    """Write source files and a bundle.toml under root, then load it.

    Args:
        root: Bundle root directory (created if missing)
        files: Source files to write, relative to source_dir
        manifest: Paths to list in bundle.toml; defaults to the keys of files

    Returns:
        The loaded BundleConfig
    """
    root.mkdir(parents=True, exist_ok=True)
    for path, content in files.items():
        destination = root / source_dir / path
        destination.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        destination.write_bytes(data)

    listed = list(files) if manifest is None else manifest
    lines = [
        "[bundle]",
        f"title = {json.dumps(title)}",
        f"source_dir = {json.dumps(source_dir)}",
        f"output = {json.dumps(output)}",
        f"target_dir = {json.dumps(target_dir)}",
        f"files = {_toml_list(listed)}",
        f"features = {_toml_list(features)}",
        f"next_steps = {_toml_list(next_steps)}",
    ]
    if executable is not None:
        lines.append(f"executable = {json.dumps(executable)}")
    lines.extend(["", "[ignore]", f"entries = {_toml_list(ignore_entries)}"])
    if ignore_comment is not None:
        lines.append(f"comment = {json.dumps(ignore_comment)}")
    (root / "bundle.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return load_bundle_config(root)


def build_test_installer(root: Path, files: dict[str, str | bytes], **kwargs) -> BundleConfig:
    """Write a bundle under root and build its installer with test provenance."""
    config = write_bundle(root, files, **kwargs)
    build_installer(config, TEST_PROVENANCE)
    return config


def make_context(cwd: Path, *, provenance: BuildProvenance = TEST_PROVENANCE) -> DckitContext:
    """Create a DckitContext with a fake revision source and plain output."""
    return DckitContext(
        revision_source=FakeRevisionSource(provenance=provenance),
        printer=Printer(OutputStyle.plain()),
        cwd=cwd,
    )


def make_installer(
    config: BundleConfig,
    *,
    git: FakeGit,
    console: FakeConsole,
    cwd: Path,
    force_upgrade: bool = False,
) -> Installer:
    """Create an Installer for a built bundle, reading payloads from its output."""
    plan = config.to_install_plan()
    return Installer(
        plan=plan,
        payloads=load_payloads(config.output, plan),
        git=git,
        console=console,
        printer=Printer(OutputStyle.plain()),
        cwd=cwd,
        force_upgrade=force_upgrade,
        program="install.py",
    )


def make_payloads(files: dict[str, str]) -> tuple[EmbeddedFile, ...]:
    return tuple(
        EmbeddedFile(path=path, terminator=f"EOF_{index}", content=content.encode("utf-8"))
        for index, (path, content) in enumerate(files.items())
    )


def make_plan(files: tuple[str, ...], **kwargs) -> InstallPlan:
    defaults: dict = {
        "title": "Test Installer",
        "target_dir": ".target",
        "executable": None,
        "ignore_entries": (),
    }
    defaults.update(kwargs)
    return InstallPlan(files=files, **defaults)


def snapshot_tree(root: Path) -> dict[str, bytes | None]:
    """Map every path below root to its bytes (None for directories)."""
    if not root.exists():
        return {}
    return {
        str(path.relative_to(root)): (None if path.is_dir() else path.read_bytes())
        for path in sorted(root.rglob("*"))
    }
