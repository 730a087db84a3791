"""Bundle configuration loaded from bundle.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from dckit.installer import DckitError, InstallPlan

BUNDLE_CONFIG_FILENAME = "bundle.toml"


class BundleConfigError(DckitError):
    """bundle.toml is missing or invalid."""


@dataclass(frozen=True)
class BundleConfig:
    """In-memory representation of `bundle.toml`.

    Example bundle.toml:
      [bundle]
      title = "Secure DevContainer Configuration Installer"
      source_dir = "bundle"
      output = "install.py"
      target_dir = ".devcontainer"
      files = ["devcontainer.json", "Dockerfile", "generate-claude-config.sh"]
      executable = "generate-claude-config.sh"
      features = ["Rootless Podman-compatible container"]
      next_steps = ["1. Open {repo_root} in VSCode"]

      [ignore]
      comment = "Claude Code authentication (auto-generated, keep secret)"
      entries = [".devcontainer/.claude-token"]
    """

    root: Path
    title: str
    source_dir: Path
    output: Path
    target_dir: str
    files: tuple[str, ...]
    executable: str | None
    ignore_entries: tuple[str, ...]
    features: tuple[str, ...]
    next_steps: tuple[str, ...]
    ignore_comment: str | None = None

    def to_install_plan(self) -> InstallPlan:
        return InstallPlan(
            title=self.title,
            target_dir=self.target_dir,
            files=self.files,
            executable=self.executable,
            ignore_entries=self.ignore_entries,
            features=self.features,
            next_steps=self.next_steps,
            ignore_comment=self.ignore_comment,
        )


def find_bundle_root(start: Path) -> Path | None:
    """Walk up from start to the first directory containing bundle.toml."""
    current = start.resolve()
    for directory in (current, *current.parents):
        if (directory / BUNDLE_CONFIG_FILENAME).is_file():
            return directory
    return None


def _require_str(table: dict[str, Any], key: str, section: str) -> str:
    value = table.get(key)
    if not isinstance(value, str) or not value:
        raise BundleConfigError(f"[{section}] {key} must be a non-empty string")
    return value


def _str_or_default(table: dict[str, Any], key: str, section: str, default: str) -> str:
    if key not in table:
        return default
    return _require_str(table, key, section)


def _str_list(table: dict[str, Any], key: str, section: str) -> tuple[str, ...]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise BundleConfigError(f"[{section}] {key} must be a list of strings")
    return tuple(value)


def _single_line(value: str, key: str) -> str:
    if "\n" in value or "\r" in value:
        raise BundleConfigError(f"{key} must not contain line breaks: {value!r}")
    return value


def _check_relative(value: str, key: str, *, allow_root: bool = False) -> str:
    """Reject paths that could escape the directory they are resolved against."""
    _single_line(value, key)
    path = PurePosixPath(value)
    if path.is_absolute() or ".." in path.parts or (str(path) == "." and not allow_root):
        raise BundleConfigError(f"{key} must be a relative path inside the bundle: {value!r}")
    return value


def parse_bundle_config(root: Path, data: dict[str, Any]) -> BundleConfig:
    """Validate parsed TOML data and build a BundleConfig.

    Args:
        root: Directory containing bundle.toml; relative paths resolve against it
        data: Parsed TOML document

    Returns:
        Validated configuration

    Raises:
        BundleConfigError: If a required key is missing or a value is invalid
    """
    bundle = data.get("bundle")
    if not isinstance(bundle, dict):
        raise BundleConfigError("bundle.toml has no [bundle] table")
    ignore = data.get("ignore", {})
    if not isinstance(ignore, dict):
        raise BundleConfigError("[ignore] must be a table")

    files = tuple(_check_relative(path, "files") for path in _str_list(bundle, "files", "bundle"))
    if not files:
        raise BundleConfigError("[bundle] files must list at least one file")
    duplicates = sorted({path for path in files if files.count(path) > 1})
    if duplicates:
        raise BundleConfigError(f"[bundle] files lists duplicates: {', '.join(duplicates)}")

    executable = _require_str(bundle, "executable", "bundle") if "executable" in bundle else None
    if executable is not None and executable not in files:
        raise BundleConfigError(f"[bundle] executable {executable!r} is not listed in files")

    source_dir = _check_relative(
        _str_or_default(bundle, "source_dir", "bundle", "."),
        "source_dir",
        allow_root=True,
    )
    output = _check_relative(_str_or_default(bundle, "output", "bundle", "install.py"), "output")
    target_dir = _check_relative(_require_str(bundle, "target_dir", "bundle"), "target_dir")
    # The installer only creates the final component; nothing else may change before extraction
    if len(PurePosixPath(target_dir).parts) != 1:
        raise BundleConfigError(
            f"target_dir must be a single directory name at the repository root: {target_dir!r}"
        )
    ignore_entries = tuple(
        _single_line(entry, "[ignore] entries") for entry in _str_list(ignore, "entries", "ignore")
    )
    ignore_comment = (
        _single_line(_require_str(ignore, "comment", "ignore"), "[ignore] comment")
        if "comment" in ignore
        else None
    )

    return BundleConfig(
        root=root,
        title=_single_line(_require_str(bundle, "title", "bundle"), "[bundle] title"),
        source_dir=root / source_dir,
        output=root / output,
        target_dir=target_dir,
        files=files,
        executable=executable,
        ignore_entries=ignore_entries,
        features=_str_list(bundle, "features", "bundle"),
        next_steps=_str_list(bundle, "next_steps", "bundle"),
        ignore_comment=ignore_comment,
    )


def load_bundle_config(root: Path) -> BundleConfig:
    """Load bundle.toml from root.

    Raises:
        BundleConfigError: If the file is missing, is not valid TOML, or fails validation
    """
    cfg_path = root / BUNDLE_CONFIG_FILENAME
    if not cfg_path.exists():
        raise BundleConfigError(
            f"{BUNDLE_CONFIG_FILENAME} not found in {root}",
            remediation=(f"Create {cfg_path} with a [bundle] table.",),
        )

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise BundleConfigError(f"{cfg_path} is not valid TOML: {e}") from e
    return parse_bundle_config(root, data)
