"""Self-contained installer runtime.

The packager copies this module verbatim into every generated installer,
followed by the embedded payload blocks and an ``InstallPlan`` literal.
Generated installers run standalone, so imports here are limited to the
standard library and click. Nothing in this module may import from the rest
of the dckit package.
"""

import base64
import logging
import os
import shlex
import shutil
import stat
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import click

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

# Key that cancels the confirmation prompt (ASCII 27)
CANCEL_KEY = "\x1b"

# Lines framing the payload section of a generated installer
PAYLOAD_SECTION_MARKER = "# ---- embedded payloads ----"
PAYLOAD_SECTION_END = "# ---- end of embedded payloads ----"

# Payload block layout: "#<<TOKEN ENCODING path", "#" + each encoded line, "#TOKEN"
BLOCK_OPEN = "#<<"
LINE_PREFIX = "#"

# Payload encodings named in each block header
TEXT_ENCODING = "text"
BASE64_ENCODING = "base64"
BASE64_LINE_WIDTH = 76

# Characters that may appear in a text payload's comment lines
_COMMENT_SAFE_CONTROLS = frozenset("\t\n\x0c")

RULE = "━" * 60


# ============================================================================
# Errors
# ============================================================================


class DckitError(Exception):
    """Base error carrying operator-facing remediation lines.

    Every remediation line should be something the operator can act on
    directly, usually an exact command.
    """

    def __init__(self, message: str, *, remediation: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.remediation = remediation


class ArtifactFormatError(DckitError):
    """A generated installer is malformed or does not match its install plan."""


class InstallerError(DckitError):
    """Fatal installer condition. Always maps to exit code 1."""


class RepositoryEnvironmentError(InstallerError):
    """No git working tree encloses the invocation directory."""


class TargetConflictError(InstallerError):
    """The target directory exists and overwriting it was not authorized."""


class SafetyError(InstallerError):
    """Upgrade requested but the target has no version-control recovery path."""


class ExtractionError(InstallerError):
    """Writing the payloads failed before anything reached the target."""


class FinalizeError(InstallerError):
    """The payloads were written but a follow-up step failed.

    The remediation lists the steps left to do by hand.
    """


# ============================================================================
# Output
# ============================================================================


@dataclass(frozen=True)
class OutputStyle:
    """Colours used by the printer. ``None`` disables colour for that role."""

    info: str | None = "blue"
    success: str | None = "green"
    warning: str | None = "yellow"
    error: str | None = "red"
    emphasis: str | None = "yellow"

    @classmethod
    def plain(cls) -> "OutputStyle":
        return cls(info=None, success=None, warning=None, error=None, emphasis=None)


class Printer:
    """Status output for humans. Writes to stderr."""

    def __init__(self, style: OutputStyle) -> None:
        self._style = style

    def line(self, message: str = "") -> None:
        click.echo(message, err=True)

    def _symbol(self, symbol: str, color: str | None, message: str) -> None:
        self.line(click.style(symbol, fg=color) + " " + message)

    def info(self, message: str) -> None:
        self._symbol("ℹ", self._style.info, message)

    def success(self, message: str) -> None:
        self._symbol("✓", self._style.success, message)

    def warning(self, message: str) -> None:
        self._symbol("⚠", self._style.warning, message)

    def error(self, message: str) -> None:
        self._symbol("✗", self._style.error, message)

    def emphasize(self, text: str) -> str:
        return click.style(text, fg=self._style.emphasis)

    def rule(self) -> None:
        self.line(RULE)

    def banner(self, title: str) -> None:
        self.line()
        self.rule()
        self.line(f"  {title}")
        self.rule()
        self.line()

    def report(self, error: DckitError) -> None:
        """Print an error followed by its remediation lines."""
        self.error(error.message)
        if error.remediation:
            self.line()
            for remediation in error.remediation:
                self.line(f"  {remediation}")
        self.line()


# ============================================================================
# Gateways
# ============================================================================


class Git(ABC):
    """Git queries needed by the installer."""

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the working tree root enclosing cwd.

        Args:
            cwd: Directory to start the search from

        Returns:
            Path to the repository root, or None if cwd is not inside a
            git working tree (or git is unavailable)
        """
        ...

    @abstractmethod
    def count_tracked_files(self, repo_root: Path, path: Path) -> int:
        """Count files under path that are recorded in the git index.

        Args:
            repo_root: Repository root to run git from
            path: File or directory to inspect

        Returns:
            Number of tracked files at or below path

        Raises:
            subprocess.CalledProcessError: If git fails
        """
        ...


class RealGit(Git):
    """Git queries through the git command line."""

    def get_repository_root(self, cwd: Path) -> Path | None:
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.debug("git executable not found")
            return None
        if result.returncode != 0:
            logger.debug("git rev-parse failed in %s: %s", cwd, result.stderr.strip())
            return None
        return Path(result.stdout.strip())

    def count_tracked_files(self, repo_root: Path, path: Path) -> int:
        result = subprocess.run(
            ["git", "ls-files", "-z", "--", str(path)],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
        return len([entry for entry in result.stdout.split("\0") if entry])


class Console(ABC):
    """Blocking keyboard input."""

    @abstractmethod
    def read_key(self) -> str:
        """Block until a single key is pressed and return it.

        Returns an empty string when input is closed.
        """
        ...


class InteractiveConsole(Console):
    """Reads one keystroke from the terminal without waiting for Enter.

    When stdin is not a terminal (piped input) the next character of stdin is
    used instead.
    """

    def read_key(self) -> str:
        if not sys.stdin.isatty():
            return sys.stdin.read(1)
        try:
            return click.getchar()
        except EOFError:
            return ""


# ============================================================================
# Install plan and payloads
# ============================================================================


@dataclass(frozen=True)
class InstallPlan:
    """What a generated installer installs. Rendered literally into its footer."""

    title: str
    target_dir: str
    files: tuple[str, ...]
    executable: str | None
    ignore_entries: tuple[str, ...]
    features: tuple[str, ...] = ()
    next_steps: tuple[str, ...] = ()
    ignore_comment: str | None = None


@dataclass(frozen=True)
class EmbeddedFile:
    """One payload as recovered from a generated installer."""

    path: str
    terminator: str
    content: bytes
    encoding: str = TEXT_ENCODING


def payload_encoding(content: bytes) -> str:
    """Choose how content is stored in the installer's comment lines.

    UTF-8 text without carriage returns, NUL or other control characters is
    stored line for line, so the installer stays readable. Anything else is
    stored as base64.
    """
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return BASE64_ENCODING
    if any(char < " " and char not in _COMMENT_SAFE_CONTROLS for char in text) or "\x7f" in text:
        return BASE64_ENCODING
    return TEXT_ENCODING


def encode_payload(content: bytes, encoding: str) -> list[str]:
    """Split content into the lines stored after the comment prefix.

    Text is split on newlines only; the trailing empty element that split
    keeps makes the join in decode_payload exact.
    """
    if encoding == BASE64_ENCODING:
        data = base64.b64encode(content).decode("ascii")
        return [
            data[start : start + BASE64_LINE_WIDTH]
            for start in range(0, len(data), BASE64_LINE_WIDTH)
        ]
    return content.decode("utf-8").split("\n")


def decode_payload(lines: list[str], encoding: str) -> bytes:
    """Inverse of encode_payload.

    Raises:
        ValueError: If base64 lines are corrupt or the encoding is unknown
    """
    if encoding == BASE64_ENCODING:
        return base64.b64decode("".join(lines), validate=True)
    if encoding == TEXT_ENCODING:
        return "\n".join(lines).encode("utf-8")
    raise ValueError(f"Unknown payload encoding: {encoding}")


def parse_payloads(text: str) -> tuple[EmbeddedFile, ...]:
    """Recover the embedded payloads from the text of a generated installer.

    Args:
        text: Full installer source

    Returns:
        Payloads in the order they were embedded

    Raises:
        ArtifactFormatError: If the payload section or a terminator is missing
    """
    lines = text.split("\n")
    if PAYLOAD_SECTION_MARKER not in lines:
        raise ArtifactFormatError("Installer has no embedded payload section")

    payloads: list[EmbeddedFile] = []
    index = lines.index(PAYLOAD_SECTION_MARKER) + 1
    while index < len(lines):
        line = lines[index]
        if line == PAYLOAD_SECTION_END:
            return tuple(payloads)
        if not line.startswith(BLOCK_OPEN):
            index += 1
            continue

        fields = line[len(BLOCK_OPEN) :].split(" ", 2)
        if len(fields) != 3 or not all(fields):
            raise ArtifactFormatError(f"Malformed payload header on line {index + 1}: {line}")
        terminator, encoding, path = fields

        closing = LINE_PREFIX + terminator
        body: list[str] = []
        index += 1
        while index < len(lines) and lines[index] != closing:
            if not lines[index].startswith(LINE_PREFIX):
                raise ArtifactFormatError(
                    f"Unprefixed line {index + 1} inside payload {path}",
                )
            body.append(lines[index][len(LINE_PREFIX) :])
            index += 1
        if index == len(lines):
            raise ArtifactFormatError(f"Payload {path} is missing its terminator {terminator}")

        try:
            content = decode_payload(body, encoding)
        except ValueError as e:
            raise ArtifactFormatError(f"Payload {path} cannot be decoded: {e}") from e
        payloads.append(
            EmbeddedFile(path=path, terminator=terminator, content=content, encoding=encoding)
        )
        index += 1

    raise ArtifactFormatError("Installer payload section is not terminated")


def load_payloads(artifact_path: Path, plan: InstallPlan) -> tuple[EmbeddedFile, ...]:
    """Read the payloads of the installer at artifact_path and check them against plan."""
    payloads = parse_payloads(artifact_path.read_bytes().decode("utf-8"))
    embedded = tuple(payload.path for payload in payloads)
    if embedded != plan.files:
        raise ArtifactFormatError(
            f"Installer payloads {list(embedded)} do not match its plan {list(plan.files)}",
            remediation=("Download a fresh copy of the installer.",),
        )
    return payloads


# ============================================================================
# Filesystem operations
# ============================================================================


@dataclass(frozen=True)
class TargetDirectory:
    """Snapshot of the destination directory. Never reused across invocations."""

    path: Path
    exists: bool
    is_dir: bool


def inspect_target(path: Path) -> TargetDirectory:
    return TargetDirectory(path=path, exists=path.exists(), is_dir=path.is_dir())


def extract_payloads(
    payloads: tuple[EmbeddedFile, ...],
    target: Path,
    *,
    expected: TargetDirectory,
) -> tuple[Path, ...]:
    """Write payloads under target, all or nothing.

    Payloads are first written, in order, to a staging directory beside the
    target. The target is then re-inspected; if it no longer matches
    ``expected`` the staging directory is discarded. Otherwise an absent
    target is created by renaming the staging directory, and an existing one
    has each file atomically replaced.

    Args:
        payloads: Files to write, in manifest order
        target: Destination directory
        expected: Target state the caller authorized against

    Returns:
        Paths written, in manifest order

    Raises:
        ExtractionError: If staging fails (target untouched)
        TargetConflictError: If the target changed since it was inspected
    """
    staging = target.with_name(f".{target.name}.staging-{os.getpid()}")
    try:
        staging.mkdir()
        for payload in payloads:
            destination = staging / payload.path
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(payload.content)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise ExtractionError(
            f"Could not write installer payloads: {e}",
            remediation=(
                f"Nothing was written to {target}.",
                "Check free disk space and permissions, then re-run the installer.",
            ),
        ) from e

    current = inspect_target(target)
    if current != expected:
        shutil.rmtree(staging, ignore_errors=True)
        raise TargetConflictError(
            f"{target} changed while the installer was running",
            remediation=("Re-run the installer once nothing else is modifying it.",),
        )

    if not expected.exists:
        logger.debug("Renaming %s to %s", staging, target)
        staging.rename(target)
    else:
        for payload in payloads:
            destination = target / payload.path
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.replace(staging / payload.path, destination)
        shutil.rmtree(staging)

    return tuple(target / payload.path for payload in payloads)


def make_executable(path: Path) -> None:
    """Add execute permission for user, group and other (``chmod +x``)."""
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def add_ignore_entries(
    content: str, entries: tuple[str, ...], comment: str | None = None
) -> tuple[str, tuple[str, ...]]:
    """Append ignore entries that are not already present.

    This is a pure function; the caller reads and writes the file. An entry
    counts as present when some line, stripped of surrounding whitespace,
    equals it exactly. When entries are added and comment is given, a
    `# comment` line goes above them unless that line is already present.

    Args:
        content: Current ignore file content
        entries: Entries that must be present
        comment: Optional heading for the added entries

    Returns:
        Tuple of (updated content, entries that were added)

    Example:
        >>> content, added = add_ignore_entries("*.pyc\\n", (".env",))
        >>> content
        '*.pyc\\n.env\\n'
        >>> add_ignore_entries(content, (".env",))[1]
        ()
    """
    present = {line.strip() for line in content.splitlines()}
    added: list[str] = []
    for entry in entries:
        if entry in present:
            continue
        present.add(entry)
        added.append(entry)

    if not added:
        return (content, ())

    # Ensure trailing newline before adding
    if content and not content.endswith("\n"):
        content += "\n"
    if comment is not None and f"# {comment}" not in present:
        content += f"# {comment}\n"
    content += "".join(f"{entry}\n" for entry in added)
    return (content, tuple(added))


def update_ignore_file(
    path: Path, entries: tuple[str, ...], comment: str | None = None
) -> tuple[str, ...]:
    """Make sure every entry is in the ignore file at path, creating it if needed.

    Existing bytes, including line endings and bytes that are not UTF-8, are
    carried through unchanged.

    Raises:
        OSError: If the file cannot be read or written
    """
    content = path.read_bytes().decode("utf-8", "surrogateescape") if path.exists() else ""
    updated, added = add_ignore_entries(content, entries, comment)
    if added:
        path.write_bytes(updated.encode("utf-8", "surrogateescape"))
    return added


# ============================================================================
# State machine
# ============================================================================


class InstallState(Enum):
    INIT = "init"
    PRECONDITION = "precondition"
    TARGET_ABSENT = "target_absent"
    TARGET_PRESENT = "target_present"
    VERSION_CHECK = "version_check"
    CONFIRM = "confirm"
    EXTRACT = "extract"
    FINALIZE = "finalize"
    DONE = "done"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


VALID_TRANSITIONS: dict[InstallState, frozenset[InstallState]] = {
    InstallState.INIT: frozenset({InstallState.PRECONDITION}),
    InstallState.PRECONDITION: frozenset(
        {InstallState.TARGET_ABSENT, InstallState.TARGET_PRESENT, InstallState.ABORTED}
    ),
    InstallState.TARGET_ABSENT: frozenset({InstallState.CONFIRM}),
    InstallState.TARGET_PRESENT: frozenset({InstallState.VERSION_CHECK, InstallState.ABORTED}),
    InstallState.VERSION_CHECK: frozenset({InstallState.CONFIRM, InstallState.ABORTED}),
    InstallState.CONFIRM: frozenset({InstallState.EXTRACT, InstallState.CANCELLED}),
    InstallState.EXTRACT: frozenset({InstallState.FINALIZE, InstallState.ABORTED}),
    InstallState.FINALIZE: frozenset({InstallState.DONE, InstallState.ABORTED}),
}


@dataclass(frozen=True)
class InstallResult:
    """Outcome of one installer run that did not abort."""

    state: InstallState
    target: Path
    written: tuple[Path, ...]
    ignore_entries_added: tuple[str, ...]


class Installer:
    """Decides whether the payloads may be written, then writes them.

    Every check that can fail happens before EXTRACT, so a run aborted
    before then leaves the filesystem exactly as it found it. A FINALIZE
    failure leaves the written files in place and reports the steps left. ``history`` records every
    state visited, for diagnostics and tests.
    """

    def __init__(
        self,
        *,
        plan: InstallPlan,
        payloads: tuple[EmbeddedFile, ...],
        git: Git,
        console: Console,
        printer: Printer,
        cwd: Path,
        force_upgrade: bool,
        program: str,
    ) -> None:
        self._plan = plan
        self._payloads = payloads
        self._git = git
        self._console = console
        self._printer = printer
        self._cwd = cwd
        self._force_upgrade = force_upgrade
        self._program = program
        self.state = InstallState.INIT
        self.history: list[InstallState] = [InstallState.INIT]

    def _transition(self, to_state: InstallState) -> None:
        if to_state not in VALID_TRANSITIONS.get(self.state, frozenset()):
            raise RuntimeError(f"Invalid installer transition {self.state} -> {to_state}")
        logger.debug("Installer state %s -> %s", self.state.value, to_state.value)
        self.state = to_state
        self.history.append(to_state)

    def run(self) -> InstallResult:
        """Run the installer to a terminal state.

        Returns:
            Result in state DONE or CANCELLED

        Raises:
            InstallerError: On any fatal condition; state is ABORTED
        """
        try:
            return self._run()
        except InstallerError:
            self._transition(InstallState.ABORTED)
            raise

    def _run(self) -> InstallResult:
        self._transition(InstallState.PRECONDITION)
        repo_root = self._git.get_repository_root(self._cwd)
        if repo_root is None:
            raise RepositoryEnvironmentError(
                f"Not a git repository: {self._cwd}",
                remediation=(
                    "Run this installer from inside the git repository to install into.",
                    "To start a new repository here: git init",
                ),
            )
        target = repo_root / self._plan.target_dir

        self._printer.banner(self._plan.title)
        self._printer.info(f"Repository root: {repo_root}")
        self._printer.info(f"Target directory: {target}")
        self._printer.line()

        snapshot = inspect_target(target)
        if not snapshot.exists:
            self._transition(InstallState.TARGET_ABSENT)
        else:
            self._transition(InstallState.TARGET_PRESENT)
            self._check_upgrade_allowed(repo_root, snapshot)

        self._transition(InstallState.CONFIRM)
        self._print_summary(upgrading=snapshot.exists)
        if not self._confirm():
            self._transition(InstallState.CANCELLED)
            self._printer.line()
            self._printer.warning("Installation cancelled.")
            return InstallResult(
                state=InstallState.CANCELLED, target=target, written=(), ignore_entries_added=()
            )

        self._transition(InstallState.EXTRACT)
        self._printer.line()
        self._printer.info("Starting installation...")
        self._printer.line()
        written = extract_payloads(self._payloads, target, expected=snapshot)
        for path in self._plan.files:
            self._printer.success(f"Created {path}")

        self._transition(InstallState.FINALIZE)
        added = self._finalize(repo_root, target)

        self._transition(InstallState.DONE)
        self._print_done(repo_root)
        return InstallResult(
            state=InstallState.DONE, target=target, written=written, ignore_entries_added=added
        )

    def _finalize(self, repo_root: Path, target: Path) -> tuple[str, ...]:
        failures: list[str] = []
        manual: list[str] = []
        if self._plan.executable is not None:
            executable = target / self._plan.executable
            try:
                make_executable(executable)
            except OSError as e:
                failures.append(f"could not make {self._plan.executable} executable: {e}")
                manual.append(f"chmod +x {shlex.quote(str(executable))}")
            else:
                self._printer.success(f"Set executable permissions on {self._plan.executable}")

        ignore_file = repo_root / ".gitignore"
        added: tuple[str, ...] = ()
        try:
            added = update_ignore_file(
                ignore_file, self._plan.ignore_entries, self._plan.ignore_comment
            )
        except OSError as e:
            failures.append(f"could not update {ignore_file}: {e}")
            manual.append(f"Add these lines to {ignore_file}:")
            if self._plan.ignore_comment is not None:
                manual.append(f"  # {self._plan.ignore_comment}")
            manual.extend(f"  {entry}" for entry in self._plan.ignore_entries)
        else:
            if added:
                self._printer.success(f"Added {', '.join(added)} to .gitignore")

        if failures:
            raise FinalizeError(
                f"Files were installed in {target}, but " + "; ".join(failures),
                remediation=("Finish the installation by hand:", *manual),
            )
        return added

    def _check_upgrade_allowed(self, repo_root: Path, snapshot: TargetDirectory) -> None:
        target = snapshot.path
        quoted = shlex.quote(str(target))
        if not snapshot.is_dir:
            raise TargetConflictError(
                f"{target} exists and is not a directory",
                remediation=(f"To move it aside: mv {quoted} {quoted}.backup",),
            )
        if not self._force_upgrade:
            raise TargetConflictError(
                f"{self._plan.target_dir} directory already exists!",
                remediation=(
                    "Please remove or rename the existing directory first.",
                    f"To remove: rm -rf {quoted}",
                    f"To backup: mv {quoted} {quoted}.backup",
                    f"To upgrade a version-controlled copy: {self._program} --force-upgrade",
                ),
            )

        self._transition(InstallState.VERSION_CHECK)
        try:
            tracked = self._git.count_tracked_files(repo_root, target)
        except subprocess.CalledProcessError as e:
            raise SafetyError(
                f"Could not determine which files in {target} are tracked by git",
                remediation=(f"Check the repository state with: git status -- {quoted}",),
            ) from e
        logger.debug("%d tracked file(s) under %s", tracked, target)
        if tracked == 0:
            relative = shlex.quote(self._plan.target_dir)
            raise SafetyError(
                f"Refusing to upgrade {target}: none of its files are tracked by git, "
                "so overwritten files could not be recovered.",
                remediation=(
                    "Choose one of:",
                    f"  1. Commit it, then upgrade: git add {relative} && "
                    f"git commit -m 'Track {self._plan.target_dir}' && "
                    f"{self._program} --force-upgrade",
                    f"  2. Back it up, then install fresh: mv {quoted} {quoted}.backup && "
                    f"{self._program}",
                    f"  3. Discard it, then install fresh: rm -rf {quoted} && {self._program}",
                ),
            )
        self._printer.warning(
            f"Upgrading: {tracked} tracked file(s) in {self._plan.target_dir}; "
            "existing files will be overwritten."
        )
        self._printer.line()

    def _print_summary(self, *, upgrading: bool) -> None:
        line = self._printer.line
        line("This script will:")
        line()
        if upgrading:
            line(f"  1. Overwrite files in the {self._plan.target_dir} directory")
        else:
            line(f"  1. Create {self._plan.target_dir} directory")
        line("  2. Extract embedded configuration files:")
        line()
        for path in self._plan.files:
            line(f"     • {path}")
        line()
        if self._plan.executable is not None:
            line(f"  3. Set proper permissions ({self._plan.executable} +x)")
            line()
        if self._plan.features:
            line("Features:")
            for feature in self._plan.features:
                line(f"  • {feature}")
            line()
        self._printer.rule()
        line()
        self._printer.info("Press any key to proceed, or ESC to cancel...")

    def _confirm(self) -> bool:
        key = self._console.read_key()
        # Escape sequences (arrow keys) start with ESC too; a closed input cancels
        return key != "" and not key.startswith(CANCEL_KEY)

    def _print_done(self, repo_root: Path) -> None:
        line = self._printer.line
        line()
        self._printer.rule()
        self._printer.success("Installation complete!")
        self._printer.rule()
        line()
        line("Files created:")
        line()
        for path in self._plan.files:
            line(f"  ✓ {self._plan.target_dir}/{path}")
        line()
        if self._plan.next_steps:
            self._printer.banner("Next Steps")
            for step in self._plan.next_steps:
                line(step.replace("{repo_root}", str(repo_root)))
            line()


# ============================================================================
# Command line
# ============================================================================


@dataclass(frozen=True)
class InstallerContext:
    """Dependencies for one installer invocation.

    cwd is resolved once at startup and passed explicitly.
    """

    plan: InstallPlan
    artifact_path: Path
    git: Git
    console: Console
    printer: Printer
    cwd: Path


@click.command("install", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--force-upgrade",
    is_flag=True,
    help="Overwrite an existing target directory whose files are tracked by git.",
)
@click.pass_obj
def install_cmd(ctx: InstallerContext, force_upgrade: bool) -> None:
    """Install the embedded configuration files into the current git repository."""
    try:
        payloads = load_payloads(ctx.artifact_path, ctx.plan)
        installer = Installer(
            plan=ctx.plan,
            payloads=payloads,
            git=ctx.git,
            console=ctx.console,
            printer=ctx.printer,
            cwd=ctx.cwd,
            force_upgrade=force_upgrade,
            program=ctx.artifact_path.name,
        )
        installer.run()
    except DckitError as e:
        ctx.printer.report(e)
        raise SystemExit(1) from e


def main(
    plan: InstallPlan,
    artifact_path: Path,
    argv: list[str] | None = None,
    *,
    git: Git | None = None,
    console: Console | None = None,
    cwd: Path | None = None,
) -> int:
    """Entry point of a generated installer.

    Returns the process exit code: 0 on success or cancellation, 1 on any
    error including an unrecognized option.
    """
    ctx = InstallerContext(
        plan=plan,
        artifact_path=artifact_path,
        git=git if git is not None else RealGit(),
        console=console if console is not None else InteractiveConsole(),
        printer=Printer(OutputStyle()),
        cwd=cwd if cwd is not None else Path.cwd(),
    )
    try:
        exit_code = install_cmd.main(
            args=argv,
            prog_name=artifact_path.name,
            obj=ctx,
            standalone_mode=False,
        )
    except click.UsageError as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    return exit_code if isinstance(exit_code, int) else 0
