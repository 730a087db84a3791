"""Generate the self-contained installer from bundle.toml."""

import shlex

import click

from dckit.cli.commands.common import load_config_or_exit
from dckit.core.context import DckitContext
from dckit.installer import TEXT_ENCODING
from dckit.packaging.manifest import ManifestError
from dckit.packaging.packager import build_installer


@click.command("build")
@click.pass_obj
def build_cmd(ctx: DckitContext) -> None:
    """Generate the self-contained installer from bundle.toml.

    Reads the manifest from bundle.toml (found by walking up from the current
    directory), embeds every listed file, and writes an executable installer
    to the configured output path.
    """
    printer = ctx.printer
    config = load_config_or_exit(ctx.cwd, printer)

    printer.banner("Building Self-Contained Installer")

    provenance = ctx.revision_source.read_provenance(config.root)
    if provenance.is_known:
        printer.info(f"Git commit: {provenance.revision} ({provenance.timestamp})")
    else:
        printer.warning("Not a git repository - version info will be generic")

    printer.info(f"Checking {len(config.files)} source file(s) in {config.source_dir}...")
    try:
        result = build_installer(config, provenance)
    except ManifestError as e:
        printer.report(e)
        raise SystemExit(1) from e

    for block in result.script.blocks:
        stored = "" if block.encoding == TEXT_ENCODING else f", {block.encoding}"
        printer.success(f"Embedded {block.source.path} ({block.terminator}{stored})")

    output = result.output
    try:
        display_output = output.relative_to(config.root)
    except ValueError:
        display_output = output

    printer.line()
    printer.rule()
    printer.success("Build complete!")
    printer.rule()
    printer.line()
    printer.info(f"Generated: {output}")
    printer.info(f"Size: {result.size // 1024} KB ({result.size} bytes)")
    printer.line()
    printer.success("The installer is self-contained and ready to distribute!")
    printer.line()
    printer.line("To test locally:")
    test_command = f"cd /path/to/test-repo && python3 {shlex.quote(str(output))}"
    printer.line("  " + printer.emphasize(test_command))
    printer.line()
    printer.line("To publish:")
    printer.line("  " + printer.emphasize(f"git add {shlex.quote(str(display_output))}"))
    printer.line(
        "  " + printer.emphasize(f'git commit -m "Update installer ({provenance.revision})"')
    )
    printer.line("  " + printer.emphasize("git push"))
    printer.line()
