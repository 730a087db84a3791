"""Check that the committed installer matches the bundle sources."""

import click
from rich.console import Console
from rich.table import Table

from dckit.cli.commands.common import load_config_or_exit
from dckit.core.context import DckitContext
from dckit.installer import DckitError
from dckit.packaging.verify import DriftReport, verify_installer


def _file_status(path: str, report: DriftReport) -> str:
    if path in report.missing:
        return "[red]not embedded[/red]"
    if path in report.stale:
        return "[red]stale[/red]"
    return "[green]up to date[/green]"


def _render_report(files: tuple[str, ...], report: DriftReport) -> Table:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    for path in files:
        table.add_row(path, _file_status(path, report))
    for path in report.extra:
        table.add_row(path, "[red]no longer in bundle.toml[/red]")
    return table


@click.command("verify")
@click.pass_obj
def verify_cmd(ctx: DckitContext) -> None:
    """Check that the installer embeds exactly the current bundle sources.

    Exits with status 1 if any file is missing, stale, extra or out of order.
    Run before committing to catch an installer that was not rebuilt.
    """
    printer = ctx.printer
    config = load_config_or_exit(ctx.cwd, printer)

    try:
        report = verify_installer(config)
    except DckitError as e:
        printer.report(e)
        raise SystemExit(1) from e

    console = Console(stderr=True)
    console.print(_render_report(config.files, report))
    printer.line()

    if report.is_clean:
        printer.success(f"{config.output.name} is up to date ({len(config.files)} files)")
        return

    if report.out_of_order:
        printer.error("Embedded files are not in bundle.toml order")
    printer.error(f"{config.output.name} does not match the bundle sources")
    printer.line()
    printer.line("  Regenerate with: " + printer.emphasize("dckit build"))
    raise SystemExit(1)
