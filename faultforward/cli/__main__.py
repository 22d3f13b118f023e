"""FaultForward CLI - Main Entry Point.

Commands:
    show     - Render a serialized panic
    version  - Show version information
"""

import sys
from pathlib import Path

import click

from . import __version__, __cli_name__


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
def cli():
    """Inspect panics captured by faultforward."""
    pass


# ============================================================================
# Commands
# ============================================================================

@cli.command('show')
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--full', is_flag=True, help='Include every captured stack')
def show(path: Path, full: bool):
    """
    Render a panic saved as JSON or YAML.

    Examples:
      ff show panic.json
      ff show panic.yaml --full
    """
    from .commands.show import load_record

    try:
        record = load_record(path)
    except Exception as e:
        click.secho(f"Cannot read {path}: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(record.full_detail() if full else record.short_message())
    if full:
        click.echo(f"captured at {record.time.isoformat()}")
        if record.truncated:
            click.secho("stack dump was truncated", fg="yellow")


@cli.command('version')
def version():
    """Show version information."""
    click.echo(f"{__cli_name__} {__version__}")


def main():
    """Entry point for `ff` command."""
    cli()


if __name__ == '__main__':
    main()
