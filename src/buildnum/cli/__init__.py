"""
buildnum CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from buildnum import __version__
from buildnum.cli import allocate
from buildnum.core.config.env import load_layered_env

app = typer.Typer(
    name="buildnum",
    help="Monotonic CI build numbers stored as git tags",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for buildnum commands.

    Progress goes to stderr at INFO so it shows in the workflow log.

    Args:
        debug: If True, enable DEBUG level logging with logger names
    """
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    buildnum - build numbers for CI pipelines.

    Keeps a per-repository counter as a lightweight git tag
    (build-number-<n>, or <prefix>-build-number-<n>) and hands the next
    value to the pipeline as BUILD_NUMBER.
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug}


app.command(name="allocate")(allocate.allocate)
app.command(name="peek")(allocate.peek)


@app.command()
def version() -> None:
    """Show buildnum version and exit."""
    console.print(f"buildnum version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
