"""
Error reporting and exit codes for the buildnum CLI.

Failures are reported as GitHub Actions workflow commands so they show up
as annotations on the run: ``::error::<message>`` and
``::warning::<message>`` on stdout.
"""

from enum import IntEnum

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Exit codes for buildnum commands."""

    SUCCESS = 0
    """Build number allocated, reused or inspected."""

    GENERAL_ERROR = 1
    """Any fatal condition; the annotation line says which."""


def _escape(message: str) -> str:
    # Workflow command data must not contain raw newlines or '%'.
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _annotate(level: str, message: str) -> None:
    console.print(f"::{level}::{_escape(message)}", markup=False, highlight=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print a single ``::error::`` annotation line."""
    _annotate("error", message)


def print_warning(message: str) -> None:
    """Print a single ``::warning::`` annotation line."""
    _annotate("warning", message)
