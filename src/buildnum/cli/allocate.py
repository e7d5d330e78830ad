"""
buildnum CLI - allocate and peek commands.

``allocate`` is what the workflow step runs. ``peek`` lists the current
build-number tags without changing anything, for investigating a counter
that ``allocate`` refuses to touch.
"""

from __future__ import annotations

import asyncio
import traceback
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from buildnum.cli.errors import ExitCode, print_error, print_warning
from buildnum.core.allocator.markers import marker_stem
from buildnum.core.allocator.service import BuildNumberAllocator
from buildnum.core.config.models import AllocatorSettings
from buildnum.core.exceptions import BuildNumberError

console = Console()

TokenOption = Annotated[
    Optional[str],
    typer.Option("--token", help="GitHub token [env: INPUT_TOKEN]", show_default=False),
]
PrefixOption = Annotated[
    Optional[str],
    typer.Option("--prefix", "-p", help="Counter namespace [env: INPUT_PREFIX]", show_default=False),
]
RepositoryOption = Annotated[
    Optional[str],
    typer.Option(
        "--repository", "-r", help="owner/repo [env: GITHUB_REPOSITORY]", show_default=False
    ),
]
ShaOption = Annotated[
    Optional[str],
    typer.Option("--sha", help="Commit to tag [env: GITHUB_SHA]", show_default=False),
]
ApiUrlOption = Annotated[
    Optional[str],
    typer.Option("--api-url", help="GitHub API URL [env: GITHUB_API_URL]", show_default=False),
]


def build_settings(**overrides: Optional[str]) -> AllocatorSettings:
    """
    Build settings from the environment, then apply command-line overrides.

    Options left unset (None) keep their environment value.
    """
    settings = AllocatorSettings.from_env()
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return settings
    return AllocatorSettings.model_validate({**settings.model_dump(), **update})


def _debug_enabled(ctx: typer.Context) -> bool:
    obj: Any = ctx.obj
    return bool(obj and obj.get("debug"))


def _fail(error: Exception, debug: bool) -> typer.Exit:
    if isinstance(error, BuildNumberError):
        print_error(str(error))
    else:
        print_error(f"Unexpected error: {error}")
    if debug:
        console.print(traceback.format_exc(), markup=False, highlight=False)
    return typer.Exit(ExitCode.GENERAL_ERROR)


def allocate(
    ctx: typer.Context,
    token: TokenOption = None,
    prefix: PrefixOption = None,
    repository: RepositoryOption = None,
    sha: ShaOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """
    Allocate the next build number and publish it.

    Reuses BUILD_NUMBER/BUILD_NUMBER when an earlier job of this run left
    one. Otherwise claims max+1 as a new build-number tag, writes
    BUILD_NUMBER to GITHUB_ENV, build_number to GITHUB_OUTPUT and the
    BUILD_NUMBER file, then deletes the previous tags.

    Examples:

        # In a workflow step (reads INPUT_TOKEN, GITHUB_REPOSITORY, GITHUB_SHA)
        buildnum allocate

        # Separate counter for release builds
        buildnum allocate --prefix rel
    """
    debug = _debug_enabled(ctx)
    try:
        settings = build_settings(
            token=token,
            prefix=prefix,
            repository=repository,
            commit_sha=sha,
            api_url=api_url,
        )
        result = asyncio.run(BuildNumberAllocator(settings).allocate())
    except Exception as e:
        raise _fail(e, debug)

    for warning in result.gc_warnings:
        print_warning(str(warning))

    if result.cached:
        console.print(f"[green]✓[/green] Reused build number [bold]{result.build_number}[/bold]")
    else:
        console.print(f"[green]✓[/green] Build number [bold]{result.build_number}[/bold]")
        if result.deleted_refs:
            console.print(f"[dim]Deleted {len(result.deleted_refs)} older build counter(s)[/dim]")


def peek(
    ctx: typer.Context,
    token: TokenOption = None,
    prefix: PrefixOption = None,
    repository: RepositoryOption = None,
    api_url: ApiUrlOption = None,
) -> None:
    """
    Show the build-number tags of a namespace and the next number.

    Read-only: no tag is created or deleted and no output is written.
    """
    debug = _debug_enabled(ctx)
    try:
        settings = build_settings(
            token=token,
            prefix=prefix,
            repository=repository,
            api_url=api_url,
        )
        state = asyncio.run(BuildNumberAllocator(settings).inspect())
    except Exception as e:
        raise _fail(e, debug)

    stem = marker_stem(state.prefix)
    if not state.markers:
        console.print(f"No {stem} tags in {settings.repository}.")
    else:
        table = Table(title=f"{stem}* tags in {settings.repository}")
        table.add_column("Number", justify="right")
        table.add_column("Ref")
        table.add_column("Commit", style="dim")
        for marker in sorted(state.markers, key=lambda m: m.number):
            table.add_row(str(marker.number), marker.ref, marker.sha[:12])
        console.print(table)

    if state.over_limit:
        print_warning(
            f"Found {len(state.markers)} {stem} tags, more than {state.limit}; "
            "allocate will refuse to run until extra tags are removed."
        )
    else:
        console.print(f"Next build number: [bold]{state.next_number}[/bold]")
