"""CLI command that runs the authorization and library cleanup."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console

from album_purge.config import get_config
from album_purge.lifecycle import Lifecycle
from album_purge.utils.output import OutputFormat, print_output

console = Console(stderr=True)


def clean(
    ctx: typer.Context,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Callback listener port")] = None,
    client_id: Annotated[Optional[str], typer.Option("--client-id", help="OAuth client ID")] = None,
    page_size: Annotated[Optional[int], typer.Option("--page-size", min=1, max=50, help="Albums per request")] = None,
    no_browser: Annotated[bool, typer.Option("--no-browser", help="Print the authorization URL instead of opening it")] = False,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Summary format")] = OutputFormat.TABLE,
) -> None:
    """Authorize in the browser, then remove every saved album."""
    config = get_config().with_overrides(
        port=port,
        client_id=client_id,
        page_size=page_size,
        open_browser=False if no_browser else None,
    )
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))

    lifecycle = Lifecycle(config, verbose=verbose)
    exit_code = lifecycle.run()

    result = lifecycle.result
    summary = {
        "status": "completed" if exit_code == 0 else "failed",
        "auth_state": lifecycle.flow.state.value,
        "pages": result.pages if result else 0,
        "albums_removed": result.deleted if result else 0,
        "remaining_reported": result.last_remaining if result else None,
    }
    print_output(summary, output, title="Library Cleanup")

    if exit_code != 0:
        raise typer.Exit(exit_code)
