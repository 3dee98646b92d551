"""album-purge — entry point.

Authorizes against the music provider with PKCE and empties the user's
saved-albums library.
"""

from __future__ import annotations

import logging

import typer

from album_purge.commands.auth_cmd import auth_url
from album_purge.commands.clean_cmd import clean
from album_purge.commands.config_cmd import show as show_config

app = typer.Typer(
    name="album-purge",
    help="Remove every album from your saved music library.",
    no_args_is_help=True,
)

# Register commands
app.command("clean")(clean)
app.command("auth-url")(auth_url)
app.command("config")(show_config)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """album-purge — authorize once, then delete saved albums page by page."""
    ctx.obj = {"verbose": verbose}
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


if __name__ == "__main__":
    app()
