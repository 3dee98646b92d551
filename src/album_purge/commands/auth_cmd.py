"""CLI command for inspecting the authorization request."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from album_purge.auth import build_authorization_url
from album_purge.config import get_config
from album_purge.models.auth import Session


def auth_url(
    client_id: Annotated[Optional[str], typer.Option("--client-id", help="OAuth client ID")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Callback listener port")] = None,
) -> None:
    """Print an authorization URL for a fresh session.

    The URL carries a one-off state and PKCE challenge; only `clean` can
    complete it.
    """
    config = get_config().with_overrides(client_id=client_id, port=port)
    session = Session.create()
    settings = config.settings
    typer.echo(
        build_authorization_url(
            config.provider.authorize_url,
            settings.client_id,
            settings.redirect_uri,
            settings.scope,
            session.state,
            session.code_challenge,
        )
    )
