"""OAuth2 Authorization Code + PKCE against the provider's accounts service.

Builds the authorization URL and talks to the token endpoint, both for the
initial code exchange and for every refresh.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from album_purge.config import Config
from album_purge.models.auth import TokenResponse
from album_purge.utils.errors import TokenExchangeError, TransportError

logger = logging.getLogger(__name__)


def build_authorization_url(
    authorize_url: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    state: str,
    code_challenge: str,
) -> str:
    """Build the URL the user opens to grant access.

    Every value is percent-encoded; spaces become ``%20``.
    """
    query = urlencode(
        {
            "client_id": client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge,
            "state": state,
            "scope": scope,
        },
        quote_via=quote,
    )
    return f"{authorize_url}?{query}"


class TokenService:
    """Exchanges an authorization code or refresh token for an access token."""

    def __init__(self, config: Config) -> None:
        self._config = config
        self._http = httpx.Client(timeout=config.settings.http_timeout)

    def exchange_token(self, fields: dict[str, str], step: str = "token exchange") -> TokenResponse:
        """POST one form-encoded grant to the token endpoint.

        Args:
            fields: Grant-specific fields (``grant_type`` and friends).
                ``client_id`` is always added.
            step: Name of the calling step, used in error context.

        Returns:
            A TokenResponse. Token fields are only set when status is 200.

        Raises:
            TransportError: On network-level failure.
            TokenExchangeError: If a 200 response has no access token.
        """
        data = {"client_id": self._config.settings.client_id, **fields}

        try:
            response = self._http.post(self._config.provider.token_url, data=data)
        except httpx.HTTPError as e:
            raise TransportError(f"Token request failed: {e}", step=step) from e

        if response.status_code != 200:
            logger.warning(f"Token endpoint returned HTTP {response.status_code}: {response.text}")
            return TokenResponse(status=response.status_code)

        try:
            body: dict[str, Any] = response.json()
        except ValueError as e:
            raise TokenExchangeError(f"Token endpoint returned invalid JSON: {e}", step=step, status=200) from e

        if not body.get("access_token"):
            raise TokenExchangeError("Token response has no access_token", step=step, status=200)

        return TokenResponse(
            status=response.status_code,
            access_token=body.get("access_token"),
            token_type=body.get("token_type"),
            expires_in=body.get("expires_in"),
            refresh_token=body.get("refresh_token"),
        )

    def exchange_code(self, code: str, code_verifier: str, redirect_uri: str) -> TokenResponse:
        """Trade the authorization code from the redirect for tokens."""
        return self.exchange_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "code_verifier": code_verifier,
            },
            step="code exchange",
        )

    def refresh(self, refresh_token: str) -> TokenResponse:
        """Renew the access token (PKCE flow: client_id in body, no secret)."""
        return self.exchange_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            step="token refresh",
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
