"""HTTP client for the user's saved-albums library.

Handles header injection from the session and maps failures onto typed errors.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from album_purge.config import Config
from album_purge.models.auth import Session
from album_purge.models.library import AlbumPage
from album_purge.utils.errors import LibraryError, TransportError

logger = logging.getLogger(__name__)


class LibraryClient:
    """Authorized GET/DELETE against ``/me/{library_resource}``."""

    def __init__(self, config: Config, session: Session, verbose: bool = False) -> None:
        self._config = config
        self._session = session
        self._verbose = verbose
        self._http = httpx.Client(timeout=config.settings.http_timeout)

    def request(
        self,
        method: str,
        *,
        step: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make one authenticated request against the library resource.

        No retries: a transport failure raises TransportError and an HTTP
        error status raises LibraryError.
        """
        url = self._config.provider.library_url
        headers = self._build_headers()

        if self._verbose:
            logger.info(f"{method} {url} params={params}")

        try:
            response = self._http.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", step=step) from e

        if self._verbose:
            logger.info(f"Response: {response.status_code}")

        if response.status_code >= 400:
            error_detail = response.text
            try:
                error_json = response.json()
                error_detail = error_json.get("error", {}).get("message", response.text)
            except (ValueError, AttributeError):
                pass
            raise LibraryError(
                f"API error (HTTP {response.status_code}): {error_detail}",
                step=step,
                status=response.status_code,
            )

        return response

    def fetch_page(self, limit: int) -> AlbumPage:
        """Fetch the first ``limit`` saved albums and the library total."""
        response = self.request("GET", step="fetch albums", params={"limit": limit})
        return AlbumPage.from_api(response.json())

    def delete(self, ids: list[str]) -> None:
        """Remove the given albums from the library."""
        if not ids:
            raise ValueError("Refusing to send a delete with no album ids")
        self.request("DELETE", step="delete albums", body={"ids": ids})

    def _build_headers(self) -> dict[str, str]:
        headers = self._session.authorization_header()
        headers["Content-Type"] = "application/json"
        return headers

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
