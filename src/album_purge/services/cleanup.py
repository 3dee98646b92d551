"""Saved-library cleanup service."""

from __future__ import annotations

import logging
from typing import Callable

from rich.console import Console

from album_purge.client import LibraryClient
from album_purge.models.library import AlbumPage, CleanupResult
from album_purge.utils.pagination import drain

console = Console(stderr=True)
logger = logging.getLogger(__name__)


class LibraryCleanup:
    """Deletes every saved album, one page at a time."""

    def __init__(
        self,
        client: LibraryClient,
        page_size: int,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        self._client = client
        self._page_size = page_size
        self._should_stop = should_stop

    def run(self) -> CleanupResult:
        """Drain the library. Any API or network error propagates."""
        result = drain(
            self._client.fetch_page,
            self._client.delete,
            self._page_size,
            on_page=self._report,
            should_stop=self._should_stop,
        )
        if result.interrupted:
            logger.warning(f"Cleanup stopped early after {result.pages} pages")
            return result
        logger.info(f"Cleanup finished: {result.deleted} albums over {result.pages} pages")
        return result

    def _report(self, number: int, page: AlbumPage) -> None:
        logger.info(f"Page {number}: {len(page.ids)} ids, {page.remaining} remaining")
        if page.ids:
            console.print(f"Removing {len(page.ids)} albums ({page.remaining} left in library)...", style="yellow")
