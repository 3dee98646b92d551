"""Pagination helpers for draining a library page by page."""

from __future__ import annotations

from typing import Callable

from album_purge.models.library import AlbumPage, CleanupResult


def drain(
    fetch_fn: Callable[[int], AlbumPage],
    delete_fn: Callable[[list[str]], None],
    page_size: int,
    on_page: Callable[[int, AlbumPage], None] | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> CleanupResult:
    """Repeatedly fetch the first page and delete it until the library is empty.

    Always re-reads the head of the listing, since deleting shifts it.

    Args:
        fetch_fn: Takes a limit and returns an AlbumPage.
        delete_fn: Takes a non-empty list of ids and deletes them.
        page_size: Limit sent with each fetch.
        on_page: Optional progress callback, called with (page number, page)
                 before the delete.
        should_stop: Optional check before each fetch; returning True ends
                     the loop early.

    Returns:
        A CleanupResult with page and deletion counts.

    Stops once the provider reports nothing remaining or a page comes back
    shorter than ``page_size``.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    result = CleanupResult()

    while True:
        if should_stop is not None and should_stop():
            result.interrupted = True
            break

        page = fetch_fn(page_size)
        result.pages += 1
        result.last_remaining = page.remaining

        if on_page is not None:
            on_page(result.pages, page)

        if page.ids:
            delete_fn(page.ids)
            result.deleted += len(page.ids)

        if page.remaining <= 0 or len(page.ids) < page_size:
            break

    return result
