"""Tests for utils/pagination.py — drain termination and delete shapes."""
import pytest

from album_purge.models.library import AlbumPage
from album_purge.utils.pagination import drain


class FakeLibrary:
    """In-memory library that behaves like GET/DELETE /me/albums."""

    def __init__(self, count):
        self.ids = [f"id{i}" for i in range(count)]
        self.fetches = []
        self.deletes = []

    def fetch(self, limit):
        self.fetches.append(limit)
        return AlbumPage(remaining=len(self.ids), ids=self.ids[:limit])

    def delete(self, ids):
        assert ids, "delete called with an empty id list"
        self.deletes.append(list(ids))
        self.ids = [i for i in self.ids if i not in ids]


def test_120_albums_in_pages_of_50():
    library = FakeLibrary(120)

    result = drain(library.fetch, library.delete, 50)
    assert [len(d) for d in library.deletes] == [50, 50, 20]
    assert len(library.fetches) == 3
    assert result.pages == 3
    assert result.deleted == 120
    assert library.ids == []


def test_exact_multiple_needs_one_extra_fetch():
    library = FakeLibrary(100)

    result = drain(library.fetch, library.delete, 50)
    assert [len(d) for d in library.deletes] == [50, 50]
    assert len(library.fetches) == 3
    assert result.last_remaining == 0


def test_empty_library_never_deletes():
    library = FakeLibrary(0)

    result = drain(library.fetch, library.delete, 50)
    assert library.deletes == []
    assert result.pages == 1
    assert result.deleted == 0


def test_stops_on_short_page_even_if_total_is_stale():
    pages = iter([
        AlbumPage(remaining=500, ids=[f"a{i}" for i in range(50)]),
        AlbumPage(remaining=450, ids=["b1", "b2"]),
    ])
    deletes = []

    result = drain(lambda limit: next(pages), deletes.append, 50)
    assert [len(d) for d in deletes] == [50, 2]
    assert result.pages == 2


def test_stops_when_total_reaches_zero():
    pages = iter([AlbumPage(remaining=0, ids=[])])
    deletes = []

    drain(lambda limit: next(pages), deletes.append, 50)
    assert deletes == []


def test_zero_total_with_full_page_still_deletes_then_stops():
    pages = iter([AlbumPage(remaining=0, ids=[f"a{i}" for i in range(5)])])
    deletes = []

    result = drain(lambda limit: next(pages), deletes.append, 5)
    assert deletes == [[f"a{i}" for i in range(5)]]
    assert result.pages == 1


def test_fetch_error_propagates():
    def fetch(limit):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        drain(fetch, lambda ids: None, 50)


def test_delete_error_aborts_loop():
    library = FakeLibrary(120)

    def delete(ids):
        raise RuntimeError("delete failed")

    with pytest.raises(RuntimeError, match="delete failed"):
        drain(library.fetch, delete, 50)
    assert len(library.fetches) == 1


def test_on_page_called_before_delete():
    library = FakeLibrary(3)
    seen = []

    drain(library.fetch, library.delete, 50, on_page=lambda n, page: seen.append((n, len(page.ids), len(library.deletes))))
    assert seen == [(1, 3, 0)]


def test_should_stop_interrupts_before_next_fetch():
    library = FakeLibrary(120)
    calls = iter([False, True])

    result = drain(library.fetch, library.delete, 50, should_stop=lambda: next(calls))
    assert result.interrupted is True
    assert result.pages == 1
    assert len(library.fetches) == 1


def test_invalid_page_size():
    with pytest.raises(ValueError, match="page_size"):
        drain(lambda limit: AlbumPage(remaining=0), lambda ids: None, 0)
