"""Tests for models — token response, session, album page."""
import pytest

from album_purge.models.auth import Session, TokenResponse
from album_purge.models.library import AlbumPage, CleanupResult
from album_purge.pkce import generate_code_challenge


# ── TokenResponse ────────────────────────────────────────────────────

def test_token_response_ok():
    assert TokenResponse(status=200, access_token="a").ok
    assert not TokenResponse(status=401).ok


# ── Session ──────────────────────────────────────────────────────────

def test_session_create_generates_pkce_pair():
    s = Session.create()
    assert s.code_challenge == generate_code_challenge(s.code_verifier)
    assert s.state
    assert not s.authorized


def test_sessions_are_unique():
    assert Session.create().state != Session.create().state


def test_apply_sets_token_fields(session):
    session.apply(TokenResponse(status=200, access_token="a", token_type="Bearer", expires_in=60, refresh_token="r"))
    assert session.authorized
    assert session.authorization_header() == {"Authorization": "Bearer a"}
    assert session.expires_in == 60
    assert session.current_refresh_token() == "r"


def test_apply_keeps_refresh_token_when_not_rotated(authorized_session):
    authorized_session.apply(TokenResponse(status=200, access_token="a2", token_type="Bearer", expires_in=60))
    assert authorized_session.current_refresh_token() == "refresh-1"
    assert authorized_session.access_token == "a2"


def test_apply_rejects_failed_response(session):
    with pytest.raises(ValueError, match="HTTP 401"):
        session.apply(TokenResponse(status=401))


def test_header_uses_token_type_verbatim(session):
    session.apply(TokenResponse(status=200, access_token="a", token_type="bearer", expires_in=60))
    assert session.authorization_header()["Authorization"] == "bearer a"


# ── AlbumPage ────────────────────────────────────────────────────────

def test_album_page_from_api():
    page = AlbumPage.from_api({
        "total": 7,
        "limit": 50,
        "items": [{"added_at": "x", "album": {"id": "one"}}, {"album": {"id": "two"}}],
    })
    assert page.remaining == 7
    assert page.ids == ["one", "two"]


def test_album_page_from_empty_body():
    page = AlbumPage.from_api({})
    assert page.remaining == 0
    assert page.ids == []


def test_cleanup_result_defaults():
    result = CleanupResult()
    assert result.pages == 0
    assert result.deleted == 0
    assert result.interrupted is False
