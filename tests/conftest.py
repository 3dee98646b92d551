"""Shared fixtures for the album-purge test suite."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from album_purge.config import Config, ProviderEndpoints, Settings
from album_purge.models.auth import Session, TokenResponse


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def fake_settings() -> Settings:
    return Settings(
        client_id="test-client-id",
        host="localhost",
        port=9754,
        scope="user-library-read user-library-modify",
        page_size=50,
        http_timeout=5.0,
        refresh_margin=10,
        open_browser=False,
    )


@pytest.fixture
def fake_provider() -> ProviderEndpoints:
    return ProviderEndpoints(
        authorize_url="https://accounts.example.com/authorize",
        token_url="https://accounts.example.com/api/token",
        api_base_url="https://api.example.com/v1",
        library_resource="albums",
    )


@pytest.fixture
def fake_config(fake_settings, fake_provider) -> Config:
    return Config(settings=fake_settings, provider=fake_provider)


@pytest.fixture
def session() -> Session:
    return Session(state="state-123", code_verifier="verifier-abc", code_challenge="challenge-xyz")


@pytest.fixture
def authorized_session(session) -> Session:
    session.apply(TokenResponse(
        status=200,
        access_token="access-1",
        token_type="Bearer",
        expires_in=3600,
        refresh_token="refresh-1",
    ))
    return session


@pytest.fixture
def timers():
    """Collects every FakeTimer created through ``timer_factory``."""
    created: list[FakeTimer] = []

    def factory(interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args, kwargs)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def mock_tokens():
    """MagicMock standing in for TokenService."""
    tokens = MagicMock()
    tokens.exchange_code = MagicMock()
    tokens.refresh = MagicMock()
    tokens.close = MagicMock()
    return tokens
