"""Auth-related data models."""

from __future__ import annotations

import threading

from pydantic import BaseModel, PrivateAttr

from album_purge.pkce import generate_pkce_pair, generate_state


class TokenResponse(BaseModel):
    """Result of one call to the token endpoint.

    Token fields are only populated when ``status`` is 200.
    """
    status: int
    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == 200


class Session(BaseModel):
    """The single authorization session of a run.

    Token fields are one mutable slot: they are written through ``apply``
    and read through ``authorization_header`` / ``current_refresh_token``,
    both under the same lock.
    """
    state: str
    code_verifier: str
    code_challenge: str
    access_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None

    _lock = PrivateAttr(default_factory=threading.Lock)

    @classmethod
    def create(cls) -> Session:
        """Start a fresh session with a new state value and PKCE pair."""
        verifier, challenge = generate_pkce_pair()
        return cls(state=generate_state(), code_verifier=verifier, code_challenge=challenge)

    @property
    def authorized(self) -> bool:
        with self._lock:
            return self.access_token is not None

    def apply(self, token: TokenResponse) -> None:
        """Store the token fields of a successful response."""
        if not token.ok:
            raise ValueError(f"Cannot apply a failed token response (HTTP {token.status})")
        with self._lock:
            self.access_token = token.access_token
            self.token_type = token.token_type or "Bearer"
            self.expires_in = token.expires_in
            # Providers may skip rotating the refresh token
            if token.refresh_token:
                self.refresh_token = token.refresh_token

    def authorization_header(self) -> dict[str, str]:
        with self._lock:
            if self.access_token is None:
                raise RuntimeError("Session has no access token yet")
            return {"Authorization": f"{self.token_type} {self.access_token}"}

    def current_refresh_token(self) -> str | None:
        with self._lock:
            return self.refresh_token

