"""PKCE (Proof Key for Code Exchange) and CSRF state helpers.

Authorization Code with PKCE needs no client secret, only a client id.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

# RFC 7636: verifier is 43-128 characters from the unreserved set
VERIFIER_LENGTH = 128


def _urlsafe_b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_state() -> str:
    """Random opaque value round-tripped through the authorization redirect."""
    return secrets.token_urlsafe(32)


def generate_code_verifier(length: int = VERIFIER_LENGTH) -> str:
    """Generate a random code verifier string (43-128 chars, URL-safe)."""
    if not 43 <= length <= 128:
        raise ValueError(f"Code verifier length must be between 43 and 128, got {length}")
    return _urlsafe_b64(secrets.token_bytes(length))[:length]


def generate_code_challenge(verifier: str) -> str:
    """S256 challenge: BASE64URL(SHA256(verifier)) without padding."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return _urlsafe_b64(digest)


def generate_pkce_pair() -> tuple[str, str]:
    """Return a ``(verifier, challenge)`` pair."""
    verifier = generate_code_verifier()
    return verifier, generate_code_challenge(verifier)
