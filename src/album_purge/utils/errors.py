"""Typed errors and structured error reporting."""

from __future__ import annotations

import logging

from rich.console import Console

console = Console(stderr=True)
logger = logging.getLogger(__name__)


class AlbumPurgeError(Exception):
    """Base error. ``step`` names the part of the run that failed."""

    code = "RUNTIME_ERROR"

    def __init__(self, message: str, step: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.step = step
        self.status = status


class AuthValidationError(AlbumPurgeError):
    """State mismatch, consent denied or a malformed redirect."""
    code = "AUTH_VALIDATION"


class TokenExchangeError(AlbumPurgeError):
    """Token endpoint answered with something other than 200."""
    code = "TOKEN_EXCHANGE"


class TransportError(AlbumPurgeError):
    """Network-level failure (DNS, connect, timeout, reset)."""
    code = "TRANSPORT"


class SchedulerError(AlbumPurgeError):
    """A scheduled token refresh failed."""
    code = "SCHEDULER"


class LibraryError(AlbumPurgeError):
    """Library endpoint answered with an HTTP error status."""
    code = "LIBRARY_API"


# Actionable hints keyed by error code, then by message substring
_CODE_HINTS: dict[str, str] = {
    "AUTH_VALIDATION": "Authorization was denied or the redirect did not match — run `album-purge clean` again",
    "TOKEN_EXCHANGE": "Check the client id and that the redirect URI is registered with the provider",
    "SCHEDULER": "The access token could not be renewed — run `album-purge clean` again to resume",
}

_ERROR_HINTS: list[tuple[str, str]] = [
    ("401", "Token may be expired or revoked — run `album-purge clean` again"),
    ("unauthorized", "Token may be expired or revoked — run `album-purge clean` again"),
    ("403", "Missing scope — the token needs user-library-read and user-library-modify"),
    ("429", "Rate limited — wait a moment and retry"),
    ("rate limit", "Rate limited — wait a moment and retry"),
    ("timeout", "Request timed out — try again or check network connectivity"),
    ("timed out", "Request timed out — try again or check network connectivity"),
    ("connection", "Connection error — check network connectivity"),
    ("address already in use", "Callback port is busy — pick another with --port"),
]


def _get_hint(error: Exception) -> str | None:
    """Match an error to an actionable hint."""
    lower = str(error).lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern.lower() in lower:
            return hint
    code = getattr(error, "code", None)
    if code in _CODE_HINTS:
        return _CODE_HINTS[code]
    return None


def error_code(error: Exception) -> str:
    """Classify an exception into an error code."""
    if isinstance(error, AlbumPurgeError):
        return error.code
    message = str(error).lower()
    if "timeout" in message or "timed out" in message:
        return "TIMEOUT"
    if "connection" in message:
        return "CONNECTION_ERROR"
    return "RUNTIME_ERROR"


def handle_error(error: Exception) -> None:
    """Log an error with its step and print a human-readable version to stderr."""
    code = error_code(error)
    step = getattr(error, "step", "") or "run"
    hint = _get_hint(error)

    logger.error(f"[{code}] {step}: {error}")

    console.print(f"[red]Error ({step}):[/red] {error}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
