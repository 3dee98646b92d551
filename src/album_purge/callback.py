"""Authorization callback state machine.

Validates the provider's redirect, exchanges the code, then hands over to
the library cleanup. Knows nothing about the HTTP listener: the listener
passes in the query parameters and a ``respond`` callable.
"""

from __future__ import annotations

import logging
import secrets
import threading
from enum import Enum
from typing import Callable, Mapping

from album_purge.auth import TokenService
from album_purge.models.auth import Session
from album_purge.models.library import CleanupResult
from album_purge.scheduler import DEFAULT_EXPIRES_IN, RefreshScheduler
from album_purge.services.cleanup import LibraryCleanup
from album_purge.utils.errors import AuthValidationError, TokenExchangeError, handle_error

logger = logging.getLogger(__name__)


class Page(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class AuthState(str, Enum):
    AWAITING_CALLBACK = "awaiting_callback"
    VALIDATING = "validating"
    EXCHANGING = "exchanging"
    CLEANING = "cleaning"
    DONE = "done"
    ERROR = "error"


class AuthFlow:
    """Drives one authorization callback from validation to finished cleanup."""

    def __init__(
        self,
        session: Session,
        tokens: TokenService,
        scheduler: RefreshScheduler,
        cleanup_factory: Callable[[], LibraryCleanup],
        redirect_uri: str,
        on_finish: Callable[[bool], None],
    ) -> None:
        self._session = session
        self._tokens = tokens
        self._scheduler = scheduler
        self._cleanup_factory = cleanup_factory
        self._redirect_uri = redirect_uri
        self._on_finish = on_finish
        self._lock = threading.Lock()
        self.state = AuthState.AWAITING_CALLBACK
        self.result: CleanupResult | None = None

    def handle_callback(self, params: Mapping[str, str], respond: Callable[[Page], None]) -> None:
        """Process the redirect's ``state``, ``code`` and ``error`` parameters.

        ``respond`` is called exactly once with the page to show the user.
        """
        with self._lock:
            if self.state is not AuthState.AWAITING_CALLBACK:
                logger.warning(f"Ignoring repeated callback in state {self.state.value}")
                respond(Page.ERROR)
                return
            self.state = AuthState.VALIDATING

        try:
            code = self._validate(params)
        except AuthValidationError as e:
            self._fail(e, respond)
            return

        self.state = AuthState.EXCHANGING
        try:
            response = self._tokens.exchange_code(code, self._session.code_verifier, self._redirect_uri)
            if not response.ok:
                raise TokenExchangeError(
                    f"Error requesting access token (HTTP {response.status})",
                    step="code exchange",
                    status=response.status,
                )
            self._session.apply(response)
        except Exception as e:
            self._fail(e, respond)
            return

        logger.info("Authorization successful")
        respond(Page.SUCCESS)

        try:
            self._scheduler.schedule(response.expires_in or DEFAULT_EXPIRES_IN)
            self.state = AuthState.CLEANING
            self.result = self._cleanup_factory().run()
        except Exception as e:
            self._fail(e)
            return

        self.state = AuthState.DONE
        self._on_finish(not self.result.interrupted)

    def _validate(self, params: Mapping[str, str]) -> str:
        """Check state and consent before anything touches the network."""
        error = params.get("error")
        if error is not None:
            raise AuthValidationError(f"Authorization denied by provider: {error}", step="callback")

        received = params.get("state") or ""
        if not secrets.compare_digest(received.encode(), self._session.state.encode()):
            raise AuthValidationError("State parameter does not match this session", step="callback")

        code = params.get("code")
        if not code:
            raise AuthValidationError("Redirect carried no authorization code", step="callback")
        return code

    def _fail(self, error: Exception, respond: Callable[[Page], None] | None = None) -> None:
        self.state = AuthState.ERROR
        handle_error(error)
        if respond is not None:
            respond(Page.ERROR)
        self._on_finish(False)
