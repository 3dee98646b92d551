"""Proactive access-token refresh.

Keeps at most one refresh timer armed. Each successful refresh re-arms the
scheduler for the new expiry until it is cancelled.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from album_purge.auth import TokenService
from album_purge.models.auth import Session
from album_purge.utils.errors import AlbumPurgeError, SchedulerError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


class RefreshScheduler:
    """Refreshes the session's access token shortly before it expires."""

    def __init__(
        self,
        tokens: TokenService,
        session: Session,
        on_failure: Callable[[Exception], None],
        margin: int = 10,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._tokens = tokens
        self._session = session
        self._on_failure = on_failure
        self._margin = margin
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0
        self._cancelled = False
        self.delay: float | None = None

    @property
    def pending(self) -> bool:
        """Whether a refresh timer is currently armed."""
        with self._lock:
            return self._timer is not None

    def delay_for(self, expires_in: int) -> float:
        """Seconds to wait before refreshing a token valid for ``expires_in``. Never negative."""
        return float(max(expires_in - self._margin, 0))

    def schedule(self, expires_in: int) -> None:
        """Arm the refresh timer, replacing any pending one."""
        with self._lock:
            if self._cancelled:
                logger.debug("Scheduler cancelled, not re-arming")
                return
            if self._timer is not None:
                self._timer.cancel()

            self._generation += 1
            self.delay = self.delay_for(expires_in)
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

        logger.info(f"Token refresh scheduled in {self.delay:.0f}s")

    def cancel(self) -> None:
        """Cancel the pending timer and block any further re-arming."""
        with self._lock:
            self._cancelled = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._cancelled or generation != self._generation:
                return
            self._timer = None

        try:
            expires_in = self.refresh_now()
        except Exception as e:
            self._on_failure(e)
            return

        self.schedule(expires_in)

    def refresh_now(self) -> int:
        """Refresh the session token once. Returns the new ``expires_in``.

        Raises:
            SchedulerError: If the refresh could not be completed.
        """
        refresh_token = self._session.current_refresh_token()
        if not refresh_token:
            raise SchedulerError("No refresh token in session", step="token refresh")

        try:
            response = self._tokens.refresh(refresh_token)
        except AlbumPurgeError as e:
            raise SchedulerError(f"Token refresh failed: {e}", step="token refresh") from e

        if not response.ok:
            raise SchedulerError(
                f"Token refresh failed (HTTP {response.status})",
                step="token refresh",
                status=response.status,
            )

        self._session.apply(response)
        logger.info("Access token refreshed")
        return response.expires_in or DEFAULT_EXPIRES_IN
