"""Process lifecycle: wire the components, start, run, shut down."""

from __future__ import annotations

import logging
import threading
from typing import Callable
from urllib.parse import urlparse

from rich.console import Console

from album_purge.auth import TokenService, build_authorization_url
from album_purge.callback import AuthFlow
from album_purge.client import LibraryClient
from album_purge.config import Config
from album_purge.models.auth import Session
from album_purge.models.library import CleanupResult
from album_purge.scheduler import RefreshScheduler
from album_purge.server import CallbackServer, open_browser
from album_purge.services.cleanup import LibraryCleanup
from album_purge.utils.errors import handle_error

console = Console(stderr=True)
logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class Lifecycle:
    """Owns every component of one run.

    ``start`` binds the listener and opens the authorization URL, ``run``
    blocks until ``shutdown`` is requested, and returns the exit code.
    """

    def __init__(
        self,
        config: Config,
        session: Session | None = None,
        browser: Callable[[str], bool] = open_browser,
        verbose: bool = False,
    ) -> None:
        self._config = config
        self._browser = browser
        self.session = session or Session.create()
        self.tokens = TokenService(config)
        self.library = LibraryClient(config, self.session, verbose=verbose)
        self.scheduler = RefreshScheduler(
            self.tokens,
            self.session,
            on_failure=self._on_refresh_failure,
            margin=config.settings.refresh_margin,
        )
        self.flow = AuthFlow(
            self.session,
            self.tokens,
            self.scheduler,
            cleanup_factory=self._make_cleanup,
            redirect_uri=config.settings.redirect_uri,
            on_finish=self.shutdown,
        )
        self.server: CallbackServer | None = None
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self.success: bool | None = None

    @property
    def authorization_url(self) -> str:
        settings = self._config.settings
        return build_authorization_url(
            self._config.provider.authorize_url,
            settings.client_id,
            settings.redirect_uri,
            settings.scope,
            self.session.state,
            self.session.code_challenge,
        )

    @property
    def result(self) -> CleanupResult | None:
        return self.flow.result

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def start(self) -> None:
        """Bind the callback listener, then send the user to the provider."""
        settings = self._config.settings
        path = urlparse(settings.redirect_uri).path or "/cb"
        self.server = CallbackServer(
            settings.host,
            settings.port,
            path,
            self.flow.handle_callback,
            request_timeout=settings.http_timeout,
        )
        self.server.bind()

        url = self.authorization_url
        console.print("Please authorize this application to access your library data.", style="bold")
        if not (settings.open_browser and self._browser(url)):
            console.print(f"Open this URL in a browser:\n{url}")

    def run(self) -> int:
        """Start, serve until shutdown, then release resources. Returns the exit code."""
        try:
            self.start()
            self.server.serve_forever()
        except KeyboardInterrupt:
            console.print("[yellow]Interrupted.[/yellow]")
            self.shutdown(False)
        except Exception as e:
            handle_error(e)
            self.shutdown(False)
        finally:
            self.close()

        return EXIT_OK if self.success else EXIT_FAILURE

    def shutdown(self, success: bool = False) -> None:
        """Stop future work and the listener. Idempotent; first outcome wins."""
        with self._lock:
            if self._stopped.is_set():
                return
            self._stopped.set()
            self.success = success

        console.print("Completed!" if success else "[red]Stopped after an error.[/red]")
        console.print("Shutting down...")

        self.scheduler.cancel()
        if self.server is not None:
            self.server.stop()

    def close(self) -> None:
        """Close the listener (waiting for in-flight handlers) and HTTP clients."""
        self.scheduler.cancel()
        if self.server is not None:
            self.server.close()
        self.library.close()
        self.tokens.close()

    def _make_cleanup(self) -> LibraryCleanup:
        return LibraryCleanup(
            self.library,
            self._config.settings.page_size,
            should_stop=self._stopped.is_set,
        )

    def _on_refresh_failure(self, error: Exception) -> None:
        handle_error(error)
        self.shutdown(False)
