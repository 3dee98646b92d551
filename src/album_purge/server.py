"""Local callback receiver and browser launcher.

A small threaded HTTP listener that accepts the provider's redirect on the
redirect URI's path, hands the query parameters to a callback, and serves
the static success/error page the callback picks.
"""

from __future__ import annotations

import logging
import webbrowser
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs, urlparse

from album_purge.callback import Page

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent / "public"

CallbackFn = Callable[[dict[str, str], Callable[[Page], None]], None]


def load_page(page: Page) -> bytes:
    """Read the static HTML document for a page."""
    return (PUBLIC_DIR / f"{page.value}.html").read_bytes()


def open_browser(uri: str) -> bool:
    """Open ``uri`` in the user's default browser. Returns False if no browser could be used."""
    try:
        return webbrowser.open(uri, new=2)
    except webbrowser.Error as e:
        logger.warning(f"Could not open browser: {e}")
        return False


class _CallbackRequestHandler(BaseHTTPRequestHandler):
    server: _CallbackHTTPServer

    def setup(self) -> None:
        # Idle connections (browser preconnects) must not outlive shutdown
        self.timeout = self.server.request_timeout
        super().setup()

    def do_GET(self) -> None:  # noqa: N802
        request_url = urlparse(self.path)
        if request_url.path != self.server.callback_path:
            self.send_error(404)
            return

        # Single-valued view of the query; the first value wins
        params = {key: values[0] for key, values in parse_qs(request_url.query, keep_blank_values=True).items()}
        responded = False

        def respond(page: Page) -> None:
            nonlocal responded
            if responded:
                return
            responded = True
            body = load_page(page)
            self.send_response(200 if page is Page.SUCCESS else 400)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.send_header("Connection", "close")
            self.end_headers()
            self.wfile.write(body)
            self.wfile.flush()

        try:
            self.server.on_callback(params, respond)
        finally:
            if not responded:
                respond(Page.ERROR)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.debug(f"{self.address_string()} {format % args}")


class _CallbackHTTPServer(ThreadingHTTPServer):
    # Join handler threads on close so an in-flight callback finishes
    daemon_threads = False

    def __init__(
        self,
        address: tuple[str, int],
        callback_path: str,
        on_callback: CallbackFn,
        request_timeout: float,
    ) -> None:
        self.callback_path = callback_path
        self.on_callback = on_callback
        self.request_timeout = request_timeout
        super().__init__(address, _CallbackRequestHandler)


class CallbackServer:
    """One-shot redirect receiver bound to ``host:port`` and ``path``."""

    def __init__(
        self,
        host: str,
        port: int,
        path: str,
        on_callback: CallbackFn,
        request_timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._path = path or "/"
        self._on_callback = on_callback
        self._request_timeout = request_timeout
        self._httpd: _CallbackHTTPServer | None = None
        self._serving = False

    @property
    def port(self) -> int:
        """Bound port (useful when constructed with port 0)."""
        if self._httpd is None:
            return self._port
        return self._httpd.server_address[1]

    def bind(self) -> None:
        """Bind the listening socket. Raises OSError if the port is taken."""
        self._httpd = _CallbackHTTPServer(
            (self._host, self._port), self._path, self._on_callback, self._request_timeout
        )
        logger.info(f"Listening for the authorization callback on {self._host}:{self.port}{self._path}")

    def serve_forever(self, poll_interval: float = 0.2) -> None:
        """Serve until ``stop`` is called from another thread."""
        if self._httpd is None:
            raise RuntimeError("CallbackServer.bind() must be called first")
        self._serving = True
        try:
            self._httpd.serve_forever(poll_interval=poll_interval)
        finally:
            self._serving = False

    def stop(self) -> None:
        """Make ``serve_forever`` return. Safe to call when not serving."""
        if self._httpd is not None and self._serving:
            self._httpd.shutdown()

    def close(self) -> None:
        """Close the socket, waiting for in-flight handlers to finish."""
        if self._httpd is not None:
            self._httpd.server_close()
            self._httpd = None
