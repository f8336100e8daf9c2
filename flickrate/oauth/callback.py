"""Loopback HTTP listener that captures the provider's authorization redirect.

The listener serves on an OS-assigned port of 127.0.0.1 in a background
thread. The first request to the callback path hands its ``oauth_verifier``
to the waiter through a one-shot future and shuts the server down. Later
requests are answered with 410 and never delivered.
"""

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlsplit

import structlog

from flickrate.errors import VerifierTimeoutError
from flickrate.oauth.constants import (
    CALLBACK_HOST,
    CALLBACK_PATH,
    COMPONENT_OAUTH,
    PARAM_VERIFIER,
)


logger = structlog.get_logger()

_PAGE_TEMPLATE = (
    "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>flickrate</title>"
    "</head><body><p>{message}</p></body></html>"
)

CONFIRMATION_MESSAGE = "Authorization received. You can close this window."
INCOMPLETE_MESSAGE = "Authorization was not completed. Please run flickrate again."
GONE_MESSAGE = "This authorization link has already been used."
NOT_FOUND_MESSAGE = "Not found."


class _CallbackServer(HTTPServer):
    """HTTPServer that knows which listener it reports to."""

    def __init__(
        self,
        server_address: tuple[str, int],
        listener: "CallbackListener",
    ) -> None:
        self.listener = listener
        super().__init__(server_address, _CallbackHandler)


class _CallbackHandler(BaseHTTPRequestHandler):
    """Handles the provider redirect."""

    server: _CallbackServer

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        """Route http.server access logs to structlog."""
        logger.debug("callback_http", component=COMPONENT_OAUTH, message=format % args)

    def do_GET(self) -> None:  # noqa: N802
        """Deliver the verifier from the first callback request."""
        listener = self.server.listener
        parts = urlsplit(self.path)

        if parts.path != listener.path:
            self._respond(HTTPStatus.NOT_FOUND, NOT_FOUND_MESSAGE)
            return

        verifier = parse_qs(parts.query).get(PARAM_VERIFIER, [""])[0]
        if not listener.deliver(verifier):
            self._respond(HTTPStatus.GONE, GONE_MESSAGE)
            return

        if verifier:
            self._respond(HTTPStatus.OK, CONFIRMATION_MESSAGE)
        else:
            self._respond(HTTPStatus.BAD_REQUEST, INCOMPLETE_MESSAGE)

        # serve_forever runs on this thread; shutdown() must come from another
        threading.Thread(target=listener.close, daemon=True).start()

    def _respond(self, status: HTTPStatus, message: str) -> None:
        body = _PAGE_TEMPLATE.format(message=message).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


class CallbackListener:
    """Short-lived local HTTP endpoint that captures one verifier.

    Usable as a context manager; leaving the block shuts the server down
    whether or not a verifier arrived.
    """

    def __init__(self, host: str = CALLBACK_HOST, path: str = CALLBACK_PATH) -> None:
        """Initialize the listener.

        Args:
            host: Interface to bind.
            path: The single path that accepts the callback.
        """
        self._host = host
        self._path = path
        self._verifier: Future[str] = Future()
        self._deliver_lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._server: _CallbackServer | None = None
        self._thread: threading.Thread | None = None
        self._callback_url: str | None = None
        self._closed = False
        self._log = logger.bind(component=COMPONENT_OAUTH, subcomponent="callback")

    @property
    def path(self) -> str:
        """Get the callback path."""
        return self._path

    @property
    def callback_url(self) -> str | None:
        """Get the callback URL, once started."""
        return self._callback_url

    @property
    def is_running(self) -> bool:
        """Check if the server is accepting requests."""
        return self._server is not None and not self._closed

    def start(self) -> str:
        """Bind an ephemeral port and start serving in the background.

        Returns:
            Callback URL to hand to the provider as ``oauth_callback``.

        Raises:
            RuntimeError: If the listener was already started.
        """
        if self._server is not None:
            msg = "Callback listener already started"
            raise RuntimeError(msg)

        server = _CallbackServer((self._host, 0), self)
        self._server = server
        self._thread = threading.Thread(
            target=server.serve_forever,
            name="oauth-callback",
            daemon=True,
        )
        self._thread.start()

        host, port = server.server_address[0], server.server_address[1]
        if isinstance(host, bytes):
            host = host.decode("utf-8")
        self._callback_url = f"http://{host}:{port}{self._path}"

        self._log.info("callback_listener_started", port=port)
        return self._callback_url

    def deliver(self, verifier: str) -> bool:
        """Hand a verifier to the waiter.

        Args:
            verifier: Value of ``oauth_verifier`` (may be empty).

        Returns:
            True if this call delivered, False if a verifier was already
            delivered.
        """
        with self._deliver_lock:
            if self._verifier.done():
                self._log.warning("callback_rejected_after_delivery")
                return False
            self._verifier.set_result(verifier)

        self._log.info("verifier_received", empty=not verifier)
        return True

    def await_verifier(self, timeout: float | None = None) -> str:
        """Block until the verifier arrives.

        Args:
            timeout: Seconds to wait; None waits forever.

        Returns:
            The verifier string (possibly empty).

        Raises:
            VerifierTimeoutError: If nothing arrived within the timeout.
        """
        try:
            return self._verifier.result(timeout=timeout)
        except FutureTimeoutError as e:
            self._log.warning("verifier_timeout", timeout_seconds=timeout)
            msg = f"No authorization callback received within {timeout} seconds"
            raise VerifierTimeoutError(msg) from e

    def close(self) -> None:
        """Stop serving and release the port. Safe to call more than once."""
        with self._close_lock:
            if self._closed or self._server is None:
                self._closed = True
                return
            self._closed = True
            server = self._server

        server.shutdown()
        server.server_close()
        self._log.info("callback_listener_stopped")

    def __enter__(self) -> "CallbackListener":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
