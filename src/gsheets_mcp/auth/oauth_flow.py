"""Browser-mediated OAuth authorization flow.

Runs one authorization handshake: binds a local HTTP listener on the
redirect URI, prints the consent URL, waits for the browser to come back
with an authorization code, and exchanges the code for a credential record.

States:
    IDLE -> LISTENING -> AWAITING_CALLBACK -> EXCHANGING -> DONE
    Any state after IDLE can end in FAILED.

The listener runs on its own thread. It hands the outcome to the waiting
coroutine through a single-use future resolved with either the code or a
CallbackError; the first callback claims the session and later ones are
answered without touching it.
"""

import asyncio
import logging
import secrets
import sys
import threading
import webbrowser
from collections.abc import Callable
from enum import Enum
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

from google_auth_oauthlib.flow import Flow

from gsheets_mcp.auth.errors import (
    AuthError,
    AuthorizationCancelled,
    AuthorizationTimeout,
    CallbackError,
    ListenerStartupError,
    TokenExchangeError,
)
from gsheets_mcp.auth.models import CredentialRecord
from gsheets_mcp.config import OAuthClientConfig

logger = logging.getLogger(__name__)

DEFAULT_OAUTH_HOST = "localhost"
DEFAULT_OAUTH_PORT = 8080
DEFAULT_CALLBACK_PATH = "/oauth/callback"

SUCCESS_PAGE = (
    b"<html><head><title>Authentication Successful</title></head><body>"
    b"<h1>Authentication Successful!</h1>"
    b"<p>You can close this window and return to the application.</p>"
    b"<script>window.close();</script></body></html>"
)
FAILURE_PAGE = (
    b"<html><head><title>Authentication Failed</title></head><body>"
    b"<h1>Authentication Failed</h1>"
    b"<p>No authorization code received. Please close this window and try again.</p>"
    b"</body></html>"
)
ALREADY_HANDLED_PAGE = (
    b"<html><head><title>Authorization Complete</title></head><body>"
    b"<p>This authorization request has already been handled. "
    b"You can close this window.</p></body></html>"
)


class FlowState(str, Enum):
    """Authorization flow states."""

    IDLE = "idle"
    LISTENING = "listening"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"
    DONE = "done"
    FAILED = "failed"


class AuthorizationSession:
    """State shared between the callback listener and the waiting flow.

    Lives for one handshake only.

    Attributes:
        callback_path: The only path the listener answers.
        expected_state: CSRF state token sent with the authorization URL.
        outcome: Future resolved once with the code or a CallbackError.
    """

    def __init__(
        self, loop: asyncio.AbstractEventLoop, callback_path: str, expected_state: str
    ) -> None:
        self.callback_path = callback_path
        self.expected_state = expected_state
        self.outcome: asyncio.Future[str] = loop.create_future()
        self._loop = loop
        self._lock = threading.Lock()
        self._claimed = False

    @property
    def claimed(self) -> bool:
        with self._lock:
            return self._claimed

    def claim(self) -> bool:
        """Claim the session for the current callback.

        Returns:
            True for the first caller only.
        """
        with self._lock:
            if self._claimed:
                return False
            self._claimed = True
            return True

    def deliver_code(self, code: str) -> None:
        """Hand the authorization code to the waiting flow (thread-safe)."""
        self._loop.call_soon_threadsafe(self._resolve, code, None)

    def deliver_error(self, error: CallbackError) -> None:
        """Hand a callback failure to the waiting flow (thread-safe)."""
        self._loop.call_soon_threadsafe(self._resolve, None, error)

    def _resolve(self, code: str | None, error: CallbackError | None) -> None:
        if self.outcome.done():
            return
        if error is not None:
            self.outcome.set_exception(error)
        else:
            self.outcome.set_result(code)


class _CallbackServer(HTTPServer):
    """Local listener bound to one authorization session."""

    def __init__(self, address: tuple[str, int], session: AuthorizationSession) -> None:
        self.session = session
        super().__init__(address, _CallbackHandler)


class _CallbackHandler(BaseHTTPRequestHandler):
    """HTTP handler for the OAuth redirect."""

    server: _CallbackServer

    def log_message(self, format: str, *args) -> None:
        """Route HTTP server logs through logging instead of stderr."""
        logger.debug("callback listener: " + format, *args)

    def _send_page(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:  # noqa: N802
        """Handle GET request from OAuth redirect."""
        session = self.server.session
        request_parsed = urlparse(self.path)

        if request_parsed.path != session.callback_path:
            self.send_response(404)
            self.end_headers()
            self.wfile.write(b"Not Found")
            return

        if not session.claim():
            logger.warning("Ignoring duplicate OAuth callback")
            self._send_page(200, ALREADY_HANDLED_PAGE)
            return

        query_params = parse_qs(request_parsed.query)

        if "error" in query_params:
            session.deliver_error(
                CallbackError(f"OAuth authorization failed: {query_params['error'][0]}")
            )
            self._send_page(400, FAILURE_PAGE)
            return

        state = query_params.get("state", [None])[0]
        if state is not None and not secrets.compare_digest(state, session.expected_state):
            session.deliver_error(CallbackError("state mismatch in OAuth callback"))
            self._send_page(400, FAILURE_PAGE)
            return

        code = query_params.get("code", [""])[0]
        if not code:
            session.deliver_error(CallbackError("no code in OAuth callback"))
            self._send_page(400, FAILURE_PAGE)
            return

        session.deliver_code(code)
        self._send_page(200, SUCCESS_PAGE)


def _print_authorization_url(auth_url: str) -> None:
    """Show the consent URL to the operator on stderr (stdout carries the protocol)."""
    rule = "=" * 80
    print(
        f"\n{rule}\nGOOGLE OAUTH AUTHENTICATION REQUIRED\n{rule}\n\n"
        f"Please visit the following URL to authorize this application:\n\n{auth_url}\n\n"
        f"Waiting for authorization...\n{rule}\n",
        file=sys.stderr,
        flush=True,
    )


class AuthorizationFlow:
    """One-shot authorization handshake.

    Attributes:
        config: OAuth client configuration.
        state: Current FlowState.
        bound_port: Port the callback listener is bound to, once listening.

    Example:
        ```python
        flow = AuthorizationFlow(load_config())
        record = await flow.run()
        ```
    """

    def __init__(
        self,
        config: OAuthClientConfig,
        *,
        emit_url: Callable[[str], None] | None = None,
        open_browser: bool = False,
    ) -> None:
        """Initialize the flow.

        Args:
            config: OAuth client configuration.
            emit_url: Called with the authorization URL. Defaults to printing
                it to stderr.
            open_browser: Also try to open the URL in a local browser.
        """
        self.config = config
        self.state = FlowState.IDLE
        self.bound_port: int | None = None
        self._emit_url = emit_url or _print_authorization_url
        self._open_browser = open_browser

        parsed = urlparse(config.redirect_uri)
        self.host = parsed.hostname or DEFAULT_OAUTH_HOST
        self.port = parsed.port if parsed.port is not None else DEFAULT_OAUTH_PORT
        self.callback_path = parsed.path or DEFAULT_CALLBACK_PATH

    def _transition(self, new_state: FlowState) -> None:
        logger.debug(f"Authorization flow: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _build_flow(self) -> Flow:
        return Flow.from_client_config(
            self.config.client_config(),
            scopes=self.config.scopes,
            redirect_uri=self.config.redirect_uri,
        )

    async def run(self, cancel: asyncio.Event | None = None) -> CredentialRecord:
        """Run the handshake to completion.

        Args:
            cancel: Optional event; setting it while waiting for the callback
                aborts the flow. It is not observed once the exchange starts.

        Returns:
            The freshly issued credential record.

        Raises:
            ListenerStartupError: If the callback listener cannot be bound.
            CallbackError: If the callback carries no usable code.
            AuthorizationCancelled: If cancel is set while waiting.
            AuthorizationTimeout: If no callback arrives in time.
            TokenExchangeError: If the code exchange fails.
        """
        if self.state is not FlowState.IDLE:
            raise AuthError("authorization flow has already been used")

        loop = asyncio.get_running_loop()
        state_token = secrets.token_urlsafe(32)
        session = AuthorizationSession(loop, self.callback_path, state_token)

        try:
            server = _CallbackServer((self.host, self.port), session)
        except OSError as e:
            self._transition(FlowState.FAILED)
            raise ListenerStartupError(f"failed to start OAuth callback server: {e}") from e

        self.bound_port = server.server_address[1]
        self._transition(FlowState.LISTENING)
        thread = threading.Thread(
            target=server.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="oauth-callback",
            daemon=True,
        )
        thread.start()

        succeeded = False
        try:
            flow = self._build_flow()
            auth_url, _ = flow.authorization_url(
                access_type="offline",
                prompt="consent",
                state=state_token,
            )

            self._transition(FlowState.AWAITING_CALLBACK)
            self._emit_url(auth_url)
            if self._open_browser:
                webbrowser.open(auth_url)

            code = await self._await_callback(session, cancel)

            self._transition(FlowState.EXCHANGING)
            record = await loop.run_in_executor(None, self._exchange_code, flow, code)
            succeeded = True
        finally:
            server.shutdown()
            server.server_close()
            thread.join()
            if not session.outcome.done():
                session.outcome.cancel()
            self._transition(FlowState.DONE if succeeded else FlowState.FAILED)

        logger.info("OAuth authorization completed")
        return record

    async def _await_callback(
        self, session: AuthorizationSession, cancel: asyncio.Event | None
    ) -> str:
        """Wait for the first of callback, cancellation or timeout."""
        waiters: set[asyncio.Future] = {session.outcome}
        cancel_waiter = None
        if cancel is not None:
            cancel_waiter = asyncio.ensure_future(cancel.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.config.callback_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()

        if session.outcome in done:
            return session.outcome.result()
        if cancel_waiter is not None and cancel_waiter in done:
            raise AuthorizationCancelled("authorization cancelled")
        raise AuthorizationTimeout(
            f"no OAuth callback received within {self.config.callback_timeout:g} seconds"
        )

    def _exchange_code(self, flow: Flow, code: str) -> CredentialRecord:
        """Exchange the authorization code for tokens (blocking)."""
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            raise TokenExchangeError(f"unable to exchange code for token: {e}") from e

        return CredentialRecord.from_credentials(flow.credentials, self.config.scopes)
