"""Three-legged OAuth 1.0a authorization flow.

Request token -> user grant in the browser -> verifier on the loopback
callback -> access token. Any failure moves the flow to FAILED and is
re-raised; the flow never retries and never returns a partial credential.
"""

from collections.abc import Callable
from urllib.parse import parse_qsl, urlencode

import httpx
import structlog

from flickrate.browser import open_in_browser
from flickrate.errors import ProtocolError
from flickrate.oauth.callback import CallbackListener
from flickrate.oauth.constants import (
    ACCESS_TOKEN_URL,
    AUTHORIZE_URL,
    COMPONENT_OAUTH,
    DEFAULT_VERIFIER_TIMEOUT_SECONDS,
    PARAM_CALLBACK_CONFIRMED,
    PARAM_TOKEN,
    PARAM_TOKEN_SECRET,
    PARAM_USER_NSID,
    PARAM_USERNAME,
    REQUEST_TOKEN_URL,
)
from flickrate.oauth.models import (
    AccessTokenParams,
    AuthorizeParams,
    Credential,
    PendingAuthorization,
    RequestTokenParams,
)
from flickrate.oauth.signer import RequestSigner
from flickrate.oauth.state_machine import AuthState, AuthStateMachine
from flickrate.transport import http_get


logger = structlog.get_logger()


def build_authorize_url(request_token: str) -> str:
    """Build the user-facing authorization URL.

    Args:
        request_token: Token from the request-token leg.

    Returns:
        URL to open in the browser.
    """
    params = AuthorizeParams(token=request_token).to_params()
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


class AuthorizationFlow:
    """Runs the handshake once and returns the access credential."""

    def __init__(  # noqa: PLR0913
        self,
        credential: Credential,
        http_client: httpx.Client,
        browser: Callable[[str], None] = open_in_browser,
        listener_factory: Callable[[], CallbackListener] = CallbackListener,
        verifier_timeout: float | None = DEFAULT_VERIFIER_TIMEOUT_SECONDS,
        signer: RequestSigner | None = None,
        run_id: str = "",
    ) -> None:
        """Initialize the flow.

        Args:
            credential: Consumer credential; any access token on it is ignored.
            http_client: HTTP client for the token endpoints.
            browser: Opens the authorization URL.
            listener_factory: Creates the callback listener.
            verifier_timeout: Seconds to wait for the callback.
            signer: Request signer (built from the credential if omitted).
            run_id: Run identifier for logging.
        """
        self._credential = credential
        self._http_client = http_client
        self._browser = browser
        self._listener_factory = listener_factory
        self._verifier_timeout = verifier_timeout
        self._signer = signer or RequestSigner(credential)
        self._state_machine = AuthStateMachine(run_id=run_id)
        self._log = logger.bind(component=COMPONENT_OAUTH, run_id=run_id)

    @property
    def state(self) -> AuthState:
        """Get the current handshake state."""
        return self._state_machine.state

    def run(self) -> Credential:
        """Run the handshake.

        Returns:
            A new Credential carrying the access token pair and the
            authorized user's identity.

        Raises:
            ProtocolError: If the provider rejects a leg or the verifier is empty.
            NetworkError: On transport failure.
            VerifierTimeoutError: If the provider never redirects back.
            BrowserLaunchError: If the authorization page cannot be opened.
        """
        listener = self._listener_factory()
        try:
            return self._run(listener)
        except Exception as e:
            if not self._state_machine.is_terminal:
                self._state_machine.to_failed()
            self._log.warning(
                "authorization_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
        finally:
            listener.close()

    def _run(self, listener: CallbackListener) -> Credential:
        self._state_machine.to_requesting_token()
        callback_url = listener.start()
        pending = self._request_token(callback_url)

        self._state_machine.to_awaiting_user_grant()
        self._browser(build_authorize_url(pending.request_token))
        verifier = listener.await_verifier(timeout=self._verifier_timeout)
        if not verifier:
            msg = "Incomplete OAuth authentication: empty verifier"
            raise ProtocolError(msg)
        pending = pending.with_verifier(verifier)

        self._state_machine.to_exchanging_token()
        credential = self._exchange_token(pending)

        self._state_machine.to_authorized()
        self._log.info("authorization_complete", username=credential.username)
        return credential

    def _request_token(self, callback_url: str) -> PendingAuthorization:
        """Fetch a request token, signed with an empty token secret."""
        values = self._call(
            REQUEST_TOKEN_URL,
            RequestTokenParams(callback=callback_url).to_params(),
            token="",
            token_secret="",
        )

        confirmed = values.get(PARAM_CALLBACK_CONFIRMED, "")
        if confirmed != "true":
            msg = f"{PARAM_CALLBACK_CONFIRMED} was not true: {confirmed!r}"
            raise ProtocolError(msg)

        token = values.get(PARAM_TOKEN, "")
        secret = values.get(PARAM_TOKEN_SECRET, "")
        if not token or not secret:
            msg = "Request token response is missing the token pair"
            raise ProtocolError(msg)

        return PendingAuthorization(
            request_token=token,
            request_token_secret=secret,
            callback_url=callback_url,
        )

    def _exchange_token(self, pending: PendingAuthorization) -> Credential:
        """Trade the request token and verifier for an access token."""
        values = self._call(
            ACCESS_TOKEN_URL,
            AccessTokenParams(verifier=pending.verifier).to_params(),
            token=pending.request_token,
            token_secret=pending.request_token_secret,
        )

        token = values.get(PARAM_TOKEN, "")
        secret = values.get(PARAM_TOKEN_SECRET, "")
        if not token or not secret:
            msg = "Access token response is missing the token pair"
            raise ProtocolError(msg)

        return self._credential.model_copy(
            update={
                "access_token": token,
                "access_token_secret": secret,
                "user_nsid": values.get(PARAM_USER_NSID, ""),
                "username": values.get(PARAM_USERNAME, ""),
            }
        )

    def _call(
        self,
        url: str,
        params: dict[str, str],
        token: str,
        token_secret: str,
    ) -> dict[str, str]:
        """Sign and execute one handshake request.

        Returns:
            Form-encoded response body as a dictionary.
        """
        signed = self._signer.sign(
            url,
            params,
            token=token,
            token_secret=token_secret,
        )
        response = http_get(self._http_client, signed.url, COMPONENT_OAUTH)
        return dict(parse_qsl(response.text, keep_blank_values=True))
