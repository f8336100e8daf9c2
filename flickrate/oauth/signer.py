"""OAuth 1.0a request signing.

Builds the canonical base string for a request, signs it with HMAC-SHA1 and
returns the request with every parameter, including ``oauth_signature``,
ready to be sent as a query string.
"""

import secrets
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import quote

from flickrate.errors import EncodingError
from flickrate.oauth.constants import (
    HTTP_METHOD,
    NONCE_BYTES,
    OAUTH_VERSION,
    PARAM_CONSUMER_KEY,
    PARAM_NONCE,
    PARAM_SIGNATURE,
    PARAM_SIGNATURE_METHOD,
    PARAM_TIMESTAMP,
    PARAM_TOKEN,
    PARAM_VERSION,
    SIGNATURE_METHOD,
)
from flickrate.oauth.models import Credential
from flickrate.oauth.signature import sign as hmac_sign


def percent_encode(value: str) -> str:
    """Percent-encode a value per RFC 3986.

    Only unreserved characters (``A-Z a-z 0-9 - . _ ~``) are left as-is.
    Spaces become ``%20``, never ``+``.

    Args:
        value: Raw parameter name or value.

    Returns:
        Encoded string.

    Raises:
        EncodingError: If the value is not a string or is not valid UTF-8 text.
    """
    if not isinstance(value, str):
        msg = f"Parameter values must be strings, got {type(value).__name__}"
        raise EncodingError(msg)
    try:
        return quote(value, safe="")
    except UnicodeEncodeError as e:
        msg = f"Parameter cannot be encoded: {e}"
        raise EncodingError(msg) from e


def canonicalize(params: Mapping[str, str]) -> str:
    """Build the normalized parameter string.

    Args:
        params: Request parameters (excluding ``oauth_signature``).

    Returns:
        Encoded ``key=value`` pairs sorted by key then value, joined by ``&``.
    """
    pairs = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in pairs)


def build_base_string(method: str, base_url: str, params: Mapping[str, str]) -> str:
    """Build the signature base string.

    Args:
        method: HTTP method.
        base_url: URL without query string.
        params: Request parameters (excluding ``oauth_signature``).

    Returns:
        ``METHOD&enc(base_url)&enc(canonical params)``.
    """
    return "&".join(
        [
            method.upper(),
            percent_encode(base_url),
            percent_encode(canonicalize(params)),
        ]
    )


def build_signing_key(consumer_secret: str, token_secret: str = "") -> bytes:
    """Build the HMAC key.

    The token secret is empty on the first leg of the handshake.

    Args:
        consumer_secret: Consumer (API) secret.
        token_secret: Request or access token secret.

    Returns:
        ``enc(consumer_secret)&enc(token_secret)`` as bytes.
    """
    key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    return key.encode("ascii")


def generate_nonce() -> str:
    """Generate an unpredictable nonce from the OS CSPRNG."""
    return secrets.token_hex(NONCE_BYTES)


@dataclass(frozen=True)
class SignedRequest:
    """A signed GET request.

    Attributes:
        method: HTTP method.
        base_url: URL without query string.
        params: Sorted parameter pairs, including ``oauth_signature``.
    """

    method: str
    base_url: str
    params: tuple[tuple[str, str], ...]

    @property
    def signature(self) -> str:
        """Get the ``oauth_signature`` value."""
        return self.query[PARAM_SIGNATURE]

    @property
    def query(self) -> dict[str, str]:
        """Get the parameters as a dictionary."""
        return dict(self.params)

    @property
    def query_string(self) -> str:
        """Get the percent-encoded query string."""
        return "&".join(
            f"{percent_encode(k)}={percent_encode(v)}" for k, v in self.params
        )

    @property
    def url(self) -> str:
        """Get the full URL with all parameters as the query string."""
        return f"{self.base_url}?{self.query_string}"


class RequestSigner:
    """Signs outgoing requests with the consumer credential.

    The clock and nonce source are injectable so that signatures can be
    reproduced in tests. Each call draws a fresh nonce and timestamp.
    """

    def __init__(
        self,
        credential: Credential,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = generate_nonce,
    ) -> None:
        """Initialize the signer.

        Args:
            credential: Consumer credential, optionally with an access token.
            clock: Source of the Unix timestamp.
            nonce_factory: Source of per-request nonces.
        """
        self._credential = credential
        self._clock = clock
        self._nonce_factory = nonce_factory

    @property
    def credential(self) -> Credential:
        """Get the credential used for signing."""
        return self._credential

    def sign(
        self,
        base_url: str,
        params: Mapping[str, str] | None = None,
        token: str | None = None,
        token_secret: str | None = None,
        method: str = HTTP_METHOD,
    ) -> SignedRequest:
        """Sign a request.

        Args:
            base_url: URL without query string.
            params: Operation parameters.
            token: Token to sign with. Defaults to the credential's access
                token; pass ``""`` to sign anonymously.
            token_secret: Secret matching ``token``.
            method: HTTP method.

        Returns:
            SignedRequest carrying all parameters and the signature.

        Raises:
            EncodingError: If a parameter cannot be encoded or the caller
                supplied ``oauth_signature`` itself.
        """
        static = dict(params or {})
        if PARAM_SIGNATURE in static:
            msg = f"{PARAM_SIGNATURE} is computed by the signer"
            raise EncodingError(msg)

        if token is None:
            token = self._credential.access_token
            token_secret = self._credential.access_token_secret
        token_secret = token_secret or ""

        merged: dict[str, str] = {
            PARAM_NONCE: self._nonce_factory(),
            PARAM_TIMESTAMP: str(int(self._clock())),
            PARAM_CONSUMER_KEY: self._credential.consumer_key,
            PARAM_SIGNATURE_METHOD: SIGNATURE_METHOD,
            PARAM_VERSION: OAUTH_VERSION,
        }
        if token:
            merged[PARAM_TOKEN] = token
        merged.update(static)

        base_string = build_base_string(method, base_url, merged)
        key = build_signing_key(self._credential.consumer_secret, token_secret)
        merged[PARAM_SIGNATURE] = hmac_sign(key, base_string).decode("ascii")

        return SignedRequest(
            method=method.upper(),
            base_url=base_url,
            params=tuple(sorted(merged.items())),
        )

    def build_signed_url(
        self,
        base_url: str,
        params: Mapping[str, str] | None = None,
        token: str | None = None,
        token_secret: str | None = None,
        method: str = HTTP_METHOD,
    ) -> str:
        """Sign a request and return its URL.

        Args:
            base_url: URL without query string.
            params: Operation parameters.
            token: Token override (see ``sign``).
            token_secret: Token secret override.
            method: HTTP method.

        Returns:
            URL with all parameters and the signature in the query string.
        """
        return self.sign(base_url, params, token, token_secret, method).url
