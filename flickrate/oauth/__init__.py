"""OAuth 1.0a request signing and three-legged authorization.

This module provides:
- HMAC-SHA1 signatures over canonical base strings
- A request signer that builds signed query strings
- A loopback listener that captures the authorization redirect
- The authorization flow that turns a consumer key into an access token
"""

from flickrate.oauth.callback import CallbackListener
from flickrate.oauth.flow import AuthorizationFlow, build_authorize_url
from flickrate.oauth.models import (
    AccessTokenParams,
    AuthorizeParams,
    Credential,
    PendingAuthorization,
    RequestTokenParams,
)
from flickrate.oauth.signature import sign
from flickrate.oauth.signer import (
    RequestSigner,
    SignedRequest,
    build_base_string,
    build_signing_key,
    canonicalize,
    generate_nonce,
    percent_encode,
)
from flickrate.oauth.state_machine import (
    AuthState,
    AuthStateMachine,
    AuthStateTransitionError,
)


__all__ = [
    # Flow
    "AuthorizationFlow",
    "CallbackListener",
    "build_authorize_url",
    # Models
    "AccessTokenParams",
    "AuthorizeParams",
    "Credential",
    "PendingAuthorization",
    "RequestTokenParams",
    # Signing
    "RequestSigner",
    "SignedRequest",
    "build_base_string",
    "build_signing_key",
    "canonicalize",
    "generate_nonce",
    "percent_encode",
    "sign",
    # State machine
    "AuthState",
    "AuthStateMachine",
    "AuthStateTransitionError",
]
