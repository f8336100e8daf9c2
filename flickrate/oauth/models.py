"""Data models for OAuth credentials and handshake parameters."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from flickrate.oauth.constants import (
    DEFAULT_PERMS,
    PARAM_CALLBACK,
    PARAM_TOKEN,
    PARAM_VERIFIER,
)


class Credential(BaseModel):
    """Consumer and access credentials for signed API calls.

    Immutable. The authorization flow returns a new instance instead of
    mutating the one it was given, so a failed handshake leaves nothing
    half-written.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    consumer_key: Annotated[str, Field(min_length=1, description="API key")]
    consumer_secret: Annotated[str, Field(min_length=1, description="API secret")]
    access_token: str = Field(default="", description="OAuth access token")
    access_token_secret: str = Field(
        default="", description="OAuth access token secret"
    )
    user_nsid: str = Field(default="", description="Authorized user's NSID")
    username: str = Field(default="", description="Authorized user's name")

    @property
    def has_access_token(self) -> bool:
        """Check if an access token pair is present."""
        return bool(self.access_token and self.access_token_secret)


class PendingAuthorization(BaseModel):
    """Transient state of an in-progress handshake. Never persisted."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    request_token: Annotated[str, Field(min_length=1)]
    request_token_secret: Annotated[str, Field(min_length=1)]
    callback_url: Annotated[str, Field(min_length=1)]
    verifier: str = ""

    def with_verifier(self, verifier: str) -> "PendingAuthorization":
        """Return a copy carrying the verifier.

        Args:
            verifier: Verifier received on the callback.

        Returns:
            New PendingAuthorization.
        """
        return self.model_copy(update={"verifier": verifier})


class RequestTokenParams(BaseModel):
    """Parameters for the request-token leg."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    callback: Annotated[str, Field(min_length=1)]

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {PARAM_CALLBACK: self.callback}


class AuthorizeParams(BaseModel):
    """Parameters for the user-facing authorize page."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: Annotated[str, Field(min_length=1)]
    perms: str = DEFAULT_PERMS

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {PARAM_TOKEN: self.token, "perms": self.perms}


class AccessTokenParams(BaseModel):
    """Parameters for the access-token leg."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    verifier: Annotated[str, Field(min_length=1)]

    def to_params(self) -> dict[str, str]:
        """Convert to query parameters."""
        return {PARAM_VERIFIER: self.verifier}
