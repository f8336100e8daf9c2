"""Persisted user configuration."""

from pydantic import BaseModel, ConfigDict, Field

from flickrate.errors import ConfigError
from flickrate.oauth.models import Credential


class UserConfig(BaseModel):
    """Who is authorized, with which application and which token.

    Serialized under the key names used by earlier releases of the tool so
    existing configuration files keep working.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auth_user: str = Field(default="", alias="AuthUser")
    auth_user_nsid: str = Field(default="", alias="AuthUserNsId")
    api_key: str = Field(default="", alias="ApiKey")
    api_secret: str = Field(default="", alias="ApiSecret")
    oauth_token: str = Field(default="", alias="OauthToken")
    oauth_token_secret: str = Field(default="", alias="OauthTokenSecret")

    @property
    def needs_authorization(self) -> bool:
        """Check if a user is configured but has no access token yet."""
        return bool(self.auth_user) and not self.oauth_token_secret

    def clear_token(self) -> None:
        """Forget the stored access token pair."""
        self.oauth_token = ""
        self.oauth_token_secret = ""

    def credential(self) -> Credential:
        """Build the signing credential.

        Returns:
            Credential carrying the consumer pair and, when stored, the
            access token pair.

        Raises:
            ConfigError: If no API key and secret are configured.
        """
        if not self.api_key or not self.api_secret:
            msg = "No API key and secret configured; pass --key and --secret"
            raise ConfigError(msg)
        return Credential(
            consumer_key=self.api_key,
            consumer_secret=self.api_secret,
            access_token=self.oauth_token,
            access_token_secret=self.oauth_token_secret,
            user_nsid=self.auth_user_nsid,
            username=self.auth_user,
        )

    def apply_credential(self, credential: Credential) -> None:
        """Store a newly acquired access credential.

        Args:
            credential: Credential returned by a completed authorization.
        """
        self.oauth_token = credential.access_token
        self.oauth_token_secret = credential.access_token_secret
        if credential.user_nsid:
            self.auth_user_nsid = credential.user_nsid

    def apply_overrides(
        self,
        user: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        refresh: bool = False,
    ) -> bool:
        """Apply command-line overrides.

        A new user, different from the stored one, replaces it and drops
        the token pair; ``refresh`` drops the token pair unconditionally.

        Args:
            user: User name to authorize as.
            api_key: Consumer key.
            api_secret: Consumer secret.
            refresh: Whether to force a new authorization.

        Returns:
            True if anything that must be persisted changed.
        """
        changed = False
        if refresh and (self.oauth_token or self.oauth_token_secret):
            self.clear_token()

        if user and user != self.auth_user:
            self.auth_user = user
            self.auth_user_nsid = ""
            self.clear_token()
            changed = True

        if api_key:
            self.api_key = api_key
            changed = True

        if api_secret:
            self.api_secret = api_secret
            changed = True

        return changed
