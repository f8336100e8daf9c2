"""Unit tests for persisted configuration."""

import json
import stat
from pathlib import Path

import pytest

from flickrate.config.models import UserConfig
from flickrate.config.settings import AppSettings
from flickrate.config.store import ConfigStore
from flickrate.errors import ConfigError
from flickrate.oauth.models import Credential


def _stored(**overrides: str) -> UserConfig:
    """Create a fully populated configuration."""
    values = {
        "auth_user": "alice",
        "auth_user_nsid": "1@N00",
        "api_key": "key",
        "api_secret": "secret",
        "oauth_token": "tok",
        "oauth_token_secret": "toksecret",
    }
    values.update(overrides)
    return UserConfig(**values)


class TestUserConfig:
    """Tests for UserConfig."""

    def test_reads_legacy_keys(self) -> None:
        """Test that the original key names are accepted."""
        config = UserConfig.model_validate(
            {
                "AuthUser": "alice",
                "AuthUserNsId": "1@N00",
                "ApiKey": "key",
                "ApiSecret": "secret",
                "OauthToken": "tok",
                "OauthTokenSecret": "toksecret",
            }
        )

        assert config == _stored()

    def test_credential(self) -> None:
        """Test that credential() carries both token pairs."""
        credential = _stored().credential()

        assert credential.consumer_key == "key"
        assert credential.access_token_secret == "toksecret"
        assert credential.has_access_token

    def test_credential_requires_api_key(self) -> None:
        """Test that a missing API key is a configuration error."""
        with pytest.raises(ConfigError):
            UserConfig(api_secret="secret").credential()

    def test_needs_authorization(self) -> None:
        """Test that a user without a token secret needs authorization."""
        assert _stored(oauth_token_secret="").needs_authorization
        assert not _stored().needs_authorization
        assert not UserConfig(api_key="k", api_secret="s").needs_authorization

    def test_refresh_clears_token(self) -> None:
        """Test that refresh drops the token pair."""
        config = _stored()

        config.apply_overrides(refresh=True)

        assert config.oauth_token == ""
        assert config.oauth_token_secret == ""
        assert config.needs_authorization

    def test_new_user_replaces_and_clears(self) -> None:
        """Test that a different user resets the token and NSID."""
        config = _stored()

        changed = config.apply_overrides(user="bob")

        assert changed
        assert config.auth_user == "bob"
        assert config.auth_user_nsid == ""
        assert config.oauth_token_secret == ""

    def test_same_user_is_no_change(self) -> None:
        """Test that repeating the stored user changes nothing."""
        config = _stored()

        assert not config.apply_overrides(user="alice")
        assert config.oauth_token_secret == "toksecret"

    def test_key_and_secret_replaced(self) -> None:
        """Test that --key and --secret replace the consumer pair."""
        config = _stored()

        changed = config.apply_overrides(api_key="new-key", api_secret="new-secret")

        assert changed
        assert (config.api_key, config.api_secret) == ("new-key", "new-secret")

    def test_apply_credential(self) -> None:
        """Test that an acquired credential is stored."""
        config = _stored(oauth_token="", oauth_token_secret="", auth_user_nsid="")

        config.apply_credential(
            Credential(
                consumer_key="key",
                consumer_secret="secret",
                access_token="new",
                access_token_secret="newsecret",
                user_nsid="2@N00",
            )
        )

        assert config.oauth_token == "new"
        assert config.oauth_token_secret == "newsecret"
        assert config.auth_user_nsid == "2@N00"


class TestConfigStore:
    """Tests for ConfigStore."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """Test that a missing file loads an empty configuration."""
        assert ConfigStore(tmp_path / "nope").load() == UserConfig()

    def test_round_trip(self, tmp_path: Path) -> None:
        """Test that a saved configuration loads back unchanged."""
        store = ConfigStore(tmp_path / ".flickrate")

        store.save(_stored())

        assert store.load() == _stored()

    def test_saved_with_legacy_keys(self, tmp_path: Path) -> None:
        """Test that the file uses the original key names."""
        path = tmp_path / ".flickrate"

        ConfigStore(path).save(_stored())

        assert "OauthTokenSecret: toksecret" in path.read_text(encoding="utf-8")

    def test_saved_owner_only(self, tmp_path: Path) -> None:
        """Test that the file is readable by the owner only."""
        path = tmp_path / ".flickrate"

        ConfigStore(path).save(_stored())

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_reads_legacy_json(self, tmp_path: Path) -> None:
        """Test that a JSON file from an earlier release loads."""
        path = tmp_path / ".flickrate"
        path.write_text(
            json.dumps({"AuthUser": "alice", "ApiKey": "key", "ApiSecret": "secret"}, indent=4),
            encoding="utf-8",
        )

        config = ConfigStore(path).load()

        assert config.auth_user == "alice"
        assert config.api_key == "key"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that unparseable content is a ConfigError."""
        path = tmp_path / ".flickrate"
        path.write_text("AuthUser: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigStore(path).load()

    def test_non_mapping(self, tmp_path: Path) -> None:
        """Test that a top-level list is a ConfigError."""
        path = tmp_path / ".flickrate"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigStore(path).load()

    def test_wrong_types(self, tmp_path: Path) -> None:
        """Test that non-string values are a ConfigError."""
        path = tmp_path / ".flickrate"
        path.write_text("AuthUser: [1, 2]\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigStore(path).load()


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test default timeouts, TTL and worker count."""
        monkeypatch.chdir(tmp_path)
        settings = AppSettings()

        assert settings.cache_ttl_seconds == 3600
        assert settings.http_timeout_seconds == 30
        assert settings.verifier_timeout_seconds == 300
        assert settings.workers == 20
        assert settings.config_path.name == ".flickrate"
        assert settings.cache_path.name == ".flickrate_cache"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test FLICKRATE_* environment overrides."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FLICKRATE_WORKERS", "4")
        monkeypatch.setenv("FLICKRATE_CACHE_PATH", str(tmp_path / "c"))

        settings = AppSettings()

        assert settings.workers == 4
        assert settings.cache_path == tmp_path / "c"
