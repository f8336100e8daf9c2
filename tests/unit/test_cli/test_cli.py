"""Unit tests for the flickrate command."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
import yaml
from click.testing import CliRunner

from flickrate.cli import main as cli_main
from flickrate.cli.main import cli
from tests.helpers.flickr import (
    favorites_xml,
    photo_info_xml,
    rsp_fail,
    rsp_ok,
    search_page_xml,
)


Handler = Callable[[httpx.Request], httpx.Response]

AUTHORIZED_CONFIG = {
    "AuthUser": "alice",
    "AuthUserNsId": "1@N00",
    "ApiKey": "key",
    "ApiSecret": "secret",
    "OauthToken": "tok",
    "OauthTokenSecret": "toksecret",
}


class FakeFlickr:
    """Answers REST and OAuth requests from canned data."""

    def __init__(self, photo_ids: list[str], failing: set[str] | None = None) -> None:
        self.photo_ids = photo_ids
        self.failing = failing or set()
        self.methods: list[str] = []
        self.callback_urls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        params = request.url.params
        if path.endswith("/request_token"):
            self.callback_urls.append(params["oauth_callback"])
            return httpx.Response(
                200, text="oauth_callback_confirmed=true&oauth_token=rt&oauth_token_secret=rts"
            )
        if path.endswith("/access_token"):
            return httpx.Response(
                200,
                text="oauth_token=new-tok&oauth_token_secret=new-secret"
                "&user_nsid=1%40N00&username=alice",
            )

        method = params["method"]
        self.methods.append(method)
        photo_id = params.get("photo_id", "")
        if photo_id in self.failing:
            return httpx.Response(200, content=rsp_fail(code="1", msg="Photo not found"))
        if method == "flickr.test.login":
            return httpx.Response(
                200, content=rsp_ok('<user id="1@N00"><username>alice</username></user>')
            )
        if method == "flickr.people.findByUsername":
            return httpx.Response(200, content=rsp_ok('<user id="9@N00" nsid="9@N00" />'))
        if method == "flickr.photos.search":
            return httpx.Response(200, content=rsp_ok(search_page_xml(self.photo_ids)))
        if method == "flickr.photos.getInfo":
            return httpx.Response(200, content=rsp_ok(photo_info_xml(photo_id, views=2500)))
        return httpx.Response(200, content=rsp_ok(favorites_xml(photo_id, total=5)))


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and cache at a temporary directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FLICKRATE_CONFIG_PATH", str(tmp_path / ".flickrate"))
    monkeypatch.setenv("FLICKRATE_CACHE_PATH", str(tmp_path / ".flickrate_cache"))
    return tmp_path


@pytest.fixture
def opened(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record URLs instead of launching a browser."""
    urls: list[str] = []
    monkeypatch.setattr(cli_main, "open_in_browser", urls.append)
    return urls


def _serve(monkeypatch: pytest.MonkeyPatch, handler: Handler) -> None:
    """Route the command's HTTP client to a handler."""
    monkeypatch.setattr(
        cli_main,
        "create_http_client",
        lambda timeout: httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _write_config(home: Path, values: dict[str, str]) -> None:
    (home / ".flickrate").write_text(yaml.safe_dump(values), encoding="utf-8")


class TestCli:
    """Tests for the flickrate command."""

    def test_ranks_authorized_users_photos(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test a full run for the stored, authorized user."""
        _write_config(home, AUTHORIZED_CONFIG)
        flickr = FakeFlickr(["1", "2"])
        _serve(monkeypatch, flickr)

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "Found 2 photos." in result.output
        assert "Selected 2 photos." in result.output
        assert "https://www.flickr.com/photos/someone/1/" in result.output
        assert "flickr.people.findByUsername" not in flickr.methods
        assert (home / ".flickrate_cache").exists()
        assert opened == []

    def test_second_run_uses_cache(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that a repeat run fetches no photo details."""
        _write_config(home, AUTHORIZED_CONFIG)
        _serve(monkeypatch, FakeFlickr(["1", "2"]))
        CliRunner().invoke(cli, [])

        flickr = FakeFlickr(["1", "2"])
        _serve(monkeypatch, flickr)
        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "flickr.photos.getInfo" not in flickr.methods

    def test_nocache_refetches(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that --nocache ignores the stored details."""
        _write_config(home, AUTHORIZED_CONFIG)
        _serve(monkeypatch, FakeFlickr(["1"]))
        CliRunner().invoke(cli, [])

        flickr = FakeFlickr(["1"])
        _serve(monkeypatch, flickr)
        result = CliRunner().invoke(cli, ["--nocache"])

        assert result.exit_code == 0, result.output
        assert flickr.methods.count("flickr.photos.getInfo") == 1

    def test_other_target_is_looked_up(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that another user's NSID is resolved by name."""
        _write_config(home, AUTHORIZED_CONFIG)
        flickr = FakeFlickr(["1"])
        _serve(monkeypatch, flickr)

        result = CliRunner().invoke(cli, ["bob"])

        assert result.exit_code == 0, result.output
        assert "flickr.people.findByUsername" in flickr.methods

    def test_partial_failure_warns_and_continues(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that failed photos are reported and the rest ranked."""
        _write_config(home, AUTHORIZED_CONFIG)
        _serve(monkeypatch, FakeFlickr(["1", "2", "3"], failing={"2"}))

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "1 of 3 photo details could not be fetched" in result.output
        assert "Selected 2 photos." in result.output

    def test_open_launches_each_selected(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that --open opens every selected photo page."""
        _write_config(home, AUTHORIZED_CONFIG)
        _serve(monkeypatch, FakeFlickr(["1", "2"]))

        result = CliRunner().invoke(cli, ["--open"])

        assert result.exit_code == 0, result.output
        assert sorted(opened) == [
            "https://www.flickr.com/photos/someone/1/",
            "https://www.flickr.com/photos/someone/2/",
        ]

    def test_authorizes_new_user(
        self, home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that --user runs the handshake and stores the token."""
        _write_config(home, {"ApiKey": "key", "ApiSecret": "secret"})
        flickr = FakeFlickr(["1"])
        _serve(monkeypatch, flickr)

        def user_grants(_url: str) -> None:
            with httpx.Client(trust_env=False, timeout=5.0) as browser:
                browser.get(f"{flickr.callback_urls[0]}?oauth_token=rt&oauth_verifier=v-1")

        monkeypatch.setattr(cli_main, "open_in_browser", user_grants)

        result = CliRunner().invoke(cli, ["--user", "alice"])

        assert result.exit_code == 0, result.output
        assert "oauth_token=rt" in result.output
        saved = yaml.safe_load((home / ".flickrate").read_text(encoding="utf-8"))
        assert saved["AuthUser"] == "alice"
        assert saved["AuthUserNsId"] == "1@N00"
        assert saved["OauthToken"] == "new-tok"
        assert saved["OauthTokenSecret"] == "new-secret"

    def test_missing_target(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that a run without any user name fails."""
        _serve(monkeypatch, FakeFlickr([]))

        result = CliRunner().invoke(cli, ["--key", "key", "--secret", "secret"])

        assert result.exit_code == 1
        assert "Must supply a user name" in result.output

    def test_missing_api_key(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that a run without an API key fails cleanly."""
        _serve(monkeypatch, FakeFlickr([]))

        result = CliRunner().invoke(cli, ["bob"])

        assert result.exit_code == 1
        assert "No API key" in result.output

    def test_api_failure_exits_one(
        self, home: Path, monkeypatch: pytest.MonkeyPatch, opened: list[str]
    ) -> None:
        """Test that a rejected login is reported with exit code 1."""
        _write_config(home, AUTHORIZED_CONFIG)
        _serve(
            monkeypatch,
            lambda r: httpx.Response(200, content=rsp_fail(code="98", msg="Invalid auth token")),
        )

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "Invalid auth token" in result.output

    def test_rejects_inverted_age_window(self, home: Path) -> None:
        """Test that --maxdays below --mindays is a usage error."""
        result = CliRunner().invoke(cli, ["--mindays", "90", "--maxdays", "10"])

        assert result.exit_code == 2
