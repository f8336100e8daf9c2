"""Unit tests for HMAC-SHA1 signatures."""

import base64

import pytest

from flickrate.errors import EncodingError
from flickrate.oauth.signature import sign


class TestSign:
    """Tests for sign()."""

    def test_matches_rfc2202_vector(self) -> None:
        """Test that the digest matches RFC 2202 test case 2."""
        result = sign(b"Jefe", "what do ya want for nothing?")

        assert base64.b64decode(result).hex() == "effcdf6ae5eb2fa2d27416d5f184df9c259a7c79"

    def test_returns_base64_bytes(self) -> None:
        """Test that the result is base64 text of a 20-byte digest."""
        result = sign(b"key&", "GET&x&y")

        assert isinstance(result, bytes)
        assert len(base64.b64decode(result)) == 20

    def test_is_deterministic(self) -> None:
        """Test that identical inputs give identical signatures."""
        assert sign(b"k", "message") == sign(b"k", "message")

    def test_empty_message_is_valid(self) -> None:
        """Test that an empty message can be signed."""
        assert sign(b"k", "") != b""

    def test_rejects_text_key(self) -> None:
        """Test that a str key raises EncodingError."""
        with pytest.raises(EncodingError):
            sign("key", "message")  # type: ignore[arg-type]

    def test_rejects_non_text_message(self) -> None:
        """Test that a non-str message raises EncodingError."""
        with pytest.raises(EncodingError):
            sign(b"key", 12345)  # type: ignore[arg-type]

    def test_rejects_unencodable_message(self) -> None:
        """Test that a lone surrogate raises EncodingError."""
        with pytest.raises(EncodingError):
            sign(b"key", "bad \udc80 text")
