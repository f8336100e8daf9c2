"""HMAC-SHA1 signature computation."""

import base64
import hashlib
import hmac

from flickrate.errors import EncodingError


def sign(key: bytes, message: str) -> bytes:
    """Sign a base string with HMAC-SHA1.

    Args:
        key: Signing key bytes (``consumer_secret&token_secret``).
        message: Canonical base string.

    Returns:
        Base64-encoded HMAC-SHA1 digest.

    Raises:
        EncodingError: If the key is not bytes or the message cannot be
            encoded as UTF-8.
    """
    if not isinstance(key, bytes | bytearray):
        msg = f"Signing key must be bytes, got {type(key).__name__}"
        raise EncodingError(msg)

    try:
        payload = message.encode("utf-8")
    except (AttributeError, UnicodeEncodeError) as e:
        msg = f"Base string cannot be encoded: {e}"
        raise EncodingError(msg) from e

    digest = hmac.new(bytes(key), payload, hashlib.sha1).digest()
    return base64.b64encode(digest)
