"""
Short-code codec for Shortener Platform.

A short code is the standard (padded) base64 encoding of the long URL:

    >>> encode_url("https://example.com")
    'aHR0cHM6Ly9leGFtcGxlLmNvbQ=='
    >>> decode_url("aHR0cHM6Ly9leGFtcGxlLmNvbQ==")
    'https://example.com'

The mapping is deterministic and reversible without any lookup, so storage
is needed for enumeration and duplicate detection, not for decoding. Code
length grows with URL length.
"""

import base64
import binascii

from ..storage.exceptions import DecodeError


def encode_url(url: str) -> str:
    """Return the base64 short code of `url`."""
    return base64.b64encode(url.encode("utf-8")).decode("ascii")


def decode_url(code: str) -> str:
    """
    Return the URL encoded in `code`.

    Raises:
        DecodeError: `code` is not strict, padded base64 of UTF-8 text.
    """
    try:
        return base64.b64decode(code, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("wrong decode") from exc
