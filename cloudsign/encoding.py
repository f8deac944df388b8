# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Encoding primitives shared by all signing schemes."""

from __future__ import annotations

import base64


# Characters left as-is by escape_url; everything else is %XX encoded.
_FORM_UNRESERVED = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789._"
)

# CloudFront URL-safe substitutions (note "=" maps to "_", not stripped).
_URL_SAFE_TABLE = str.maketrans({"+": "-", "=": "_", "/": "~"})


def hex_encode(data: bytes) -> str:
    """Lowercase hex encoding."""
    return data.hex()


def b64_encode(data: bytes) -> str:
    """Standard base64 with padding, as ASCII text."""
    return base64.b64encode(data).decode("ascii")


def url_safe_b64(data: bytes) -> str:
    """Base64 encode, then apply the CloudFront URL-safe substitutions.

    ``+`` becomes ``-``, ``=`` becomes ``_`` and ``/`` becomes ``~``.
    """
    return b64_encode(data).translate(_URL_SAFE_TABLE)


def escape_url(value: str) -> str:
    """Percent-encode a form parameter value.

    Every UTF-8 byte except ASCII alphanumerics, ``.`` and ``_`` is
    encoded as ``%XX`` with uppercase hex digits.  Spaces become ``%20``.

    Args:
        value: Raw parameter value.

    Returns:
        Encoded value.
    """
    result: list[str] = []
    for byte in value.encode("utf-8"):
        ch = chr(byte)
        if ch in _FORM_UNRESERVED:
            result.append(ch)
        else:
            result.append(f"%{byte:02X}")
    return "".join(result)
