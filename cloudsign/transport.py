# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""HTTP transport used to execute signed requests.

The dispatcher only depends on the ``Transport`` protocol.  The default
``HttpxTransport`` opens a fresh ``httpx.Client`` per request and reads
the response into a buffer owned by that call, so concurrent requests
never share response state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from cloudsign.errors import TransportFailure


logger = logging.getLogger(__name__)

Header = tuple[str, str]


@dataclass(frozen=True)
class SignedRequest:
    """A fully signed request, ready for transmission.

    Attributes:
        method: HTTP method.
        url: Absolute target URL.
        headers: Ordered name/value pairs, transmitted in this order.
        body: Request payload (empty for bodiless requests).
    """

    method: str
    url: str
    headers: tuple[Header, ...] = ()
    body: bytes = field(default=b"", repr=False)

    def header(self, name: str) -> str | None:
        """Case-insensitive lookup of the first header with ``name``."""
        lower = name.lower()
        for key, value in self.headers:
            if key.lower() == lower:
                return value
        return None


@dataclass(frozen=True)
class RawResponse:
    """Status and body of a completed HTTP exchange."""

    status_code: int
    body: bytes


class Transport(Protocol):
    """Executes one HTTP exchange."""

    def execute(
        self,
        method: str,
        url: str,
        headers: Sequence[Header],
        body: bytes,
        timeout: float,
    ) -> RawResponse:
        """Perform the exchange.

        Raises:
            TransportFailure: If the exchange could not complete.
        """
        ...


class HttpxTransport:
    """``Transport`` backed by a per-call ``httpx.Client``.

    Args:
        verify: TLS verification setting passed to httpx.
    """

    def __init__(self, *, verify: bool = True) -> None:
        self._verify = verify

    def execute(
        self,
        method: str,
        url: str,
        headers: Sequence[Header],
        body: bytes,
        timeout: float,
    ) -> RawResponse:
        """Perform the exchange with httpx.

        Raises:
            TransportFailure: On connection, DNS, TLS, timeout or URL
                errors.
        """
        try:
            with httpx.Client(timeout=timeout, verify=self._verify) as client:
                response = client.request(
                    method,
                    url,
                    headers=list(headers),
                    content=body or None,
                )
                return RawResponse(response.status_code, response.content)
        except (httpx.TransportError, httpx.InvalidURL) as e:
            raise TransportFailure(
                f"{type(e).__name__}: {e}", url=url
            ) from e
