# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Authenticated request dispatch.

Assembles the header set for each signing scheme, executes the request
through a ``Transport`` with a fixed timeout, and classifies the result.
``Dispatcher.dispatch`` never raises for a failed request: every failure
is logged where it is detected and returned as an ``HttpOutcome``.
"""

from __future__ import annotations

import logging
from collections.abc import Container
from dataclasses import dataclass, field

from cloudsign.config import DEFAULT_TIMEOUT_SECONDS
from cloudsign.errors import (
    CloudSignError,
    FailureKind,
    HttpStatusFailure,
    TransportFailure,
)
from cloudsign.logging import SecretFilter
from cloudsign.sigv4 import FORM_CONTENT_TYPE, SigV4Result
from cloudsign.transport import Header, SignedRequest, Transport


logger = logging.getLogger(__name__)


class _AnySuccess(Container[int]):
    """Accepts every 2xx status."""

    def __contains__(self, status: object) -> bool:
        return isinstance(status, int) and 200 <= status < 300

    def __repr__(self) -> str:
        return "2xx"


#: Any 2xx status (POST-style calls).
SUCCESS_2XX: Container[int] = _AnySuccess()

#: Statuses accepted for delete-style calls.
SUCCESS_DELETE: frozenset[int] = frozenset({200, 204})

#: Only 200 (object upload and copy).
SUCCESS_OK: frozenset[int] = frozenset({200})


@dataclass(frozen=True)
class HttpOutcome:
    """Result of one dispatched request.

    Attributes:
        ok: True if the status was accepted.
        status_code: HTTP status, or None if the exchange never completed.
        body: Response body (empty on transport failure).
        failure: The failure, when ``ok`` is False.
    """

    ok: bool
    status_code: int | None = None
    body: bytes = field(default=b"", repr=False)
    failure: CloudSignError | None = None

    @property
    def failure_kind(self) -> FailureKind | None:
        """Kind of the failure, if any."""
        return self.failure.kind if self.failure is not None else None

    @property
    def text(self) -> str:
        """Response body decoded as UTF-8 (invalid bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")

    @classmethod
    def failed(cls, failure: CloudSignError) -> HttpOutcome:
        """Outcome for a request that failed before or during dispatch."""
        status = (
            failure.status_code
            if isinstance(failure, HttpStatusFailure)
            else None
        )
        return cls(ok=False, status_code=status, failure=failure)


# ---------------------------------------------------------------------------
# Header assembly
# ---------------------------------------------------------------------------


def sigv4_headers(host: str, signed: SigV4Result) -> tuple[Header, ...]:
    """Headers for a SigV4 form POST.

    ``Host`` and ``Content-Type`` must carry exactly the values that were
    signed as ``host`` and ``content-type``.
    """
    return (
        ("Host", host),
        ("Content-Type", FORM_CONTENT_TYPE),
        ("x-amz-date", signed.amz_date),
        ("Authorization", signed.authorization),
    )


def date_auth_headers(date: str, authorization: str) -> tuple[Header, ...]:
    """Headers for a date-signed form POST."""
    return (
        ("Content-Type", FORM_CONTENT_TYPE),
        ("Date", date),
        ("X-Amzn-Authorization", authorization),
    )


def s3_headers(
    host: str,
    date: str,
    authorization: str,
    *,
    content_type: str | None = None,
    content_length: int | None = None,
    public_read: bool = False,
    copy_source: str | None = None,
    storage_class: str | None = None,
) -> tuple[Header, ...]:
    """Headers for an S3 REST request.

    Every ``x-amz-*`` header sent here must also appear in the string to
    sign, with the same value.
    """
    headers: list[Header] = [("Host", host)]
    if public_read:
        headers.append(("x-amz-acl", "public-read"))
    if copy_source is not None:
        headers.append(("x-amz-copy-source", copy_source))
    if storage_class is not None:
        headers.append(("x-amz-storage-class", storage_class))
    if content_type is not None:
        headers.append(("Content-Type", content_type))
    if content_length is not None:
        headers.append(("Content-Length", str(content_length)))
    headers.append(("Date", date))
    headers.append(("Authorization", authorization))
    return tuple(headers)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    """Executes signed requests and classifies their outcome.

    Stateless apart from its transport and timeout; safe to share
    between threads when the transport is.

    Args:
        transport: Transport performing the HTTP exchange.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        transport: Transport,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.transport = transport
        self.timeout = timeout

    def dispatch(
        self,
        request: SignedRequest,
        *,
        accept: Container[int] = SUCCESS_2XX,
        log_body: bool = False,
    ) -> HttpOutcome:
        """Send a signed request and classify the result.

        Args:
            request: The signed request.
            accept: Status codes treated as success.
            log_body: Include the outbound body in failure logs
                (form POSTs).

        Returns:
            HttpOutcome; ``ok`` is False with a ``TransportFailure`` or
            ``HttpStatusFailure`` on failure.
        """
        try:
            response = self.transport.execute(
                request.method,
                request.url,
                request.headers,
                request.body,
                self.timeout,
            )
        except TransportFailure as e:
            if log_body:
                logger.error(
                    "Request to %s failed: %s: body: [%s]",
                    request.url,
                    e,
                    _body_text(request.body),
                )
            else:
                logger.error("Request to %s failed: %s", request.url, e)
            return HttpOutcome.failed(e)

        if response.status_code not in accept:
            failure = HttpStatusFailure(response.status_code, request.url)
            if log_body:
                logger.error(
                    "Response failed: %d: URL: [%s] body: [%s] "
                    "response: [%s]",
                    response.status_code,
                    request.url,
                    _body_text(request.body),
                    _body_text(response.body),
                )
            else:
                logger.error(
                    "Response failed: %d: URL: [%s]",
                    response.status_code,
                    request.url,
                )
            return HttpOutcome(
                ok=False,
                status_code=response.status_code,
                body=response.body,
                failure=failure,
            )

        logger.debug(
            "%s %s -> %d", request.method, request.url, response.status_code
        )
        return HttpOutcome(
            ok=True, status_code=response.status_code, body=response.body
        )


def _body_text(body: bytes) -> str:
    return SecretFilter.redact(body)
