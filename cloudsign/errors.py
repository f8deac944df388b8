# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Failure taxonomy for signing and dispatch.

Signers and the transport raise these exceptions internally.  The
dispatcher and the service clients catch them and turn them into
outcome values, so callers of the public client API never see an
exception for an ordinary request failure.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(Enum):
    """Classification of a failed signing or dispatch attempt."""

    CONFIGURATION = "configuration"
    SIGNATURE = "signature"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    PARSE = "parse"


class CloudSignError(Exception):
    """Base exception for all signing and dispatch failures."""

    kind: FailureKind = FailureKind.SIGNATURE


class ConfigurationFailure(CloudSignError):
    """Credentials or private key absent or unparseable."""

    kind = FailureKind.CONFIGURATION


class SignatureFailure(CloudSignError):
    """A cryptographic primitive failed or required inputs were empty."""

    kind = FailureKind.SIGNATURE


class TransportFailure(CloudSignError):
    """The HTTP exchange could not complete (network, DNS, TLS, timeout)."""

    kind = FailureKind.TRANSPORT

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class HttpStatusFailure(CloudSignError):
    """The exchange completed but the remote rejected the request.

    Attributes:
        status_code: HTTP status returned by the remote.
        url: Target URL of the rejected request.
    """

    kind = FailureKind.HTTP_STATUS

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Unexpected HTTP status {status_code}: {url}")
        self.status_code = status_code
        self.url = url


class ParseFailure(CloudSignError):
    """A successful response body lacked an expected field."""

    kind = FailureKind.PARSE
