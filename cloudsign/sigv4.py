# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""SigV4 (HMAC-SHA256) signing for form-encoded query API requests.

Requests are ``POST``s whose body carries every parameter, so the
canonical query string is always empty and only ``content-type`` and
``host`` are signed.  The signing flow is:

1. Append the fixed auth parameters to the caller's form body.
2. Hash the body and build the canonical request.
3. Build the string to sign over the canonical request hash.
4. Derive the signing key through the date/region/service chain.
5. HMAC the string to sign and assemble the Authorization header.

Region and signed headers are fixed per deployment, not per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from cloudsign.config import Credentials, ServiceDescriptor
from cloudsign.dates import (
    date_short,
    iso8601_extended,
    sigv4_timestamp,
    utcnow,
)
from cloudsign.digest import HashAlgorithm, hmac_digest, hmac_hex, sha256_hex
from cloudsign.errors import SignatureFailure


logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Signed header names in canonical order; must match build_canonical_request.
SIGNED_HEADERS = "content-type;host"

_SCOPE_TERMINATOR = "aws4_request"


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DerivedKeyChain:
    """The four chained HMAC-SHA256 keys for one date/region/service.

    Each key is the binary digest used as the HMAC key of the next step.
    """

    date_key: bytes
    region_key: bytes
    service_key: bytes
    signing_key: bytes


def _hmac_sha256(key: bytes, msg: str | bytes) -> bytes:
    """HMAC-SHA256 helper."""
    return hmac_digest(key, msg, HashAlgorithm.SHA256)


def derive_key_chain(
    secret_key: str, date: str, region: str, service: str
) -> DerivedKeyChain:
    """Derive every key of the SigV4 chain.

    Args:
        secret_key: Secret access key.
        date: Date string (YYYYMMDD).
        region: Region name.
        service: Service name.

    Returns:
        DerivedKeyChain with all intermediate keys.

    Raises:
        SignatureFailure: If the secret key is empty.
    """
    if not secret_key:
        raise SignatureFailure("Secret key is empty")
    k_date = _hmac_sha256(("AWS4" + secret_key).encode("utf-8"), date)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    k_signing = _hmac_sha256(k_service, _SCOPE_TERMINATOR)
    return DerivedKeyChain(k_date, k_region, k_service, k_signing)


def derive_signing_key(
    secret_key: str, date: str, region: str, service: str
) -> bytes:
    """Derive the final SigV4 signing key."""
    return derive_key_chain(secret_key, date, region, service).signing_key


def sigv4_sign(signing_key: bytes, string_to_sign: str) -> str:
    """Compute the hex-encoded SigV4 signature."""
    return hmac_hex(signing_key, string_to_sign, HashAlgorithm.SHA256)


# ---------------------------------------------------------------------------
# Canonical strings
# ---------------------------------------------------------------------------


def build_query(
    params: str,
    *,
    access_key: str,
    api_version: str,
    timestamp: str,
) -> str:
    """Append the fixed auth parameters to a form-encoded body.

    Args:
        params: Caller's already-encoded parameters (``Action=...``).
        access_key: Access key id.
        api_version: Service API version.
        timestamp: ISO-8601 extended timestamp.

    Returns:
        The full form body that is both hashed and transmitted.
    """
    return (
        f"{params}&AWSAccessKeyId={access_key}&Version={api_version}"
        f"&Timestamp={timestamp}&SignatureVersion=4"
        "&SignatureMethod=HmacSHA256"
    )


def build_canonical_request(path: str, host: str, payload_hash: str) -> str:
    """Build the canonical request for a form POST.

    The line after the path is the canonical query string, always empty
    because the parameters travel in the body.

    Args:
        path: Request path (e.g. ``/123456789012/queue``).
        host: Value of the signed ``host`` header.
        payload_hash: SHA-256 hex digest of the body.

    Returns:
        Canonical request string.
    """
    canonical_headers = f"content-type:{FORM_CONTENT_TYPE}\nhost:{host}\n"
    return "\n".join(
        [
            "POST",
            path,
            "",
            canonical_headers,
            SIGNED_HEADERS,
            payload_hash,
        ]
    )


def build_credential_scope(date: str, region: str, service: str) -> str:
    """``{date}/{region}/{service}/aws4_request``."""
    return f"{date}/{region}/{service}/{_SCOPE_TERMINATOR}"


def build_string_to_sign(
    timestamp: str, scope: str, canonical_request: str
) -> str:
    """Build the SigV4 string to sign.

    Args:
        timestamp: Basic-form timestamp (``YYYYMMDDTHHMMSSZ``).
        scope: Credential scope.
        canonical_request: The canonical request string.

    Returns:
        String to sign.
    """
    return "\n".join(
        [
            ALGORITHM,
            timestamp,
            scope,
            sha256_hex(canonical_request),
        ]
    )


def build_authorization(access_key: str, scope: str, signature: str) -> str:
    """Assemble the ``Authorization`` header value."""
    return (
        f"{ALGORITHM} "
        f"Credential={access_key}/{scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, "
        f"Signature={signature}"
    )


# ---------------------------------------------------------------------------
# Full request signing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SigV4Result:
    """Everything needed to transmit (and debug) one signed request.

    Attributes:
        authorization: ``Authorization`` header value.
        amz_date: ``x-amz-date`` header value (ISO-8601 extended).
        query: Full form body, sent as the POST payload.
        credential_scope: ``date/region/service/aws4_request``.
        canonical_request: Canonical request that was hashed.
        string_to_sign: Exact string fed into the final HMAC.
        signature: Hex signature.
    """

    authorization: str
    amz_date: str
    query: str
    credential_scope: str
    canonical_request: str
    string_to_sign: str
    signature: str


def sign_v4(
    credentials: Credentials,
    service: ServiceDescriptor,
    path: str,
    params: str,
    *,
    region: str,
    now: datetime | None = None,
) -> SigV4Result:
    """Sign a form-encoded query API request.

    Args:
        credentials: Access key pair.
        service: Target service descriptor (name, domain, API version).
        path: Request path.
        params: Caller's form-encoded parameters (values already escaped).
        region: Region for the credential scope.
        now: Signing instant.  Defaults to the current UTC time.

    Returns:
        SigV4Result with header values and the body to send.

    Raises:
        SignatureFailure: If either key is empty.
    """
    if not credentials.access_key or not credentials.secret_key:
        raise SignatureFailure("Access key and secret key must be set")

    if now is None:
        now = utcnow()

    timestamp = sigv4_timestamp(now)
    amz_date = iso8601_extended(now)
    day = date_short(timestamp)

    query = build_query(
        params,
        access_key=credentials.access_key,
        api_version=service.api_version,
        timestamp=amz_date,
    )
    canonical_request = build_canonical_request(
        path, service.domain, sha256_hex(query)
    )
    scope = build_credential_scope(day, region, service.name)
    string_to_sign = build_string_to_sign(timestamp, scope, canonical_request)

    signing_key = derive_signing_key(
        credentials.secret_key, day, region, service.name
    )
    signature = sigv4_sign(signing_key, string_to_sign)
    logger.debug("SigV4 signed %s%s scope=%s", service.domain, path, scope)

    return SigV4Result(
        authorization=build_authorization(
            credentials.access_key, scope, signature
        ),
        amz_date=amz_date,
        query=query,
        credential_scope=scope,
        canonical_request=canonical_request,
        string_to_sign=string_to_sign,
        signature=signature,
    )
