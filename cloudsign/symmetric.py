# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Legacy symmetric REST signing.

Two forms share one primitive (HMAC, then base64):

- Date signing: the string to sign is the RFC-1123 ``Date`` header
  value, signed with HMAC-SHA256 and sent in ``X-Amzn-Authorization``.
- S3 REST signing: the string to sign is a newline-joined description of
  the request, signed with HMAC-SHA1 and sent as
  ``Authorization: AWS {access_key}:{signature}``.

Each S3 string-to-sign layout has its own builder so the exact byte
layout lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass

from cloudsign.config import DEFAULT_MOVE_STORAGE_CLASS, Credentials
from cloudsign.digest import HashAlgorithm, hmac_digest
from cloudsign.encoding import b64_encode
from cloudsign.errors import SignatureFailure


#: Canonical ACL header line included when an object is public-read.
ACL_PUBLIC_READ = "x-amz-acl:public-read"


@dataclass(frozen=True)
class SigningMaterial:
    """String to sign and the key it is signed with (one call only)."""

    string_to_sign: str
    key: bytes


def sign_symmetric(
    secret_key: str | bytes,
    string_to_sign: str,
    algorithm: HashAlgorithm,
) -> str:
    """HMAC a string with a shared secret and base64-encode the result.

    Args:
        secret_key: Shared secret.
        string_to_sign: Exact bytes to authenticate (UTF-8 encoded).
        algorithm: SHA-1 (20-byte digest) or SHA-256 (32-byte digest).

    Returns:
        Base64 signature.

    Raises:
        SignatureFailure: If the secret is empty or the HMAC fails.
    """
    if not secret_key:
        raise SignatureFailure("Secret key is empty")
    material = SigningMaterial(
        string_to_sign=string_to_sign,
        key=secret_key.encode("utf-8")
        if isinstance(secret_key, str)
        else secret_key,
    )
    try:
        digest = hmac_digest(material.key, material.string_to_sign, algorithm)
    except (TypeError, ValueError) as e:
        raise SignatureFailure(f"HMAC failed: {e}") from e
    return b64_encode(digest)


# ---------------------------------------------------------------------------
# Date signing
# ---------------------------------------------------------------------------


def sign_date(credentials: Credentials, date: str) -> str:
    """Build the ``X-Amzn-Authorization`` value for a date-signed request.

    Args:
        credentials: Access key pair.
        date: RFC-1123 date, sent verbatim as the ``Date`` header.

    Returns:
        ``AWS3-HTTPS AWSAccessKeyId=..., Algorithm=HmacSHA256,
        SignedHeaders=Date, Signature=...``
    """
    if not credentials.access_key:
        raise SignatureFailure("Access key is empty")
    signature = sign_symmetric(
        credentials.secret_key, date, HashAlgorithm.SHA256
    )
    return (
        f"AWS3-HTTPS AWSAccessKeyId={credentials.access_key}, "
        "Algorithm=HmacSHA256, SignedHeaders=Date, "
        f"Signature={signature}"
    )


# ---------------------------------------------------------------------------
# S3 REST signing
# ---------------------------------------------------------------------------


def _resource(bucket: str, path: str) -> str:
    return f"/{bucket}/{path}"


def _amz_header_lines(headers: dict[str, str]) -> str:
    """Canonical ``x-amz-*`` lines, sorted by header name."""
    return "".join(f"{name}:{headers[name]}\n" for name in sorted(headers))


def s3_put_string_to_sign(
    content_type: str,
    date: str,
    bucket: str,
    path: str,
    *,
    public_read: bool = False,
) -> str:
    """String to sign for an object upload.

    Layout: ``PUT``, empty Content-MD5, Content-Type, Date, optional ACL
    line, then ``/bucket/path``.
    """
    acl = f"{ACL_PUBLIC_READ}\n" if public_read else ""
    return (
        f"PUT\n\n{content_type}\n{date}\n{acl}{_resource(bucket, path)}"
    )


def s3_delete_string_to_sign(date: str, bucket: str, path: str) -> str:
    """String to sign for an object delete.

    Content-MD5 and Content-Type slots are both empty.
    """
    return f"DELETE\n\n\n{date}\n{_resource(bucket, path)}"


def s3_copy_string_to_sign(
    date: str,
    bucket: str,
    src_path: str,
    dest_path: str,
    *,
    public_read: bool = False,
    storage_class: str = DEFAULT_MOVE_STORAGE_CLASS,
) -> str:
    """String to sign for a server-side copy into ``dest_path``.

    The ``x-amz-*`` headers (ACL, copy source, storage class) are listed
    in header-name order between the date and the destination resource.
    """
    amz_headers = {
        "x-amz-copy-source": _resource(bucket, src_path),
        "x-amz-storage-class": storage_class,
    }
    if public_read:
        amz_headers["x-amz-acl"] = "public-read"
    return (
        f"PUT\n\n\n{date}\n"
        f"{_amz_header_lines(amz_headers)}"
        f"{_resource(bucket, dest_path)}"
    )


def s3_authorization(credentials: Credentials, string_to_sign: str) -> str:
    """``Authorization`` value for an S3 REST request (HMAC-SHA1).

    Raises:
        SignatureFailure: If either key is empty.
    """
    if not credentials.access_key:
        raise SignatureFailure("Access key is empty")
    signature = sign_symmetric(
        credentials.secret_key, string_to_sign, HashAlgorithm.SHA1
    )
    return f"AWS {credentials.access_key}:{signature}"
