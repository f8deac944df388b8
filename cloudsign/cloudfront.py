# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""CloudFront canned-policy signed URLs.

A canned policy names one resource and an expiry.  It is signed with
RSA-SHA1 and the signature is base64 encoded with CloudFront's URL-safe
substitutions::

    {resource}?Expires={epoch}&Signature={sig}&Key-Pair-Id={id}

Resources are always signed with an ``http`` scheme: ``https://host/x``
is signed (and returned) as ``http://host/x`` and a bare ``host/x``
gains ``http://``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from cloudsign.dates import as_utc
from cloudsign.digest import load_private_key, rsa_sha1_sign
from cloudsign.encoding import url_safe_b64
from cloudsign.errors import ConfigurationFailure, SignatureFailure


logger = logging.getLogger(__name__)


def normalize_resource(url: str) -> str:
    """Rewrite a resource URL to the ``http`` scheme.

    Everything after the ``://`` separator is preserved.

    Args:
        url: Resource URL, with or without scheme.

    Returns:
        ``http://...`` form of the URL.
    """
    sep = url.find("://")
    if sep >= 0:
        return "http" + url[sep:]
    return "http://" + url


def _epoch(expiry: int | datetime) -> int:
    if isinstance(expiry, datetime):
        return int(as_utc(expiry).timestamp())
    return int(expiry)


@dataclass(frozen=True)
class CannedPolicy:
    """Resource plus expiry, serialized deterministically for signing."""

    resource: str
    expiry: int

    def to_json(self) -> str:
        """Compact JSON with fixed key order and no whitespace."""
        statement = {
            "Resource": self.resource,
            "Condition": {"DateLessThan": {"AWS:EpochTime": self.expiry}},
        }
        return json.dumps(
            {"Statement": [statement]},
            separators=(",", ":"),
            ensure_ascii=False,
        )


def build_canned_policy(resource: str, expiry: int | datetime) -> str:
    """Canned policy JSON for an already normalized resource."""
    return CannedPolicy(resource=resource, expiry=_epoch(expiry)).to_json()


def sign_policy(private_key: RSAPrivateKey, policy: str) -> str:
    """RSA-SHA1 sign a policy and encode it for a query string."""
    return url_safe_b64(rsa_sha1_sign(private_key, policy))


def sign_url(
    private_key: RSAPrivateKey,
    key_pair_id: str,
    resource_url: str,
    expiry: int | datetime,
) -> str:
    """Build a signed URL with an already loaded key.

    Args:
        private_key: RSA private key registered with CloudFront.
        key_pair_id: Key pair id sent as ``Key-Pair-Id``.
        resource_url: URL of the resource (scheme optional).
        expiry: Expiry as an epoch second or a datetime
            (naive values are UTC).

    Returns:
        Signed URL.

    Raises:
        SignatureFailure: If the key pair id is empty or signing fails.
    """
    if not key_pair_id:
        raise SignatureFailure("Key pair id is empty")
    resource = normalize_resource(resource_url)
    epoch = _epoch(expiry)
    signature = sign_policy(private_key, build_canned_policy(resource, epoch))
    return (
        f"{resource}?Expires={epoch}&Signature={signature}"
        f"&Key-Pair-Id={key_pair_id}"
    )


class CannedPolicySigner:
    """Holds a parsed CloudFront key for the lifetime of the process.

    The key is parsed once by ``load()`` and released by ``close()``.
    Loading again replaces the held key; callers serialize ``load()``
    against signing themselves.

    Example:
        with CannedPolicySigner("APKAEXAMPLE") as signer:
            signer.load(pem_text)
            url = signer.sign_url("https://cdn.example.com/a.jpg", expiry)
    """

    def __init__(self, key_pair_id: str) -> None:
        self.key_pair_id = key_pair_id
        self._private_key: RSAPrivateKey | None = None

    @property
    def is_loaded(self) -> bool:
        """True if a private key is held."""
        return self._private_key is not None

    def load(self, pem: str | bytes) -> None:
        """Parse a PEM private key and hold it.

        On failure the previously held key (if any) is released.

        Raises:
            ConfigurationFailure: If the PEM cannot be parsed.
        """
        self._private_key = None
        self._private_key = load_private_key(pem)
        logger.debug("CloudFront key loaded for %s", self.key_pair_id)

    def close(self) -> None:
        """Release the held private key."""
        self._private_key = None

    def __enter__(self) -> CannedPolicySigner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def sign_url(self, resource_url: str, expiry: int | datetime) -> str:
        """Build a signed URL for a resource.

        Raises:
            ConfigurationFailure: If no key is loaded.
            SignatureFailure: If signing fails.
        """
        if self._private_key is None:
            raise ConfigurationFailure("CloudFront private key is not loaded")
        return sign_url(
            self._private_key, self.key_pair_id, resource_url, expiry
        )
