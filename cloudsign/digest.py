# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Hash, HMAC and RSA primitives.

Digests use ``hashlib``/``hmac``; RSA-SHA1 signing and PEM parsing use
``cryptography``.  String inputs are UTF-8 encoded before hashing.
"""

from __future__ import annotations

import hashlib
import hmac
from enum import Enum

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from cloudsign.errors import ConfigurationFailure, SignatureFailure


class HashAlgorithm(Enum):
    """Digest used by an HMAC signature."""

    SHA1 = "sha1"
    SHA256 = "sha256"

    @property
    def digest_size(self) -> int:
        """Raw digest length in bytes (20 for SHA-1, 32 for SHA-256)."""
        return hashlib.new(self.value).digest_size


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def sha1_hex(data: str | bytes) -> str:
    """SHA-1 digest as 40 lowercase hex characters."""
    return hashlib.sha1(_to_bytes(data)).hexdigest()


def sha256_hex(data: str | bytes) -> str:
    """SHA-256 digest as 64 lowercase hex characters."""
    return hashlib.sha256(_to_bytes(data)).hexdigest()


def md5_hex(data: str | bytes) -> str:
    """MD5 digest as 32 lowercase hex characters."""
    return hashlib.md5(_to_bytes(data)).hexdigest()


def hmac_digest(
    key: str | bytes,
    message: str | bytes,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> bytes:
    """Compute a binary HMAC.

    Args:
        key: HMAC key.
        message: Message to authenticate.
        algorithm: SHA-1 or SHA-256.

    Returns:
        Raw digest bytes (20 or 32 bytes).
    """
    return hmac.new(
        _to_bytes(key), _to_bytes(message), algorithm.value
    ).digest()


def hmac_hex(
    key: str | bytes,
    message: str | bytes,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> str:
    """Compute an HMAC as lowercase hex."""
    return hmac_digest(key, message, algorithm).hex()


def load_private_key(pem: str | bytes) -> RSAPrivateKey:
    """Parse an unencrypted PEM private key.

    Args:
        pem: PEM text (PKCS#1 or PKCS#8).

    Returns:
        The parsed RSA private key.

    Raises:
        ConfigurationFailure: If the PEM is malformed, encrypted, or not
            an RSA key.
    """
    try:
        key = load_pem_private_key(_to_bytes(pem), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationFailure(f"Cannot parse private key: {e}") from e
    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationFailure(
            f"Private key must be RSA, got {type(key).__name__}"
        )
    return key


def rsa_sha1_sign(private_key: RSAPrivateKey, message: str | bytes) -> bytes:
    """Sign a message with RSA PKCS#1 v1.5 over SHA-1.

    Raises:
        SignatureFailure: If the signing operation fails.
    """
    try:
        return private_key.sign(
            _to_bytes(message), padding.PKCS1v15(), hashes.SHA1()
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SignatureFailure(f"RSA-SHA1 signing failed: {e}") from e
