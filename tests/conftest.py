# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures used across test modules."""

from collections.abc import Iterator

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from cloudsign.config import CloudSignConfig, Credentials
from cloudsign.logging import SecretFilter
from tests.fakes import FakeTransport
from tests.vectors import ACCESS_KEY, ANDROID_ARN, BUCKET, IOS_ARN, SECRET_KEY


@pytest.fixture(autouse=True)
def _clear_secret_filter() -> Iterator[None]:
    """Keep registered secrets from leaking between tests."""
    yield
    SecretFilter.clear_secrets()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_key=ACCESS_KEY, secret_key=SECRET_KEY)


@pytest.fixture
def config(credentials: Credentials) -> CloudSignConfig:
    """Fully populated config for client tests."""
    return CloudSignConfig(
        credentials=credentials,
        s3_bucket=BUCKET,
        ses_sender="noreply@example.com",
        push_ios_arn=IOS_ARN,
        push_android_arn=ANDROID_ARN,
    )


@pytest.fixture
def transport() -> FakeTransport:
    """Transport answering 200 with an empty body."""
    return FakeTransport()


@pytest.fixture(scope="session")
def rsa_key() -> RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key: RSAPrivateKey) -> str:
    """Unencrypted PKCS#8 PEM for ``rsa_key``."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
