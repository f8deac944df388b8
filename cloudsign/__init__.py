# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Request signing for AWS-style REST, SigV4 and CloudFront URLs.

Signers (pure, raise on failure):

- ``cloudsign.symmetric`` - HMAC date signing and S3 REST signing
- ``cloudsign.sigv4`` - SigV4 chained-key signing of query API POSTs
- ``cloudsign.cloudfront`` - RSA-SHA1 canned-policy signed URLs

Clients (dispatch signed requests, return outcomes, never raise):

- ``cloudsign.s3.S3Client``, ``cloudsign.ses.SesClient``,
  ``cloudsign.sqs.SqsClient``, ``cloudsign.sns.SnsClient``
"""

from cloudsign.config import (
    CloudSignConfig,
    ConfigError,
    Credentials,
    Service,
    ServiceDescriptor,
)
from cloudsign.dispatch import Dispatcher, HttpOutcome
from cloudsign.errors import (
    CloudSignError,
    ConfigurationFailure,
    FailureKind,
    HttpStatusFailure,
    ParseFailure,
    SignatureFailure,
    TransportFailure,
)


__all__ = [
    "CloudSignConfig",
    "CloudSignError",
    "ConfigError",
    "ConfigurationFailure",
    "Credentials",
    "Dispatcher",
    "FailureKind",
    "HttpOutcome",
    "HttpStatusFailure",
    "ParseFailure",
    "Service",
    "ServiceDescriptor",
    "SignatureFailure",
    "TransportFailure",
]
