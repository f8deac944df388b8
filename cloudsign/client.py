# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared plumbing for the service clients.

Every client holds the immutable ``CloudSignConfig`` and a
``Dispatcher``.  Signing errors raised before dispatch are logged and
turned into failed outcomes here, so client methods never raise for an
ordinary request failure.
"""

from __future__ import annotations

import logging
from datetime import datetime

from cloudsign.config import CloudSignConfig, Service
from cloudsign.dispatch import Dispatcher, HttpOutcome, sigv4_headers
from cloudsign.errors import CloudSignError
from cloudsign.sigv4 import sign_v4
from cloudsign.transport import HttpxTransport, SignedRequest, Transport


logger = logging.getLogger(__name__)


class BaseClient:
    """Config and dispatcher shared by all service clients.

    Args:
        config: Signing configuration.
        transport: Transport override.  Defaults to ``HttpxTransport``.
        dispatcher: Dispatcher override (takes precedence over
            ``transport``).
    """

    def __init__(
        self,
        config: CloudSignConfig,
        *,
        transport: Transport | None = None,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self.config = config
        if dispatcher is None:
            dispatcher = Dispatcher(
                transport if transport is not None else HttpxTransport(),
                timeout=config.timeout_seconds,
            )
        self.dispatcher = dispatcher

    def _signing_failed(self, operation: str, e: CloudSignError) -> HttpOutcome:
        """Log a failure detected before dispatch and wrap it."""
        logger.error("%s: %s: %s", operation, e.kind.value, e)
        return HttpOutcome.failed(e)


class QueryClient(BaseClient):
    """Base for services reached through SigV4-signed form POSTs."""

    service: Service

    def send_query(
        self,
        path: str,
        params: str,
        *,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Sign and send a query API request.

        Args:
            path: Request path (``/`` or a queue path).
            params: Form-encoded parameters, values already escaped.
            now: Signing instant override (tests).

        Returns:
            HttpOutcome of the POST.  Any 2xx is accepted.
        """
        descriptor = self.config.service(self.service)
        try:
            self.config.credentials.require()
            signed = sign_v4(
                self.config.credentials,
                descriptor,
                path,
                params,
                region=self.config.region,
                now=now,
            )
        except CloudSignError as e:
            return self._signing_failed(f"{descriptor.name} {path}", e)

        request = SignedRequest(
            method="POST",
            url=f"http://{descriptor.domain}{path}",
            headers=sigv4_headers(descriptor.domain, signed),
            body=signed.query.encode("utf-8"),
        )
        return self.dispatcher.dispatch(request, log_body=True)
