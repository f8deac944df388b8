# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Queue message sending with SigV4-signed query requests."""

from __future__ import annotations

from datetime import datetime

from cloudsign.client import QueryClient
from cloudsign.config import Service
from cloudsign.dispatch import HttpOutcome
from cloudsign.encoding import escape_url
from cloudsign.errors import SignatureFailure


class SqsClient(QueryClient):
    """Sends messages to queues in the configured region."""

    service = Service.SQS

    def send(
        self,
        endpoint: str,
        body: str,
        *,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Send a message.

        Args:
            endpoint: Queue path, e.g. ``/123456789012/jobs``.
            body: Message body.
            now: Signing instant override.

        Returns:
            HttpOutcome of the ``SendMessage`` call.
        """
        if not endpoint or not body:
            return self._signing_failed(
                "sqs send", SignatureFailure("Endpoint and body required")
            )
        return self.send_query(
            endpoint,
            f"Action=SendMessage&MessageBody={escape_url(body)}",
            now=now,
        )
