# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Email sending through the SES query API with date signing."""

from __future__ import annotations

import logging
from datetime import datetime

from cloudsign.client import BaseClient
from cloudsign.dates import rfc1123, utcnow
from cloudsign.dispatch import HttpOutcome, date_auth_headers
from cloudsign.encoding import escape_url
from cloudsign.errors import CloudSignError, ParseFailure, SignatureFailure
from cloudsign.symmetric import sign_date
from cloudsign.transport import SignedRequest


logger = logging.getLogger(__name__)

#: Prefix of a successful SendEmail response body.
_SUCCESS_TAG = "<SendEmailResponse"


def build_send_email_body(
    sender: str,
    recipient: str,
    subject: str,
    content: str,
    *,
    html: bool = False,
) -> str:
    """Form body for a ``SendEmail`` action."""
    body_kind = "Html" if html else "Text"
    return (
        f"Action=SendEmail&Source={escape_url(sender)}"
        f"&Destination.ToAddresses.member.1={escape_url(recipient)}"
        f"&Message.Subject.Data={escape_url(subject)}"
        f"&Message.Body.{body_kind}.Data={escape_url(content)}"
    )


class SesClient(BaseClient):
    """Sends single-recipient email from the configured sender."""

    def send(
        self,
        recipient: str,
        subject: str,
        content: str,
        *,
        html: bool = False,
        now: datetime | None = None,
    ) -> bool:
        """Send one email.

        When sending is disabled in config, nothing is sent and the call
        reports success.

        Args:
            recipient: Destination address.
            subject: Subject line.
            content: Message body.
            html: Send the body as HTML instead of plain text.
            now: Signing instant override.

        Returns:
            True if the service accepted the message.
        """
        return self.send_outcome(
            recipient, subject, content, html=html, now=now
        ).ok

    def send_outcome(
        self,
        recipient: str,
        subject: str,
        content: str,
        *,
        html: bool = False,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Like ``send`` but returns the full outcome."""
        if not self.config.send_email:
            logger.info("Email sending disabled; skipped mail to %s", recipient)
            return HttpOutcome(ok=True)

        date = rfc1123(now or utcnow())
        try:
            self.config.credentials.require()
            if not (recipient and subject and content):
                raise SignatureFailure(
                    "Recipient, subject and content required"
                )
            authorization = sign_date(self.config.credentials, date)
        except CloudSignError as e:
            return self._signing_failed(f"ses send to {recipient}", e)

        body = build_send_email_body(
            self.config.ses_sender, recipient, subject, content, html=html
        )
        request = SignedRequest(
            method="POST",
            url=self.config.ses_endpoint,
            headers=date_auth_headers(date, authorization),
            body=body.encode("utf-8"),
        )
        outcome = self.dispatcher.dispatch(request, log_body=True)
        if not outcome.ok:
            return outcome

        if not outcome.text.startswith(_SUCCESS_TAG):
            logger.error(
                "Send email to [%s] response is not succeeded: [%s]",
                recipient,
                outcome.text,
            )
            return HttpOutcome(
                ok=False,
                status_code=outcome.status_code,
                body=outcome.body,
                failure=ParseFailure("SendEmailResponse missing"),
            )
        return outcome
