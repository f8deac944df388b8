# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for cloudsign/ses.py."""

from dataclasses import replace

import pytest

from cloudsign.config import DEFAULT_SES_ENDPOINT, CloudSignConfig, Credentials
from cloudsign.errors import FailureKind
from cloudsign.ses import SesClient, build_send_email_body
from cloudsign.symmetric import sign_date
from cloudsign.transport import RawResponse
from tests.fakes import FakeTransport
from tests.vectors import NOW, NOW_RFC1123


OK_BODY = b"<SendEmailResponse xmlns='http://ses.amazonaws.com/doc/'/>"


@pytest.fixture
def ok_transport() -> FakeTransport:
    return FakeTransport(RawResponse(200, OK_BODY))


class TestBuildSendEmailBody:
    """Tests for build_send_email_body."""

    def test_text_body(self) -> None:
        """Fields are escaped, text body by default."""
        body = build_send_email_body(
            "noreply@example.com", "to@example.com", "Hi there", "Line 1"
        )
        assert body == (
            "Action=SendEmail&Source=noreply%40example.com"
            "&Destination.ToAddresses.member.1=to%40example.com"
            "&Message.Subject.Data=Hi%20there"
            "&Message.Body.Text.Data=Line%201"
        )

    def test_html_body(self) -> None:
        """HTML bodies use the Html data field."""
        body = build_send_email_body("a", "b", "c", "<p>", html=True)
        assert body.endswith("&Message.Body.Html.Data=%3Cp%3E")


class TestSesClient:
    """Tests for SesClient."""

    def test_request(
        self, config: CloudSignConfig, ok_transport: FakeTransport
    ) -> None:
        """POST to the endpoint with date-signed headers."""
        assert SesClient(config, transport=ok_transport).send(
            "to@example.com", "Subject", "Body", now=NOW
        )
        call = ok_transport.last
        assert call["method"] == "POST"
        assert call["url"] == DEFAULT_SES_ENDPOINT
        assert ok_transport.header("Date") == NOW_RFC1123
        assert ok_transport.header("Content-Type") == (
            "application/x-www-form-urlencoded"
        )
        assert ok_transport.header("X-Amzn-Authorization") == sign_date(
            config.credentials, NOW_RFC1123
        )
        assert call["body"].startswith(b"Action=SendEmail&")

    def test_response_without_tag_fails(self, config: CloudSignConfig) -> None:
        """A 200 without SendEmailResponse is a parse failure."""
        transport = FakeTransport(RawResponse(200, b"<Other/>"))
        outcome = SesClient(config, transport=transport).send_outcome(
            "to@example.com", "s", "b"
        )
        assert not outcome.ok
        assert outcome.failure_kind is FailureKind.PARSE

    def test_http_failure(self, config: CloudSignConfig) -> None:
        """Rejected requests report False."""
        transport = FakeTransport(RawResponse(400, b"<ErrorResponse/>"))
        assert not SesClient(config, transport=transport).send(
            "to@example.com", "s", "b"
        )

    def test_disabled_skips_send(
        self, config: CloudSignConfig, ok_transport: FakeTransport
    ) -> None:
        """With sending disabled nothing is sent and success is reported."""
        config = replace(config, send_email=False)
        assert SesClient(config, transport=ok_transport).send("t", "s", "b")
        assert ok_transport.calls == []

    @pytest.mark.parametrize(
        "recipient,subject,content",
        [("", "s", "b"), ("t", "", "b"), ("t", "s", "")],
    )
    def test_required_fields(
        self,
        config: CloudSignConfig,
        ok_transport: FakeTransport,
        recipient: str,
        subject: str,
        content: str,
    ) -> None:
        """Recipient, subject and content must all be set."""
        outcome = SesClient(config, transport=ok_transport).send_outcome(
            recipient, subject, content
        )
        assert outcome.failure_kind is FailureKind.SIGNATURE
        assert ok_transport.calls == []

    def test_missing_credentials(
        self, config: CloudSignConfig, ok_transport: FakeTransport
    ) -> None:
        """Incomplete credentials fail without sending."""
        config = replace(config, credentials=Credentials("a", ""))
        outcome = SesClient(config, transport=ok_transport).send_outcome(
            "t", "s", "b"
        )
        assert outcome.failure_kind is FailureKind.CONFIGURATION
        assert ok_transport.calls == []
