# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for cloudsign/s3.py."""

from dataclasses import replace

from cloudsign.config import CloudSignConfig, Credentials
from cloudsign.errors import FailureKind, TransportFailure
from cloudsign.s3 import S3Client
from cloudsign.symmetric import (
    s3_authorization,
    s3_copy_string_to_sign,
    s3_delete_string_to_sign,
    s3_put_string_to_sign,
)
from cloudsign.transport import RawResponse
from tests.fakes import FakeTransport
from tests.vectors import BUCKET, NOW, NOW_RFC1123


HOST = "mybucket.s3.amazonaws.com"


class TestUpload:
    """Tests for S3Client.upload."""

    def test_request(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """PUT with signed headers and the object body."""
        outcome = S3Client(config, transport=transport).upload(
            "a/b.png", b"\x89PNG", "image/png", now=NOW
        )
        assert outcome.ok
        call = transport.last
        assert call["method"] == "PUT"
        assert call["url"] == f"http://{HOST}/a/b.png"
        assert call["body"] == b"\x89PNG"
        assert transport.header("Content-Type") == "image/png"
        assert transport.header("Content-Length") == "4"
        assert transport.header("Date") == NOW_RFC1123
        assert transport.header("Host") == HOST
        assert transport.header("x-amz-acl") is None
        expected = s3_authorization(
            config.credentials,
            s3_put_string_to_sign("image/png", NOW_RFC1123, BUCKET, "a/b.png"),
        )
        assert transport.header("Authorization") == expected

    def test_public_read(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """Public-read sends and signs the ACL header."""
        S3Client(config, transport=transport).upload(
            "k", b"x", "text/plain", public_read=True, now=NOW
        )
        assert transport.header("x-amz-acl") == "public-read"
        expected = s3_authorization(
            config.credentials,
            s3_put_string_to_sign(
                "text/plain", NOW_RFC1123, BUCKET, "k", public_read=True
            ),
        )
        assert transport.header("Authorization") == expected

    def test_only_200_is_success(self, config: CloudSignConfig) -> None:
        """A 204 upload response is a failure."""
        transport = FakeTransport(RawResponse(204, b""))
        outcome = S3Client(config, transport=transport).upload(
            "k", b"x", "text/plain", now=NOW
        )
        assert not outcome.ok
        assert outcome.failure_kind is FailureKind.HTTP_STATUS

    def test_empty_data_not_sent(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """Empty uploads fail before dispatch."""
        outcome = S3Client(config, transport=transport).upload(
            "k", b"", "text/plain", now=NOW
        )
        assert outcome.failure_kind is FailureKind.SIGNATURE
        assert transport.calls == []

    def test_missing_bucket(self, credentials: Credentials) -> None:
        """No bucket configured is a configuration failure."""
        transport = FakeTransport()
        config = CloudSignConfig(credentials=credentials)
        outcome = S3Client(config, transport=transport).upload(
            "k", b"x", "text/plain"
        )
        assert outcome.failure_kind is FailureKind.CONFIGURATION
        assert transport.calls == []

    def test_missing_credentials(self, config: CloudSignConfig) -> None:
        """Incomplete credentials never reach the network."""
        transport = FakeTransport()
        config = replace(config, credentials=Credentials("", ""))
        outcome = S3Client(config, transport=transport).upload(
            "k", b"x", "text/plain"
        )
        assert outcome.failure_kind is FailureKind.CONFIGURATION
        assert transport.calls == []


class TestDelete:
    """Tests for S3Client.delete."""

    def test_request(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """DELETE with date-only signature."""
        outcome = S3Client(config, transport=transport).delete(
            "a/b.txt", now=NOW
        )
        assert outcome.ok
        assert transport.last["method"] == "DELETE"
        assert transport.last["body"] == b""
        assert transport.header_names() == ["Host", "Date", "Authorization"]
        expected = s3_authorization(
            config.credentials,
            s3_delete_string_to_sign(NOW_RFC1123, BUCKET, "a/b.txt"),
        )
        assert transport.header("Authorization") == expected

    def test_204_is_success(self, config: CloudSignConfig) -> None:
        """No Content is the normal delete answer."""
        transport = FakeTransport(RawResponse(204, b""))
        assert S3Client(config, transport=transport).delete("k").ok

    def test_403(self, config: CloudSignConfig) -> None:
        """Forbidden is an HTTP status failure."""
        transport = FakeTransport(RawResponse(403, b"<Error/>"))
        outcome = S3Client(config, transport=transport).delete("k")
        assert outcome.status_code == 403
        assert outcome.failure_kind is FailureKind.HTTP_STATUS

    def test_empty_path(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """An empty key is refused."""
        outcome = S3Client(config, transport=transport).delete("")
        assert outcome.failure_kind is FailureKind.SIGNATURE
        assert transport.calls == []


class TestMove:
    """Tests for S3Client.move."""

    def test_copy_then_delete(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """Copy into the destination, then delete the source."""
        outcome = S3Client(config, transport=transport).move(
            "src.txt", "dst.txt", now=NOW
        )
        assert outcome.ok
        assert len(transport.calls) == 2

        copy = transport.calls[0]
        assert copy["method"] == "PUT"
        assert copy["url"] == f"http://{HOST}/dst.txt"
        assert copy["body"] == b""
        assert transport.header("x-amz-copy-source", 0) == "/mybucket/src.txt"
        assert transport.header("x-amz-storage-class", 0) == (
            "REDUCED_REDUNDANCY"
        )
        assert transport.header("Content-Length", 0) == "0"
        expected = s3_authorization(
            config.credentials,
            s3_copy_string_to_sign(
                NOW_RFC1123, BUCKET, "src.txt", "dst.txt"
            ),
        )
        assert transport.header("Authorization", 0) == expected

        delete = transport.calls[1]
        assert delete["method"] == "DELETE"
        assert delete["url"] == f"http://{HOST}/src.txt"

    def test_public_read_copy(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """Public-read is signed into the copy."""
        S3Client(config, transport=transport).move(
            "a", "b", public_read=True, now=NOW
        )
        assert transport.header("x-amz-acl", 0) == "public-read"

    def test_storage_class_from_config(
        self, config: CloudSignConfig, transport: FakeTransport
    ) -> None:
        """The configured storage class is used."""
        config = replace(config, s3_move_storage_class="STANDARD_IA")
        S3Client(config, transport=transport).move("a", "b", now=NOW)
        assert transport.header("x-amz-storage-class", 0) == "STANDARD_IA"

    def test_failed_copy_skips_delete(self, config: CloudSignConfig) -> None:
        """The source survives a failed copy."""
        transport = FakeTransport(RawResponse(500, b""))
        outcome = S3Client(config, transport=transport).move("a", "b")
        assert not outcome.ok
        assert outcome.status_code == 500
        assert len(transport.calls) == 1

    def test_failed_delete_reported(self, config: CloudSignConfig) -> None:
        """A failed delete after a good copy is reported."""
        transport = FakeTransport(
            RawResponse(200, b""), TransportFailure("reset")
        )
        outcome = S3Client(config, transport=transport).move("a", "b")
        assert not outcome.ok
        assert outcome.failure_kind is FailureKind.TRANSPORT
        assert len(transport.calls) == 2

    def test_object_url(self, config: CloudSignConfig) -> None:
        """Virtual-host style addressing."""
        client = S3Client(config, transport=FakeTransport())
        assert client.object_url("x/y") == f"http://{HOST}/x/y"
