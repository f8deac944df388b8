# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""S3 object upload, delete and move with symmetric REST signing."""

from __future__ import annotations

import logging
from datetime import datetime

from cloudsign.client import BaseClient
from cloudsign.dates import rfc1123, utcnow
from cloudsign.dispatch import (
    SUCCESS_DELETE,
    SUCCESS_OK,
    HttpOutcome,
    s3_headers,
)
from cloudsign.errors import (
    CloudSignError,
    ConfigurationFailure,
    SignatureFailure,
)
from cloudsign.symmetric import (
    s3_authorization,
    s3_copy_string_to_sign,
    s3_delete_string_to_sign,
    s3_put_string_to_sign,
)
from cloudsign.transport import SignedRequest


logger = logging.getLogger(__name__)


class S3Client(BaseClient):
    """Object operations against the configured bucket.

    Objects are addressed virtual-host style at
    ``http://{bucket}.s3.amazonaws.com/{path}``.
    """

    @property
    def bucket(self) -> str:
        return self.config.s3_bucket

    @property
    def host(self) -> str:
        return f"{self.bucket}.s3.amazonaws.com"

    def object_url(self, path: str) -> str:
        """URL of an object in the bucket."""
        return f"http://{self.host}/{path}"

    def _check(self, *paths: str) -> None:
        self.config.credentials.require()
        if not self.bucket:
            raise ConfigurationFailure("S3 bucket is not configured")
        if not all(paths):
            raise SignatureFailure("Object path is empty")

    def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        *,
        public_read: bool = False,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Upload an object with a PUT.

        Args:
            path: Object key (no leading slash).
            data: Object content; must not be empty.
            content_type: ``Content-Type`` of the object.
            public_read: Grant ``public-read`` ACL.
            now: Signing instant override.

        Returns:
            HttpOutcome; only 200 is success.
        """
        date = rfc1123(now or utcnow())
        try:
            self._check(path)
            if not data:
                raise SignatureFailure("Upload data is empty")
            authorization = s3_authorization(
                self.config.credentials,
                s3_put_string_to_sign(
                    content_type,
                    date,
                    self.bucket,
                    path,
                    public_read=public_read,
                ),
            )
        except CloudSignError as e:
            return self._signing_failed(f"s3 upload {path}", e)

        request = SignedRequest(
            method="PUT",
            url=self.object_url(path),
            headers=s3_headers(
                self.host,
                date,
                authorization,
                content_type=content_type,
                content_length=len(data),
                public_read=public_read,
            ),
            body=data,
        )
        return self.dispatcher.dispatch(request, accept=SUCCESS_OK)

    def delete(
        self, path: str, *, now: datetime | None = None
    ) -> HttpOutcome:
        """Delete an object.

        A missing object is not an error: S3 answers 204 either way.

        Returns:
            HttpOutcome; 200 and 204 are success.
        """
        date = rfc1123(now or utcnow())
        try:
            self._check(path)
            authorization = s3_authorization(
                self.config.credentials,
                s3_delete_string_to_sign(date, self.bucket, path),
            )
        except CloudSignError as e:
            return self._signing_failed(f"s3 delete {path}", e)

        request = SignedRequest(
            method="DELETE",
            url=self.object_url(path),
            headers=s3_headers(self.host, date, authorization),
        )
        return self.dispatcher.dispatch(request, accept=SUCCESS_DELETE)

    def move(
        self,
        src_path: str,
        dest_path: str,
        *,
        public_read: bool = False,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Move an object: server-side copy, then delete the source.

        The destination gets the configured move storage class.

        Returns:
            The copy outcome if it failed, otherwise the delete outcome.
        """
        date = rfc1123(now or utcnow())
        storage_class = self.config.s3_move_storage_class
        copy_source = f"/{self.bucket}/{src_path}"
        try:
            self._check(src_path, dest_path)
            authorization = s3_authorization(
                self.config.credentials,
                s3_copy_string_to_sign(
                    date,
                    self.bucket,
                    src_path,
                    dest_path,
                    public_read=public_read,
                    storage_class=storage_class,
                ),
            )
        except CloudSignError as e:
            return self._signing_failed(f"s3 move {src_path}", e)

        request = SignedRequest(
            method="PUT",
            url=self.object_url(dest_path),
            headers=s3_headers(
                self.host,
                date,
                authorization,
                content_length=0,
                public_read=public_read,
                copy_source=copy_source,
                storage_class=storage_class,
            ),
        )
        copied = self.dispatcher.dispatch(request, accept=SUCCESS_OK)
        if not copied.ok:
            return copied

        logger.info("Copied %s to %s", src_path, dest_path)
        return self.delete(src_path, now=now)
