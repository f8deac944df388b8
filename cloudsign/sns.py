# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Mobile push through SNS platform endpoints.

Device tokens are registered as platform endpoints under the configured
APNS (iOS) or GCM (Android) platform application.  Pushes are published
to an endpoint ARN with ``MessageStructure=json`` so each platform gets
its own payload.

APNS payloads are limited to 256 bytes; longer alerts are shortened to
fit (at most 90 bytes of message text plus ``...``).
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from datetime import datetime
from enum import Enum

from cloudsign.client import QueryClient
from cloudsign.config import Service
from cloudsign.dispatch import HttpOutcome
from cloudsign.encoding import escape_url
from cloudsign.errors import (
    ConfigurationFailure,
    ParseFailure,
    SignatureFailure,
)


logger = logging.getLogger(__name__)

#: Maximum APNS payload size in bytes.
APNS_PAYLOAD_LIMIT = 256

#: Longest alert text (in bytes) kept when an APNS payload is shortened.
APNS_ALERT_MAX = 90

_ELLIPSIS = "..."

_ENDPOINT_ARN_RE = re.compile(r"<EndpointArn>([^<]*)")


class MobileType(Enum):
    """Push platform of a device."""

    IPHONE = "IPHONE"
    ANDROID = "ANDROID"

    @classmethod
    def parse(cls, value: str | MobileType) -> MobileType | None:
        """Case-insensitive lookup; None for unknown platforms."""
        if isinstance(value, MobileType):
            return value
        try:
            return cls(value.upper())
        except ValueError:
            return None


def curtail(text: str, max_bytes: int, suffix: str = _ELLIPSIS) -> str:
    """Shorten text to ``max_bytes`` of UTF-8 without splitting a character.

    Text that already fits is returned unchanged; shortened text gets
    ``suffix`` appended.
    """
    encoded = text.encode("utf-8")
    if max_bytes <= 0 or len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore") + suffix


def _compact(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _apns_payload(
    message: str, badge: int, custom: Mapping[str, str]
) -> str:
    aps: dict[str, object] = {"alert": message, "sound": "default"}
    if badge > 0:
        aps["badge"] = badge
    return _compact({"aps": aps, **custom})


def _fit_apns(message: str, badge: int, custom: Mapping[str, str]) -> str:
    """Shorten the alert until the payload fits ``APNS_PAYLOAD_LIMIT``.

    Custom fields are never shortened; if they alone overflow, the alert
    is reduced to ``...`` and the oversized payload is returned.
    """
    payload = _apns_payload(message, badge, custom)
    overflow = len(payload.encode("utf-8")) - APNS_PAYLOAD_LIMIT
    if overflow <= 0:
        return payload

    keep = len(message.encode("utf-8")) - overflow - len(_ELLIPSIS)
    keep = min(keep, APNS_ALERT_MAX)
    while True:
        alert = curtail(message, keep) if keep > 0 else _ELLIPSIS
        payload = _apns_payload(alert, badge, custom)
        overflow = len(payload.encode("utf-8")) - APNS_PAYLOAD_LIMIT
        if overflow <= 0 or keep <= 0:
            return payload
        keep -= overflow


def build_push_message(
    mobile_type: MobileType,
    message: str,
    *,
    badge: int = 0,
    custom: Mapping[str, str] | None = None,
    production: bool = True,
) -> str:
    """Build the JSON ``Message`` for a platform-structured publish.

    Args:
        mobile_type: Target platform.
        message: Alert text.
        badge: Icon badge count (iOS only, omitted when <= 0).
        custom: Extra string fields merged into the platform payload.
        production: Target ``APNS`` rather than ``APNS_SANDBOX`` (iOS).

    Returns:
        JSON object mapping the platform key to its encoded payload.
    """
    custom = {str(k): str(v) for k, v in (custom or {}).items()}

    if mobile_type is MobileType.IPHONE:
        payload = _fit_apns(message, badge, custom)
        key = "APNS" if production else "APNS_SANDBOX"
        return _compact({key: payload})

    payload = _compact({"data": {"message": message, **custom}})
    return _compact({"GCM": payload})


def parse_arn(body: str | bytes) -> str | None:
    """Extract ``<EndpointArn>`` from a CreatePlatformEndpoint response."""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    m = _ENDPOINT_ARN_RE.search(body)
    if not m or not m.group(1):
        return None
    return m.group(1)


class SnsClient(QueryClient):
    """Registers devices and publishes pushes through SNS."""

    service = Service.SNS

    def _platform_arn(self, mobile_type: MobileType) -> str:
        if mobile_type is MobileType.IPHONE:
            arn = self.config.push_ios_arn
        else:
            arn = self.config.push_android_arn
        if not arn:
            raise ConfigurationFailure(
                f"No platform application ARN for {mobile_type.value}"
            )
        return arn

    def _resolve_platform(
        self, mobile_type: str | MobileType, operation: str
    ) -> tuple[MobileType, str] | HttpOutcome:
        parsed = MobileType.parse(mobile_type)
        if parsed is None:
            return self._signing_failed(
                operation,
                SignatureFailure(f"Unknown mobile type: {mobile_type}"),
            )
        try:
            return parsed, self._platform_arn(parsed)
        except ConfigurationFailure as e:
            return self._signing_failed(operation, e)

    def add_push_key_raw(
        self,
        user_data: str,
        mobile_type: str | MobileType,
        device_key: str,
        *,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Register a device token as a platform endpoint.

        Args:
            user_data: Opaque data stored with the endpoint.
            mobile_type: ``IPHONE`` or ``ANDROID`` (any case).
            device_key: Device push token.
            now: Signing instant override.

        Returns:
            HttpOutcome of ``CreatePlatformEndpoint``.
        """
        resolved = self._resolve_platform(mobile_type, "sns add push key")
        if isinstance(resolved, HttpOutcome):
            return resolved
        _, platform_arn = resolved
        if not user_data or not device_key:
            return self._signing_failed(
                "sns add push key",
                SignatureFailure("User data and device key required"),
            )
        return self.send_query(
            "/",
            f"PlatformApplicationArn={escape_url(platform_arn)}"
            "&Action=CreatePlatformEndpoint"
            f"&CustomUserData={escape_url(user_data)}"
            f"&Token={escape_url(device_key)}",
            now=now,
        )

    def add_push_key(
        self,
        user_data: str,
        mobile_type: str | MobileType,
        device_key: str,
        *,
        now: datetime | None = None,
    ) -> str | None:
        """Register a device and return its endpoint ARN, or None."""
        outcome = self.add_push_key_raw(
            user_data, mobile_type, device_key, now=now
        )
        if not outcome.ok:
            return None
        arn = parse_arn(outcome.body)
        if arn is None:
            e = ParseFailure("EndpointArn missing from response")
            logger.error("sns add push key: %s: [%s]", e, outcome.text)
        return arn

    def delete_endpoint(
        self, endpoint_arn: str, *, now: datetime | None = None
    ) -> HttpOutcome:
        """Delete a platform endpoint."""
        if not endpoint_arn:
            return self._signing_failed(
                "sns delete endpoint", SignatureFailure("Endpoint ARN required")
            )
        return self.send_query(
            "/",
            f"Action=DeleteEndpoint&EndpointArn={escape_url(endpoint_arn)}",
            now=now,
        )

    def push_send(
        self,
        mobile_type: str | MobileType,
        endpoint_arn: str,
        message: str,
        *,
        badge: int = 0,
        custom: Mapping[str, str] | None = None,
        production: bool = True,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Publish a push to one endpoint.

        Args:
            mobile_type: ``IPHONE`` or ``ANDROID`` (any case).
            endpoint_arn: Target endpoint ARN.
            message: Alert text.
            badge: Icon badge count (iOS only).
            custom: Extra string fields for the app.
            production: Use APNS instead of the APNS sandbox (iOS).
            now: Signing instant override.

        Returns:
            HttpOutcome of ``Publish``.
        """
        resolved = self._resolve_platform(mobile_type, "sns push")
        if isinstance(resolved, HttpOutcome):
            return resolved
        platform, _ = resolved
        if not endpoint_arn or not message:
            return self._signing_failed(
                "sns push",
                SignatureFailure("Endpoint ARN and message required"),
            )

        data = build_push_message(
            platform,
            message,
            badge=badge,
            custom=custom,
            production=production,
        )
        return self.send_query(
            "/",
            f"Action=Publish&TargetArn={escape_url(endpoint_arn)}"
            f"&Message={escape_url(data)}&MessageStructure=json",
            now=now,
        )

    def push_publish(
        self,
        mobile_type: str | MobileType,
        endpoint_arn: str,
        message: str,
        *,
        custom: Mapping[str, str] | None = None,
        production: bool = True,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Publish a push without a badge."""
        return self.push_send(
            mobile_type,
            endpoint_arn,
            message,
            custom=custom,
            production=production,
            now=now,
        )

    def set_endpoint_attributes(
        self,
        endpoint_arn: str,
        key: str,
        value: str,
        *,
        now: datetime | None = None,
    ) -> HttpOutcome:
        """Set a single attribute (e.g. ``Enabled``) on an endpoint."""
        if not endpoint_arn or not key or value is None:
            return self._signing_failed(
                "sns set attributes",
                SignatureFailure("Endpoint ARN, key and value required"),
            )
        return self.send_query(
            "/",
            "Action=SetEndpointAttributes"
            f"&Attributes.entry.1.key={escape_url(key)}"
            f"&Attributes.entry.1.value={escape_url(value)}"
            f"&EndpointArn={escape_url(endpoint_arn)}",
            now=now,
        )
