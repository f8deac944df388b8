# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging setup and secret redaction for signing code.

Failed requests are logged with their URL and, for form POSTs, the
outbound and response bodies.  The config loader registers the secret
access key and CloudFront key material with ``SecretFilter`` so none of
it can reach a log handler.

Usage:
    # CLI entry points
    from cloudsign.logging import configure_logging
    configure_logging(level=logging.INFO)

    # Library modules
    import logging
    logger = logging.getLogger(__name__)
"""

import logging
import re
from typing import ClassVar


REDACTED = "[REDACTED]"

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# PEM armor lines are public and would redact every PEM-looking string.
_PEM_ARMOR = re.compile(r"^-----(BEGIN|END) [A-Z ]+-----$")


class SecretFilter(logging.Filter):
    """Replaces registered secrets with ``[REDACTED]`` in log records.

    Secrets are process-wide; every instance shares the same registry.
    Multi-line secrets (PEM keys) are registered whole and line by line,
    so a log line carrying a fragment of a key is redacted too.

    Example:
        SecretFilter.register_secret("wJalrXUtnFEMI/K7MDENG")
        handler.addFilter(SecretFilter())
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the message and its string arguments in place.

        Returns:
            Always True; records are rewritten, never dropped.
        """
        if self._pattern is None:
            return True
        record.msg = self.redact(str(record.msg))
        if isinstance(record.args, tuple):
            record.args = tuple(
                self.redact(arg) if isinstance(arg, str | bytes) else arg
                for arg in record.args
            )
        return True

    @classmethod
    def redact(cls, value: str | bytes) -> str:
        """Return ``value`` as text with every registered secret replaced.

        Bytes are decoded as UTF-8, invalid sequences replaced.
        """
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if cls._pattern is None:
            return value
        return cls._pattern.sub(REDACTED, value)

    @classmethod
    def register_secret(cls, secret: str) -> None:
        """Register a secret.  Empty strings are ignored."""
        secret = secret.strip()
        if not secret:
            return
        cls._secrets.add(secret)
        for line in secret.splitlines():
            line = line.strip()
            if line and not _PEM_ARMOR.match(line):
                cls._secrets.add(line)
        cls._rebuild_pattern()

    @classmethod
    def clear_secrets(cls) -> None:
        """Forget all secrets (tests)."""
        cls._secrets.clear()
        cls._pattern = None

    @classmethod
    def _rebuild_pattern(cls) -> None:
        # Longest first so a secret containing another is fully redacted.
        ordered = sorted(cls._secrets, key=len, reverse=True)
        cls._pattern = re.compile("|".join(map(re.escape, ordered)))


def configure_logging(
    level: int = logging.INFO,
    format_string: str | None = None,
    add_secret_filter: bool = True,
) -> None:
    """Send all records to stderr through a single handler.

    Replaces any handlers already on the root logger.

    Args:
        level: Root logger level.
        format_string: Record format.  Defaults to a timestamped format.
        add_secret_filter: Attach ``SecretFilter`` to the handler.
    """
    handler = logging.StreamHandler()
    if add_secret_filter:
        handler.addFilter(SecretFilter())
    logging.basicConfig(
        level=level,
        format=format_string or _DEFAULT_FORMAT,
        handlers=[handler],
        force=True,
    )
