# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""cloudsign CLI: multi-command entry point.

Subcommands:

* ``sign-url``   - print a CloudFront signed URL
* ``s3-upload``  - upload a file to the configured bucket
* ``s3-delete``  - delete an object
* ``s3-move``    - move an object within the bucket
* ``sqs-send``   - send a message to a queue
* ``ses-send``   - send an email

Every subcommand loads ``~/.config/cloudsign/cloudsign.yaml`` unless
``--config`` is given, and exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
import sys
import time
from pathlib import Path

from cloudsign.config import CloudSignConfig
from cloudsign.errors import CloudSignError
from cloudsign.logging import configure_logging


logger = logging.getLogger(__name__)

_USAGE = """\
usage: cloudsign <command> [args]

commands:
  sign-url    Print a CloudFront signed URL
  s3-upload   Upload a file to the configured bucket
  s3-delete   Delete an object from the configured bucket
  s3-move     Move an object within the configured bucket
  sqs-send    Send a message to a queue
  ses-send    Send an email from the configured sender

Run 'cloudsign <command> --help' for command-specific help.\
"""


def _parser(command: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=f"cloudsign {command}", description=description
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.config/cloudsign/cloudsign.yaml)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    return parser


def _load(args: argparse.Namespace) -> CloudSignConfig | None:
    """Configure logging and load config; None (logged) on error."""
    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)
    try:
        return CloudSignConfig.from_yaml(args.config)
    except CloudSignError as e:
        logger.error("%s", e)
        return None


# ── sign-url ────────────────────────────────────────────────────────


def cmd_sign_url(argv: list[str]) -> int:
    """Print a CloudFront signed URL for a resource.

    Args:
        argv: ``RESOURCE_URL [--expires-in SECONDS | --expires EPOCH]``.

    Returns:
        Exit code.
    """
    from cloudsign.cloudfront import CannedPolicySigner

    parser = _parser("sign-url", "Print a CloudFront signed URL")
    parser.add_argument("resource_url")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--expires-in",
        type=int,
        default=3600,
        help="Lifetime in seconds from now (default: 3600)",
    )
    group.add_argument("--expires", type=int, help="Absolute epoch expiry")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1

    if args.expires is not None:
        expiry = args.expires
    else:
        expiry = int(time.time()) + args.expires_in
    try:
        with CannedPolicySigner(config.cloudfront_key_pair_id) as signer:
            signer.load(config.read_private_key())
            print(signer.sign_url(args.resource_url, expiry))
    except CloudSignError as e:
        logger.error("Cannot sign %s: %s", args.resource_url, e)
        return 1
    return 0


# ── S3 ──────────────────────────────────────────────────────────────


def cmd_s3_upload(argv: list[str]) -> int:
    """Upload a local file.

    Args:
        argv: ``FILE KEY [--content-type TYPE] [--public-read]``.

    Returns:
        Exit code.
    """
    from cloudsign.s3 import S3Client

    parser = _parser("s3-upload", "Upload a file to the configured bucket")
    parser.add_argument("file", type=Path)
    parser.add_argument("key")
    parser.add_argument("--content-type", default=None)
    parser.add_argument("--public-read", action="store_true")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1

    content_type = args.content_type
    if content_type is None:
        guessed, _ = mimetypes.guess_type(args.file.name)
        content_type = guessed or "application/octet-stream"

    try:
        data = args.file.read_bytes()
    except OSError as e:
        logger.error("Cannot read %s: %s", args.file, e)
        return 1

    outcome = S3Client(config).upload(
        args.key,
        data,
        content_type,
        public_read=args.public_read,
    )
    return 0 if outcome.ok else 1


def cmd_s3_delete(argv: list[str]) -> int:
    """Delete an object.

    Args:
        argv: ``KEY``.

    Returns:
        Exit code.
    """
    from cloudsign.s3 import S3Client

    parser = _parser("s3-delete", "Delete an object")
    parser.add_argument("key")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1
    return 0 if S3Client(config).delete(args.key).ok else 1


def cmd_s3_move(argv: list[str]) -> int:
    """Move an object within the bucket.

    Args:
        argv: ``SRC DEST [--public-read]``.

    Returns:
        Exit code.
    """
    from cloudsign.s3 import S3Client

    parser = _parser("s3-move", "Move an object within the bucket")
    parser.add_argument("src")
    parser.add_argument("dest")
    parser.add_argument("--public-read", action="store_true")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1
    outcome = S3Client(config).move(
        args.src, args.dest, public_read=args.public_read
    )
    return 0 if outcome.ok else 1


# ── SQS / SES ───────────────────────────────────────────────────────


def cmd_sqs_send(argv: list[str]) -> int:
    """Send a queue message.

    Args:
        argv: ``ENDPOINT BODY``.

    Returns:
        Exit code.
    """
    from cloudsign.sqs import SqsClient

    parser = _parser("sqs-send", "Send a message to a queue")
    parser.add_argument("endpoint", help="Queue path, e.g. /123456789/jobs")
    parser.add_argument("body")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1
    return 0 if SqsClient(config).send(args.endpoint, args.body).ok else 1


def cmd_ses_send(argv: list[str]) -> int:
    """Send an email.

    Args:
        argv: ``TO SUBJECT BODY [--html]``.

    Returns:
        Exit code.
    """
    from cloudsign.ses import SesClient

    parser = _parser("ses-send", "Send an email")
    parser.add_argument("to")
    parser.add_argument("subject")
    parser.add_argument("body")
    parser.add_argument("--html", action="store_true")
    args = parser.parse_args(argv)

    config = _load(args)
    if config is None:
        return 1
    sent = SesClient(config).send(
        args.to, args.subject, args.body, html=args.html
    )
    return 0 if sent else 1


# ── CLI plumbing ────────────────────────────────────────────────────


_DISPATCH: dict[str, str] = {
    "sign-url": "cmd_sign_url",
    "s3-upload": "cmd_s3_upload",
    "s3-delete": "cmd_s3_delete",
    "s3-move": "cmd_s3_move",
    "sqs-send": "cmd_sqs_send",
    "ses-send": "cmd_ses_send",
}


def main() -> None:
    """Entry point for ``cloudsign``."""
    argv = sys.argv[1:]

    if not argv or argv[0] == "--help":
        print(_USAGE)
        sys.exit(0)

    if argv[0] not in _DISPATCH:
        print(f"cloudsign: unknown command '{argv[0]}'", file=sys.stderr)
        print(_USAGE, file=sys.stderr)
        sys.exit(2)

    # Look up handler by name so tests can mock individual commands.
    import cloudsign.cli as _self

    handler = getattr(_self, _DISPATCH[argv[0]])
    sys.exit(handler(argv[1:]))
