# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""``.env`` support for credentials referenced by ``!env`` tags.

Files are applied in the order returned by ``dotenv_candidates``.  The
first file to define a variable wins, and the process environment always
wins over both.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

_loaded: tuple[Path, ...] | None = None


def dotenv_candidates() -> list[Path]:
    """The XDG config ``.env`` followed by ``./.env``."""
    from cloudsign.config import get_dotenv_path

    return [get_dotenv_path(), Path.cwd() / ".env"]


def load_dotenv_once() -> tuple[Path, ...]:
    """Apply every existing candidate file, at most once per process.

    Returns:
        The files that were applied, also on repeat calls.
    """
    global _loaded
    if _loaded is not None:
        return _loaded

    applied = []
    for path in dotenv_candidates():
        if not path.is_file():
            continue
        load_dotenv(path, override=False)
        logger.debug("Applied environment file %s", path)
        applied.append(path)

    _loaded = tuple(applied)
    return _loaded


def reset_dotenv_state() -> None:
    """Forget previously applied files (tests)."""
    global _loaded
    _loaded = None
