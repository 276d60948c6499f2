"""Read raw profile bytes from a file or standard input."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from ..core.errors import ReadError
from ..core.types import STDIN_PATH

logger = logging.getLogger(__name__)


def read_profile(path: str) -> bytes:
    """Return the whole content of ``path``, or of standard input when it is ``-``."""
    if path == STDIN_PATH:
        try:
            data = sys.stdin.buffer.read()
        except (OSError, ValueError) as exc:
            raise ReadError(f"read profile from stdin: {exc}") from exc
        logger.debug("Read %d bytes from stdin", len(data))
        return data

    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ReadError(f"read profile file: {exc}") from exc
    logger.debug("Read %d bytes from %s", len(data), path)
    return data


__all__ = ["read_profile"]
