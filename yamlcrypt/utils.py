"""
Shared utility helpers.

This module contains small, reusable helpers that do not belong
to key handling, tree walking, or encryption orchestration.
"""

from __future__ import annotations

import base64
import binascii
import os
import tempfile
from pathlib import Path

from .errors import DecryptionFailed


# ---------------------------------------------------------------------------
# Base64 helpers
# ---------------------------------------------------------------------------


def b64encode_text(value: str) -> str:
    """Base64 encode the UTF-8 bytes of a string."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def b64decode_bytes(value: str) -> bytes:
    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise DecryptionFailed("decrypted data is not valid base64!") from None


def b64decode_text(value: str) -> str:
    try:
        return b64decode_bytes(value).decode("utf-8")
    except UnicodeDecodeError:
        raise DecryptionFailed("decoded data is not valid UTF-8!") from None


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def atomic_write(path: Path, data: bytes) -> None:
    """
    Replace path with data via a temp file in the same directory.

    The temp file never outlives this call.
    """

    path = Path(path)
    fd, name = tempfile.mkstemp(dir=path.resolve().parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(name, path)
    finally:
        if os.path.exists(name):
            os.unlink(name)
