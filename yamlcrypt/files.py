"""
File mode: encrypt ``*.yaml`` to ``*.yaml-crypt`` and back.

The direction is decided by the file extension. Output is computed fully
in memory and written through a same-directory temp file, so a failing
file never leaves a partial output behind.

This module does NOT:
- walk directories
- resolve keys
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from .config import CRYPT_SUFFIX, ENCRYPTED_SUFFIXES, PLAINTEXT_SUFFIXES
from .errors import UsageError
from .keys import KeySet
from .transformer import Direction, Transformer, TransformOptions
from .utils import atomic_write

logger = logging.getLogger(__name__)


def is_plaintext_file(path: str | Path) -> bool:
    return str(path).endswith(PLAINTEXT_SUFFIXES)


def is_encrypted_file(path: str | Path) -> bool:
    return str(path).endswith(ENCRYPTED_SUFFIXES)


def plan(path: str | Path) -> Tuple[Direction, Path]:
    """
    Return the direction and output path for a file.

    Raises:
        UsageError: for unknown extensions
    """

    name = str(path)
    if is_plaintext_file(name):
        return Direction.ENCRYPT, Path(name + CRYPT_SUFFIX)
    if is_encrypted_file(name):
        return Direction.DECRYPT, Path(name[: -len(CRYPT_SUFFIX)])
    raise UsageError(f"unknown file extension: {path}")


def process_file(
    path: str | Path,
    key_set: KeySet,
    options: TransformOptions,
    expected: Optional[Direction] = None,
    keep: bool = False,
    force: bool = False,
) -> Path:
    """
    Encrypt or decrypt a single file and return the output path.

    Raises:
        UsageError: wrong extension, direction mismatch, missing input,
            or existing output without force
    """

    path = Path(path)
    direction, output = plan(path)

    if expected is Direction.DECRYPT and direction is Direction.ENCRYPT:
        raise UsageError(f"decrypted file, but --decrypt given: {path}")
    if expected is Direction.ENCRYPT and direction is Direction.DECRYPT:
        raise UsageError(f"encrypted file, but --encrypt given: {path}")

    if direction is Direction.ENCRYPT:
        key_set.require_encryption_key()

    if path.is_dir():
        raise UsageError(f"directories are not supported: {path}")
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        raise UsageError(f"file does not exist: {path}") from None

    if output.exists() and not force:
        raise UsageError(f"output file already exists: {output}")

    result = Transformer(key_set).transform_content(content, direction, options)

    atomic_write(output, result)
    if not keep:
        path.unlink()

    logger.debug("%sed %s -> %s", direction.value, path, output)
    return output
