"""
Edit engine: decrypt, hand the plaintext to an editor, re-encrypt.

The plaintext lives in a temporary file next to the target so that the
final rename stays on one filesystem. Whatever happens, the temporary
file is gone when run_edit returns or raises, and the target is only
ever replaced by a complete, re-encrypted file.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from .config import EDIT_TEMP_SUFFIX
from .errors import EditorError, UsageError
from .files import is_encrypted_file
from .keys import KeySet
from .transformer import Direction, Transformer, TransformOptions

logger = logging.getLogger(__name__)

EditorRunner = Callable[[str, Path], None]


class EditState(str, Enum):
    START = "start"
    TEMP_FILE_CREATED = "temp-file-created"
    EDITOR_RAN = "editor-ran"
    RE_ENCRYPTED = "re-encrypted"
    REPLACED = "replaced"
    DONE = "done"
    FAILED = "failed"


@contextmanager
def scoped_temp_file(directory: Path, content: bytes, suffix: str = EDIT_TEMP_SUFFIX) -> Iterator[Path]:
    """Create a private temp file holding content; remove it on exit."""

    fd, name = tempfile.mkstemp(dir=directory, suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
        yield path
    finally:
        if path.exists():
            path.unlink()
            logger.debug("removed temporary file %s", path)


def run_editor(editor: str, path: Path) -> None:
    """
    Run the editor on path and wait for it.

    Raises:
        EditorError: if the editor cannot be started or exits non-zero
    """

    command = shlex.split(editor) + [str(path)]
    try:
        completed = subprocess.run(command, check=False)
    except OSError as e:
        raise EditorError(f"could not run editor {editor!r}: {e}") from e
    if completed.returncode != 0:
        raise EditorError(f"editor exited with status {completed.returncode}")


def run_edit(
    path: str | Path,
    key_set: KeySet,
    options: TransformOptions,
    editor: str,
    runner: Optional[EditorRunner] = None,
) -> EditState:
    """
    Edit an encrypted file in place.

    Raises:
        UsageError: if path is not an existing .yaml-crypt/.yml-crypt file
        DecryptionFailed, MissingEncryptionKey, EditorError: see transformer
    """

    path = Path(path)
    runner = runner or run_editor

    if not is_encrypted_file(path):
        raise UsageError(f"unexpected extension, expecting .yaml-crypt or .yml-crypt: {path}")
    if options.path:
        raise UsageError("cannot combine --edit and --path!")

    try:
        content = path.read_bytes()
    except FileNotFoundError:
        raise UsageError(f"file does not exist: {path}") from None

    state = EditState.START
    try:
        transformer = Transformer(key_set)
        plaintext = transformer.transform_content(content, Direction.DECRYPT, options)

        with scoped_temp_file(path.resolve().parent, plaintext) as tmp:
            state = _advance(state, EditState.TEMP_FILE_CREATED, tmp)

            runner(editor, tmp)
            state = _advance(state, EditState.EDITOR_RAN, tmp)

            edited = tmp.read_bytes()
            encryption_key = key_set.encryption_key
            if encryption_key is None and transformer.matched_keys:
                encryption_key = transformer.matched_keys[0]
            if encryption_key is not None:
                key_set = key_set.with_encryption_key(encryption_key)
            ciphertext = Transformer(key_set).transform_content(edited, Direction.ENCRYPT, options)
            state = _advance(state, EditState.RE_ENCRYPTED, tmp)

            tmp.write_bytes(ciphertext)
            os.replace(tmp, path)
            state = _advance(state, EditState.REPLACED, path)
    except BaseException:
        _advance(state, EditState.FAILED, path)
        raise

    return _advance(state, EditState.DONE, path)


def _advance(current: EditState, new: EditState, path: Path) -> EditState:
    logger.debug("edit %s: %s -> %s", path, current.value, new.value)
    return new
