"""
Content transformation: encryption and decryption of documents.

This module applies encrypt or decrypt to the in-scope scalar leaves of
parsed YAML documents, or to a whole raw buffer. It is intentionally dumb
about files, editors and command-line policy.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from . import algorithms as registry
from .decryptor import DecryptResult, candidate_algorithms, try_decrypt
from .document import Node, dump_stream, parse_stream, walk
from .errors import UsageError
from .keys import Key, KeySet
from .rules import PathRule
from .utils import b64decode_bytes, b64decode_text, b64encode_text

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


@dataclass(frozen=True)
class TransformOptions:
    algorithm: Optional[str] = None
    base64: bool = False
    path: Optional[str] = None
    raw: bool = False


class Transformer:
    """
    Encrypts and decrypts documents with one key set.

    ``matched_keys`` lists, in order, the key that decrypted each value
    during the most recent decrypting call.
    """

    def __init__(self, key_set: KeySet):
        self.key_set = key_set
        self.matched_keys: List[Key] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encrypt_all(self, documents: List[Node], options: TransformOptions) -> List[Node]:
        return self.transform(documents, Direction.ENCRYPT, options)

    def decrypt_all(self, documents: List[Node], options: TransformOptions) -> List[Node]:
        return self.transform(documents, Direction.DECRYPT, options)

    def transform(
        self,
        documents: List[Node],
        direction: Direction,
        options: TransformOptions,
    ) -> List[Node]:
        """
        Transform every in-scope text scalar of every document in place.

        Any value that cannot be decrypted aborts the whole call.
        """

        rule = PathRule.parse(options.path)
        if direction is Direction.DECRYPT:
            self.matched_keys = []
        else:
            # fail before touching any node
            self.key_set.require_encryption_key()

        count = 0
        for document in documents:
            for path, scalar in walk(document):
                if not rule.matches(path) or not scalar.is_text:
                    continue
                if direction is Direction.ENCRYPT:
                    scalar.value = self.encrypt_value(scalar.value, options)
                else:
                    scalar.value = self.decrypt_value(scalar.value, options)
                count += 1

        logger.debug(
            "%sed %d value(s) in %d document(s) below %s",
            direction.value, count, len(documents), rule,
        )
        return documents

    def transform_content(
        self,
        content: bytes,
        direction: Direction,
        options: TransformOptions,
    ) -> bytes:
        """Transform a complete input buffer, YAML or raw."""

        if options.raw:
            return self.transform_raw(content, direction, options)
        documents = self.transform(parse_stream(content), direction, options)
        return dump_stream(documents).encode("utf-8")

    def transform_raw(
        self,
        buffer: bytes,
        direction: Direction,
        options: TransformOptions,
    ) -> bytes:
        """Treat the whole buffer as one value."""

        if direction is Direction.ENCRYPT:
            if options.base64:
                text = base64.b64encode(buffer).decode("ascii")
            else:
                text = _decode_text(buffer, "input is not valid UTF-8, use --base64")
            return (self._encrypt(text, options) + "\n").encode("ascii")

        self.matched_keys = []
        token = _decode_text(buffer, "encrypted input is not valid UTF-8")
        result = self._decrypt(token.strip(), options)
        if options.base64:
            return b64decode_bytes(result.plaintext)
        return result.plaintext.encode("utf-8")

    # ------------------------------------------------------------------
    # Single values
    # ------------------------------------------------------------------

    def encrypt_value(self, value: str, options: TransformOptions) -> str:
        if options.base64:
            value = b64encode_text(value)
        return self._encrypt(value, options)

    def decrypt_value(self, token: str, options: TransformOptions) -> str:
        plaintext = self._decrypt(token, options).plaintext
        if options.base64:
            plaintext = b64decode_text(plaintext)
        return plaintext

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _encrypt(self, value: str, options: TransformOptions) -> str:
        key = self.key_set.require_encryption_key()
        return registry.encrypt(registry.resolve_algorithm(options.algorithm), key.material, value)

    def _decrypt(self, token: str, options: TransformOptions) -> DecryptResult:
        result = try_decrypt(
            candidate_algorithms(options.algorithm),
            self.key_set.decryption_keys,
            token,
        )
        self.matched_keys.append(result.key)
        return result


def _decode_text(buffer: bytes, message: str) -> str:
    try:
        return buffer.decode("utf-8")
    except UnicodeDecodeError:
        raise UsageError(message) from None
