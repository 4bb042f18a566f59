"""
Algorithm registry.

Supported schemes form a closed set of Algorithm subclasses. Each one is
addressed by an identifier of the form ``name:param`` where the parameter
is the token version byte, e.g. ``fernet:0x80``. A bare ``name`` selects
the scheme through prefix matching.

This module does NOT:
- know about YAML documents
- try more than one key
"""

from __future__ import annotations

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import base62
from branca import Branca
from cryptography.fernet import Fernet, InvalidToken as FernetInvalidToken
from Crypto.Random import get_random_bytes

from .errors import InvalidKey, InvalidToken, UnknownAlgorithm

logger = logging.getLogger(__name__)

FERNET_VERSION = 0x80
# version + timestamp + IV + one AES block + HMAC
FERNET_MIN_TOKEN_SIZE = 1 + 8 + 16 + 16 + 32

BRANCA_VERSION = 0xBA
# version + timestamp + nonce + Poly1305 tag
BRANCA_MIN_TOKEN_SIZE = 1 + 4 + 24 + 16
KEY_SIZE = 32


class Algorithm(ABC):
    name: str
    version: int

    @property
    def identifier(self) -> str:
        return f"{self.name}:0x{self.version:02X}"

    def generate_key(self) -> str:
        """Return 32 random bytes as URL-safe Base64."""
        return base64.urlsafe_b64encode(get_random_bytes(KEY_SIZE)).decode("ascii")

    @abstractmethod
    def encrypt(self, key: str, plaintext: str) -> str:
        ...

    @abstractmethod
    def decrypt(self, key: str, token: str) -> str:
        ...

    @abstractmethod
    def recognizes(self, token: str) -> bool:
        """Cheap structural check whether token could belong to this scheme."""


class FernetAlgorithm(Algorithm):
    name = "fernet"
    version = FERNET_VERSION

    def _fernet(self, key: str) -> Fernet:
        try:
            return Fernet(key)
        except (ValueError, TypeError) as e:
            raise InvalidKey("fernet key must be 32 url-safe base64-encoded bytes") from e

    def encrypt(self, key: str, plaintext: str) -> str:
        return self._fernet(key).encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, key: str, token: str) -> str:
        fernet = self._fernet(key)
        try:
            return fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except FernetInvalidToken:
            logger.debug("fernet token rejected")
        except UnicodeDecodeError:
            logger.debug("fernet plaintext is not valid UTF-8")
        raise InvalidToken("invalid token")

    def recognizes(self, token: str) -> bool:
        try:
            data = base64.urlsafe_b64decode(token.encode("ascii"))
        except (binascii.Error, ValueError):
            return False
        return len(data) >= FERNET_MIN_TOKEN_SIZE and data[0] == self.version


class BrancaAlgorithm(Algorithm):
    name = "branca"
    version = BRANCA_VERSION

    def _branca(self, key: str) -> Branca:
        try:
            raw = base64.urlsafe_b64decode(key.encode("ascii"))
        except (binascii.Error, ValueError):
            raw = b""
        if len(raw) != KEY_SIZE:
            # a 32 character key is used as-is
            raw = key.encode("utf-8")
        if len(raw) != KEY_SIZE:
            raise InvalidKey(f"branca key must be {KEY_SIZE} bytes")
        return Branca(key=raw)

    def encrypt(self, key: str, plaintext: str) -> str:
        return self._branca(key).encode(plaintext.encode("utf-8"))

    def decrypt(self, key: str, token: str) -> str:
        branca = self._branca(key)
        if not self.recognizes(token):
            logger.debug("branca token rejected: malformed")
            raise InvalidToken("invalid token")
        try:
            return branca.decode(token).decode("utf-8")
        except (ValueError, RuntimeError) as e:
            # UnicodeDecodeError is a ValueError too
            logger.debug("branca token rejected: %s", e)
        raise InvalidToken("invalid token")

    def recognizes(self, token: str) -> bool:
        try:
            data = base62.decodebytes(token)
        except ValueError:
            return False
        return len(data) >= BRANCA_MIN_TOKEN_SIZE and data[0] == self.version


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_REGISTRY: List[Algorithm] = [FernetAlgorithm(), BrancaAlgorithm()]


def list_algorithms() -> List[str]:
    """Return all algorithm identifiers; the first one is the default."""
    return [algorithm.identifier for algorithm in _REGISTRY]


def resolve_algorithm(name: Optional[str] = None) -> str:
    """
    Resolve a bare or full algorithm name to its registered identifier.

    Raises:
        UnknownAlgorithm: if nothing matches
    """

    if not name:
        return _REGISTRY[0].identifier
    for identifier in list_algorithms():
        if identifier == name or identifier.startswith(f"{name}:"):
            return identifier
    raise UnknownAlgorithm(f"unknown encryption algorithm: {name}")


def get_algorithm(name: Optional[str] = None) -> Algorithm:
    identifier = resolve_algorithm(name)
    for algorithm in _REGISTRY:
        if algorithm.identifier == identifier:
            return algorithm
    raise UnknownAlgorithm(f"unknown encryption algorithm: {name}")


def generate_key(name: Optional[str] = None) -> str:
    return get_algorithm(name).generate_key()


def encrypt(name: Optional[str], key: str, plaintext: str) -> str:
    return get_algorithm(name).encrypt(key, plaintext)


def decrypt(name: Optional[str], key: str, token: str) -> str:
    return get_algorithm(name).decrypt(key, token)


def recognizes(name: Optional[str], token: str) -> bool:
    return get_algorithm(name).recognizes(token)
