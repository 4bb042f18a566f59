"""
Key resolution.

Turns key specifiers such as ``c:my-key``, ``env:MY_KEY``, ``fd:3`` or
``path/to/file.key`` into key material, and assembles the ordered set of
decryption keys plus the single encryption key.

This module does NOT:
- parse the configuration file (see configfile)
- encrypt or decrypt anything
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from .configfile import ConfigKey
from .errors import InvalidArgument, KeyFileNotFound, KeyNotFound, MissingEncryptionKey, UsageError

logger = logging.getLogger(__name__)

CONFIG_PREFIXES = ("c", "config")
ENV_PREFIXES = ("e", "env")
FD_PREFIXES = ("fd",)
FILE_PREFIXES = ("f", "file")


@dataclass(frozen=True)
class Key:
    material: str = field(repr=False)
    name: str = ""

    def describe(self) -> str:
        return self.name or "<anonymous>"


@dataclass(frozen=True)
class KeySet:
    decryption_keys: Tuple[Key, ...] = ()
    encryption_key: Optional[Key] = None

    def require_encryption_key(self) -> Key:
        """
        Return the encryption key.

        Raises:
            MissingEncryptionKey: if no single encryption key could be chosen
        """

        if self.encryption_key is not None:
            return self.encryption_key
        if self.decryption_keys:
            raise MissingEncryptionKey(
                "encrypting, but multiple keys given! "
                "Use -K to explicitly specify an encryption key."
            )
        raise MissingEncryptionKey("encrypting, but no keys given!")

    def with_encryption_key(self, key: Key) -> "KeySet":
        return KeySet(decryption_keys=self.decryption_keys, encryption_key=key)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def split_spec(spec: str) -> Tuple[str, str]:
    """Split ``prefix:argument``; a bare argument means a key file."""
    if ":" in spec:
        prefix, _, arg = spec.partition(":")
        return prefix, arg
    return "f", spec


def read_key(
    spec: str,
    config_keys: Sequence[ConfigKey] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> Key:
    """
    Resolve a single key specifier to key material.

    Raises:
        KeyNotFound: unknown config key name, or unset environment variable
        KeyFileNotFound: key file does not exist
        InvalidArgument: fd argument is not a non-negative integer
        UsageError: unknown prefix
    """

    prefix, arg = split_spec(spec)

    if prefix in CONFIG_PREFIXES:
        for config_key in config_keys:
            if config_key.name and config_key.name == arg:
                return Key(material=config_key.key.strip(), name=config_key.name)
        raise KeyNotFound(f"key not found in configuration file: {arg}")

    if prefix in ENV_PREFIXES:
        environ = os.environ if environ is None else environ
        value = environ.get(arg, "")
        if not value.strip():
            raise KeyNotFound(f"no such environment variable: {arg}")
        return Key(material=value.strip())

    if prefix in FD_PREFIXES:
        if not (arg.isascii() and arg.isdigit()):
            raise InvalidArgument(f"not a file descriptor: {arg}")
        return Key(material=read_fd(int(arg)).strip())

    if prefix in FILE_PREFIXES:
        try:
            raw = Path(arg).read_bytes()
        except FileNotFoundError:
            raise KeyFileNotFound(f"key file does not exist: {arg}") from None
        return Key(material=_decode_key(raw, spec).strip())

    raise UsageError(f"unknown key argument: {spec}")


def read_fd(fd: int) -> str:
    """Read an already open file descriptor until EOF, leaving it open."""
    with os.fdopen(fd, "rb", closefd=False) as fh:
        return _decode_key(fh.read(), f"fd:{fd}")


def _decode_key(raw: bytes, spec: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise UsageError(f"key is not valid UTF-8: {spec}") from None


def build_key_set(
    key_specs: Optional[Sequence[str]] = None,
    encryption_spec: Optional[str] = None,
    config_keys: Sequence[ConfigKey] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> KeySet:
    """
    Assemble decryption keys (in the given order) and the encryption key.

    Without explicit specifiers all configured keys are decryption keys.
    Without an explicit encryption key, a single decryption key doubles as
    the encryption key.
    """

    if key_specs:
        keys: List[Key] = [read_key(spec, config_keys, environ) for spec in key_specs]
    else:
        keys = [Key(material=k.key, name=k.name) for k in config_keys]

    if encryption_spec:
        encryption_key: Optional[Key] = read_key(encryption_spec, config_keys, environ)
    elif len(keys) == 1:
        encryption_key = keys[0]
    else:
        encryption_key = None

    if not keys and encryption_key is not None:
        keys = [encryption_key]

    logger.debug(
        "using %d decryption key(s), encryption key: %s",
        len(keys),
        encryption_key.describe() if encryption_key else "none",
    )
    return KeySet(decryption_keys=tuple(keys), encryption_key=encryption_key)
