"""
Error taxonomy.

Every failure the engine reports derives from YamlCryptError so the
command-line layer can map them to exit codes in one place. Messages
never say which key or algorithm came closest to decrypting a value.
"""

from __future__ import annotations


class YamlCryptError(Exception):
    """Base class for all yamlcrypt errors."""


class UsageError(YamlCryptError):
    """The caller violated the contract (bad arguments, wrong file type)."""


class ConfigurationError(YamlCryptError):
    """The key configuration is malformed."""


class UnknownAlgorithm(UsageError):
    """No registered algorithm matches the given identifier."""


class InvalidKey(YamlCryptError):
    """Key material does not have the shape the scheme requires."""


class InvalidToken(YamlCryptError):
    """A token is malformed, unsupported, expired or not authentic."""


class KeyNotFound(UsageError):
    """A key specifier could not be resolved to key material."""


class KeyFileNotFound(KeyNotFound):
    """A key file does not exist."""


class InvalidArgument(UsageError):
    """A key specifier argument has the wrong form."""


class MissingEncryptionKey(UsageError):
    """Encryption was requested but no single encryption key is available."""


class DecryptionFailed(YamlCryptError):
    """No available key and algorithm could decrypt a value."""


class EditorError(YamlCryptError):
    """The external editor did not finish successfully."""
