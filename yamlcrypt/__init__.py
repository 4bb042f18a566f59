"""
yaml-crypt

Encrypt and decrypt selected scalar values inside YAML documents with
self-describing Fernet or Branca tokens, leaving the document structure
and non-secret fields readable.
"""

__version__ = "0.7.2"

from .algorithms import list_algorithms, resolve_algorithm, generate_key, encrypt, decrypt
from .configfile import Configuration, ConfigKey
from .decryptor import try_decrypt, DecryptResult
from .editor import run_edit
from .keys import Key, KeySet, build_key_set, read_key
from .rules import PathRule, parse_path
from .transformer import Direction, Transformer, TransformOptions

__all__ = [
    "list_algorithms",
    "resolve_algorithm",
    "generate_key",
    "encrypt",
    "decrypt",
    "Configuration",
    "ConfigKey",
    "try_decrypt",
    "DecryptResult",
    "run_edit",
    "Key",
    "KeySet",
    "build_key_set",
    "read_key",
    "PathRule",
    "parse_path",
    "Direction",
    "Transformer",
    "TransformOptions",
]
