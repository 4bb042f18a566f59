"""
Trial decryption tests.
"""

import pytest

from yamlcrypt import algorithms as registry
from yamlcrypt.decryptor import candidate_algorithms, try_decrypt
from yamlcrypt.errors import DecryptionFailed, UnknownAlgorithm
from yamlcrypt.keys import Key


def test_candidate_algorithms():
    assert candidate_algorithms() == registry.list_algorithms()
    assert candidate_algorithms("branca") == ["branca:0xBA"]
    with pytest.raises(UnknownAlgorithm):
        candidate_algorithms("rot13")


def test_key_order_does_not_matter(fernet_key, other_key):
    token = registry.encrypt("fernet", other_key.material, "value")
    algorithms = registry.list_algorithms()

    first = try_decrypt(algorithms, [fernet_key, other_key], token)
    second = try_decrypt(algorithms, [other_key, fernet_key], token)

    assert first.plaintext == second.plaintext == "value"
    assert first.key == second.key == other_key
    assert first.algorithm == "fernet:0x80"


def test_missing_key_fails(fernet_key, other_key):
    token = registry.encrypt("fernet", other_key.material, "value")
    with pytest.raises(DecryptionFailed) as info:
        try_decrypt(registry.list_algorithms(), [fernet_key], token)
    assert fernet_key.name not in str(info.value)


def test_finds_branca_token(fernet_key, branca_key):
    token = registry.encrypt("branca", branca_key.material, "value")
    result = try_decrypt(registry.list_algorithms(), [fernet_key, branca_key], token)
    assert result.key == branca_key
    assert result.algorithm == "branca:0xBA"


def test_pinned_algorithm_excludes_others(branca_key):
    token = registry.encrypt("branca", branca_key.material, "value")
    with pytest.raises(DecryptionFailed):
        try_decrypt(["fernet:0x80"], [branca_key], token)


def test_invalid_key_shape_is_skipped(fernet_key):
    token = registry.encrypt("fernet", fernet_key.material, "value")
    result = try_decrypt(registry.list_algorithms(), [Key("bogus"), fernet_key], token)
    assert result.plaintext == "value"


def test_no_keys():
    with pytest.raises(DecryptionFailed):
        try_decrypt(registry.list_algorithms(), [], "token")
