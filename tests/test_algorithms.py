"""
Algorithm registry tests.
Round trips, wrong keys, malformed tokens and cross-scheme rejection.
"""

import base62
import pytest
from branca import Branca

from yamlcrypt import algorithms as registry
from yamlcrypt.errors import InvalidKey, InvalidToken, UnknownAlgorithm

ALGORITHMS = registry.list_algorithms()


def test_registry_order_and_default():
    assert ALGORITHMS == ["fernet:0x80", "branca:0xBA"]
    assert registry.resolve_algorithm(None) == "fernet:0x80"


def test_resolve_by_prefix():
    assert registry.resolve_algorithm("branca") == "branca:0xBA"
    assert registry.resolve_algorithm("fernet:0x80") == "fernet:0x80"


def test_resolve_unknown():
    with pytest.raises(UnknownAlgorithm):
        registry.resolve_algorithm("aes")
    with pytest.raises(UnknownAlgorithm):
        registry.generate_key("fern")


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_round_trip(algorithm):
    key = registry.generate_key(algorithm)
    for plaintext in ["", "secret", "ünïcödé ✓", "multi\nline\n"]:
        token = registry.encrypt(algorithm, key, plaintext)
        assert token != plaintext
        assert registry.recognizes(algorithm, token)
        assert registry.decrypt(algorithm, key, token) == plaintext


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_wrong_key_rejected(algorithm):
    token = registry.encrypt(algorithm, registry.generate_key(algorithm), "secret")
    with pytest.raises(InvalidToken):
        registry.decrypt(algorithm, registry.generate_key(algorithm), token)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_invalid_key_shape(algorithm):
    with pytest.raises(InvalidKey):
        registry.encrypt(algorithm, "too-short", "secret")


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_malformed_token(algorithm):
    key = registry.generate_key(algorithm)
    for token in ["", "not a token", "gAAAAA", "0000"]:
        with pytest.raises(InvalidToken):
            registry.decrypt(algorithm, key, token)


def test_tokens_are_not_cross_recognized():
    fernet_token = registry.encrypt("fernet", registry.generate_key("fernet"), "x")
    branca_token = registry.encrypt("branca", registry.generate_key("branca"), "x")
    assert not registry.recognizes("branca", fernet_token)
    assert not registry.recognizes("fernet", branca_token)


def test_same_key_material_works_for_both_schemes():
    key = registry.generate_key("fernet")
    token = registry.encrypt("branca", key, "shared")
    assert registry.decrypt("branca", key, token) == "shared"
    with pytest.raises(InvalidToken):
        registry.decrypt("fernet", key, token)


def test_branca_tampered_token():
    key = registry.generate_key("branca")
    token = registry.encrypt("branca", key, "secret")
    data = bytearray(base62.decodebytes(token))
    data[-1] ^= 0x01
    with pytest.raises(InvalidToken):
        registry.decrypt("branca", key, base62.encodebytes(bytes(data)))


def test_branca_version_byte():
    key = "k" * 32
    token = registry.encrypt("branca", key, "payload")
    assert base62.decodebytes(token)[0] == 0xBA
    data = bytearray(base62.decodebytes(token))
    data[0] = 0xBB
    forged = base62.encodebytes(bytes(data))
    assert not registry.recognizes("branca", forged)
    with pytest.raises(InvalidToken):
        registry.decrypt("branca", key, forged)


def test_branca_tokens_interoperate_with_library():
    key = "supersecretkeyyoushouldnotcommit"
    token = Branca(key=key.encode("utf-8")).encode(b"from elsewhere")
    assert registry.decrypt("branca", key, token) == "from elsewhere"

    mine = registry.encrypt("branca", key, "hello")
    assert Branca(key=key.encode("utf-8")).decode(mine) == b"hello"


def test_branca_raw_32_character_key():
    key = "supersecretkeyyoushouldnotcommit"
    token = registry.encrypt("branca", key, "hello")
    assert registry.decrypt("branca", key, token) == "hello"
