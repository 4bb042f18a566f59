import pytest

from yamlcrypt.algorithms import generate_key
from yamlcrypt.keys import Key, KeySet


@pytest.fixture
def fernet_key():
    return Key(material=generate_key("fernet"), name="fernet-key")


@pytest.fixture
def branca_key():
    return Key(material=generate_key("branca"), name="branca-key")


@pytest.fixture
def other_key():
    return Key(material=generate_key("fernet"), name="other-key")


@pytest.fixture
def key_set(fernet_key):
    return KeySet(decryption_keys=(fernet_key,), encryption_key=fernet_key)
