"""
Edit engine tests.
The external editor is simulated by a Python callable.
"""

import pytest

from yamlcrypt.document import parse_stream, to_python
from yamlcrypt.editor import EditState, run_edit, scoped_temp_file
from yamlcrypt.errors import DecryptionFailed, EditorError, UsageError
from yamlcrypt.keys import KeySet
from yamlcrypt.transformer import Direction, Transformer, TransformOptions


@pytest.fixture
def encrypted_file(tmp_path, key_set):
    target = tmp_path / "secrets.yaml-crypt"
    content = Transformer(key_set).transform_content(
        b"user: admin\npassword: hunter2\n", Direction.ENCRYPT, TransformOptions()
    )
    target.write_bytes(content)
    return target


def decrypt_file(path, key_set):
    content = Transformer(key_set).transform_content(path.read_bytes(), Direction.DECRYPT, TransformOptions())
    return [to_python(doc) for doc in parse_stream(content)]


def leftovers(directory):
    return sorted(p.name for p in directory.iterdir())


def test_edit_replaces_content(encrypted_file, key_set):
    seen = {}

    def editor(command, path):
        seen["command"] = command
        seen["dir"] = path.parent
        text = path.read_text()
        assert "hunter2" in text
        path.write_text(text.replace("hunter2", "correct-horse"))

    state = run_edit(encrypted_file, key_set, TransformOptions(), "my-editor", runner=editor)

    assert state is EditState.DONE
    assert seen == {"command": "my-editor", "dir": encrypted_file.parent}
    assert b"correct-horse" not in encrypted_file.read_bytes()
    assert decrypt_file(encrypted_file, key_set) == [{"user": "admin", "password": "correct-horse"}]
    assert leftovers(encrypted_file.parent) == ["secrets.yaml-crypt"]


def test_editor_failure_leaves_target_unchanged(encrypted_file, key_set):
    original = encrypted_file.read_bytes()

    def editor(command, path):
        path.write_text("password: changed\n")
        raise EditorError("editor exited with status 1")

    with pytest.raises(EditorError):
        run_edit(encrypted_file, key_set, TransformOptions(), "vim", runner=editor)

    assert encrypted_file.read_bytes() == original
    assert leftovers(encrypted_file.parent) == ["secrets.yaml-crypt"]


def test_reencryption_failure_leaves_target_unchanged(encrypted_file, key_set):
    original = encrypted_file.read_bytes()

    def editor(command, path):
        path.write_text("broken: [yaml\n")

    with pytest.raises(UsageError):
        run_edit(encrypted_file, key_set, TransformOptions(), "vim", runner=editor)

    assert encrypted_file.read_bytes() == original
    assert leftovers(encrypted_file.parent) == ["secrets.yaml-crypt"]


def test_reencrypts_with_matching_key(encrypted_file, key_set, other_key):
    keys = KeySet(decryption_keys=(other_key, key_set.encryption_key))

    run_edit(encrypted_file, keys, TransformOptions(), "vim", runner=lambda command, path: None)

    assert decrypt_file(encrypted_file, key_set) == [{"user": "admin", "password": "hunter2"}]


def test_explicit_encryption_key_wins(encrypted_file, key_set, other_key):
    keys = KeySet(decryption_keys=key_set.decryption_keys, encryption_key=other_key)

    run_edit(encrypted_file, keys, TransformOptions(), "vim", runner=lambda command, path: None)

    with pytest.raises(DecryptionFailed):
        decrypt_file(encrypted_file, key_set)
    assert decrypt_file(encrypted_file, KeySet((other_key,), other_key))[0]["user"] == "admin"


def test_wrong_key_never_runs_editor(encrypted_file, other_key):
    def editor(command, path):
        raise AssertionError("editor must not run")

    with pytest.raises(DecryptionFailed):
        run_edit(encrypted_file, KeySet((other_key,), other_key), TransformOptions(), "vim", runner=editor)
    assert leftovers(encrypted_file.parent) == ["secrets.yaml-crypt"]


def test_raw_mode(tmp_path, key_set):
    target = tmp_path / "blob.yml-crypt"
    target.write_bytes(
        Transformer(key_set).transform_raw(b"raw text", Direction.ENCRYPT, TransformOptions(raw=True))
    )

    run_edit(target, key_set, TransformOptions(raw=True), "vim", runner=lambda c, p: p.write_bytes(b"new text"))

    result = Transformer(key_set).transform_raw(target.read_bytes(), Direction.DECRYPT, TransformOptions(raw=True))
    assert result == b"new text"


def test_rejects_plaintext_files(tmp_path, key_set):
    target = tmp_path / "plain.yaml"
    target.write_text("a: b\n")
    with pytest.raises(UsageError):
        run_edit(target, key_set, TransformOptions(), "vim")


def test_rejects_missing_files(tmp_path, key_set):
    with pytest.raises(UsageError):
        run_edit(tmp_path / "missing.yaml-crypt", key_set, TransformOptions(), "vim")


def test_rejects_path_option(encrypted_file, key_set):
    with pytest.raises(UsageError):
        run_edit(encrypted_file, key_set, TransformOptions(path="a"), "vim")


def test_scoped_temp_file_cleanup(tmp_path):
    with pytest.raises(RuntimeError):
        with scoped_temp_file(tmp_path, b"content") as path:
            assert path.read_bytes() == b"content"
            assert path.suffix == ".yaml"
            raise RuntimeError("boom")
    assert list(tmp_path.iterdir()) == []
