"""Tests for key generation and the encrypt/decrypt operations."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fakes import CIPHERTEXT, PUBLIC_KEY, FakeRunner
from ejsync.errors import MalformedDocument, MissingKey
from ejsync.keys import generate_key, is_valid_public_key
from ejsync.operations import decrypt_file, encrypt_file


class TestKeys:
    """Tests for generate_key and is_valid_public_key."""

    def test_generate_key_uses_keygen_w(self, fake_runner: FakeRunner):
        """generate_key runs ``keygen -w`` and returns the printed key."""
        assert generate_key(fake_runner) == PUBLIC_KEY
        assert fake_runner.calls == [("keygen", "-w")]

    def test_generate_key_returns_odd_output_unchanged(self):
        runner = FakeRunner({"keygen": "abc123"})
        assert generate_key(runner) == "abc123"

    @pytest.mark.parametrize("key,valid", [
        (PUBLIC_KEY, True),
        (PUBLIC_KEY.upper(), True),
        ("abc123", False),
        (PUBLIC_KEY + "0", False),
        ("z" * 64, False),
        (None, False),
        ("", False),
    ])
    def test_is_valid_public_key(self, key, valid):
        assert is_valid_public_key(key) is valid


class TestEncryptFile:
    """Tests for encrypt_file."""

    def test_encrypts_in_place(self, fake_runner: FakeRunner, keyed_file: Path):
        """The binary rewrites the file; values become envelopes."""
        encrypt_file(fake_runner, keyed_file)

        assert fake_runner.calls == [("encrypt", str(keyed_file))]
        data = json.loads(keyed_file.read_text())
        assert data["_public_key"] == PUBLIC_KEY
        assert data["database_password"] == CIPHERTEXT

    def test_missing_key_checked_first(self, fake_runner: FakeRunner, keyless_file: Path):
        """A keyless file never reaches the binary."""
        with pytest.raises(MissingKey):
            encrypt_file(fake_runner, keyless_file)
        assert fake_runner.calls == []

    def test_malformed_checked_first(self, fake_runner: FakeRunner, tmp_path: Path):
        path = tmp_path / "broken.ejson"
        path.write_text("{nope")
        with pytest.raises(MalformedDocument):
            encrypt_file(fake_runner, path)
        assert fake_runner.calls == []


class TestDecryptFile:
    """Tests for decrypt_file."""

    def test_returns_plaintext_object(self, fake_runner: FakeRunner, keyed_file: Path):
        """Output is the full document and parses as a JSON object."""
        plaintext = decrypt_file(fake_runner, keyed_file)
        assert plaintext == '{"a":"1"}'
        assert isinstance(json.loads(plaintext), dict)

    def test_leaves_file_untouched(self, fake_runner: FakeRunner, keyed_file: Path):
        before = keyed_file.read_text()
        decrypt_file(fake_runner, keyed_file)
        assert keyed_file.read_text() == before

    def test_malformed_checked_first(self, fake_runner: FakeRunner, tmp_path: Path):
        path = tmp_path / "array.ejson"
        path.write_text("[]")
        with pytest.raises(MalformedDocument):
            decrypt_file(fake_runner, path)
        assert fake_runner.calls == []
