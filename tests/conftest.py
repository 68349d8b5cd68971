"""Shared test fixtures for ejsync."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fakes import PUBLIC_KEY, FakeRunner


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's ejsync config and env out of every test."""
    for name in ("EJSYNC_BINARY", "EJSYNC_KEYDIR", "EJSYNC_AUTO_ENCRYPT", "EJSYNC_ON_DECLINE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("ejsync.config.CONFIG_PATH", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def keyed_file(tmp_path: Path) -> Path:
    """A secrets file with a public key and plaintext values."""
    path = tmp_path / "secrets.ejson"
    path.write_text(json.dumps(
        {"_public_key": PUBLIC_KEY, "database_password": "hunter2", "api_token": "t0k3n"},
        indent=2,
    ) + "\n")
    return path


@pytest.fixture
def keyless_file(tmp_path: Path) -> Path:
    """A secrets file that has never been given a key."""
    path = tmp_path / "keyless.ejson"
    path.write_text(json.dumps({"other": "plain"}, indent=2) + "\n")
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    """FakeRunner with a keygen and decrypt answer ready."""
    return FakeRunner({"keygen": PUBLIC_KEY, "decrypt": '{"a":"1"}'})
