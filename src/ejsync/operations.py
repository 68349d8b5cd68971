"""
Encrypt and decrypt a file with the ejson binary.

Encryption rewrites the file in place, so callers reload from disk
afterwards. Decryption only prints; the file stays as it was.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .document import get_document_key, load_document
from .errors import MissingKey
from .runner import Runner

logger = logging.getLogger("ejsync.operations")


def encrypt_file(runner: Runner, path: Path) -> None:
    """Encrypt ``path`` in place.

    Args:
        runner: Runner bound to the session's binary and keystore.
        path: Secrets document on disk.

    Raises:
        MalformedDocument: If the file is not a JSON object.
        MissingKey: If the file has no _public_key.
        SubprocessLaunchFailure: If ejson cannot be launched.
        SubprocessNonZeroExit: If ejson reports failure.
    """
    path = Path(path)
    if get_document_key(load_document(path)) is None:
        raise MissingKey(str(path))
    runner.run("encrypt", str(path))
    logger.info("Encrypted %s", path)


def decrypt_file(runner: Runner, path: Path) -> str:
    """Decrypt ``path`` and return the plaintext document.

    Args:
        runner: Runner bound to the session's binary and keystore.
        path: Secrets document on disk.

    Returns:
        Full decrypted document text as printed by ejson.

    Raises:
        MalformedDocument: If the file is not a JSON object.
        SubprocessLaunchFailure: If ejson cannot be launched.
        SubprocessNonZeroExit: If ejson reports failure.
    """
    path = Path(path)
    load_document(path)
    plaintext = runner.run("decrypt", str(path))
    logger.debug("Decrypted %s (%d bytes)", path, len(plaintext))
    return plaintext
