"""Exceptions raised by the ejsync workflow."""

from __future__ import annotations

from typing import Optional


class EjsyncError(Exception):
    """Base class for every error ejsync surfaces to its caller."""


class SubprocessLaunchFailure(EjsyncError):
    """Raised when the ejson binary cannot be found or executed."""


class SubprocessNonZeroExit(EjsyncError):
    """Raised when the ejson binary exits with a non-zero status.

    The captured output is kept verbatim so the caller can show it.
    """

    def __init__(self, command: str, returncode: int, output: str):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"ejson {command} failed (exit {returncode}): {output}"
        )


class MalformedDocument(EjsyncError):
    """Raised when a document is not valid JSON or its root is not an object."""


class MissingKey(EjsyncError):
    """Raised when a document has no _public_key and one is required."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"No _public_key{where}")


class DecryptedViewHazard(EjsyncError):
    """Raised when a decrypted view would be persisted as plaintext."""
