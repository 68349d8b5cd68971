"""
Pydantic models for the secret-file workflow.

Configuration is fixed for a session, invocations are throwaway
records of a single binary call, and buffer state tracks where the
in-memory document stands relative to what is on disk.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeclinePolicy(str, Enum):
    """What to do when the user refuses to generate a missing key."""

    SAVE_PLAIN = "save-plain"
    ABORT = "abort"


class BufferState(str, Enum):
    """Where the in-memory document stands relative to disk."""

    CLEAN = "clean"
    MODIFIED = "modified"
    DECRYPTED_VIEW = "decrypted-view"


class PersistAction(str, Enum):
    """Decision returned by the before-persist callback."""

    ENCRYPT = "encrypt"
    PLAIN = "plain"
    ABORT = "abort"


class EjsonConfig(BaseModel):
    """Process-wide configuration, set once at startup."""

    model_config = ConfigDict(frozen=True)

    binary: Optional[str] = None
    keydir: Optional[Path] = None
    auto_encrypt: bool = True
    on_decline: DeclinePolicy = DeclinePolicy.SAVE_PLAIN
    indent: int = Field(default=2, ge=0)


class Invocation(BaseModel):
    """Record of one call into the external binary."""

    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Captured stdout and stderr, joined, without trailing whitespace."""
        parts = [p.rstrip("\n") for p in (self.stdout, self.stderr) if p.strip()]
        return "\n".join(parts)


class DocumentStatus(BaseModel):
    """Summary of a secrets document as it sits on disk."""

    path: Path
    public_key: Optional[str] = None
    key_valid: bool = False
    encrypted_values: int = 0
    plaintext_values: int = 0

    @property
    def has_key(self) -> bool:
        return self.public_key is not None

    @property
    def fully_encrypted(self) -> bool:
        return self.plaintext_values == 0
