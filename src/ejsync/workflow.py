"""
Save/load workflow for a secrets document.

The editor hooks of old become two explicit callbacks:

    on_before_persist(buffer) -> PersistAction
    on_after_persist(buffer, action)

plus the manual actions a user can take at any time: decrypt into a
transient view, encrypt and reload, or make sure a key exists.

States:
    clean           buffer matches the encrypted file on disk
    modified        in-memory edits pending
    decrypted-view  transient plaintext, not meant to be saved back
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .document import get_document_key, insert_key, parse_document
from .errors import DecryptedViewHazard, MalformedDocument
from .keys import generate_key
from .models import BufferState, DeclinePolicy, EjsonConfig, PersistAction
from .operations import decrypt_file, encrypt_file
from .runner import Runner

logger = logging.getLogger("ejsync.workflow")

KEY_PROMPT = "{name} has no _public_key. Generate a new keypair?"

Confirm = Callable[[str], bool]


def _decline(prompt: str) -> bool:
    return False


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDocument(f"{path} is not UTF-8 text: {exc}") from exc


class Buffer:
    """In-memory text of one document, tied to its path on disk."""

    def __init__(self, path: Path, text: str = "", state: BufferState = BufferState.CLEAN):
        self.path = Path(path)
        self.text = text
        self.state = state

    @classmethod
    def load(cls, path: Path) -> "Buffer":
        """Open a buffer on the current contents of ``path``."""
        path = Path(path)
        return cls(path, _read_text(path), BufferState.CLEAN)

    def set_text(self, text: str) -> None:
        """Replace the buffer contents as a user edit.

        Edits made on top of a decrypted view are still plaintext, so
        that state sticks until the buffer is reloaded.
        """
        self.text = text
        if self.state is not BufferState.DECRYPTED_VIEW:
            self.state = BufferState.MODIFIED

    def reload(self) -> None:
        """Discard in-memory text and re-read the file."""
        self.text = _read_text(self.path)
        self.state = BufferState.CLEAN
        logger.debug("Reloaded %s from disk", self.path)

    def write(self) -> None:
        """Persist the buffer text as-is. The buffer then matches disk."""
        self.path.write_text(self.text, encoding="utf-8")
        self.state = BufferState.CLEAN

    def __repr__(self) -> str:
        return f"Buffer({str(self.path)!r}, state={self.state.value})"


class SecretFileWorkflow:
    """Drives a buffer through key checks, persistence and encryption."""

    def __init__(
        self,
        runner: Optional[Runner] = None,
        config: Optional[EjsonConfig] = None,
        confirm: Optional[Confirm] = None,
    ):
        """Initialize the workflow.

        Args:
            runner: Subprocess runner. Built from ``config`` when omitted.
            config: Session configuration. Taken from the runner when omitted.
            confirm: Asked before generating a key. Declines when omitted.
        """
        if config is None:
            config = runner.config if runner is not None else EjsonConfig()
        self.config = config
        self.runner = runner or Runner(config)
        self.confirm = confirm or _decline

    # ------------------------------------------------------------------
    # Key handling
    # ------------------------------------------------------------------

    def ensure_key(self, buffer: Buffer) -> Optional[str]:
        """Make sure the buffer carries a _public_key.

        Prompts before generating one. Does not write to disk.

        Returns:
            The key now in the buffer, or None if the user declined.

        Raises:
            MalformedDocument: If the buffer text is not a JSON object.
        """
        data = parse_document(buffer.text)
        existing = get_document_key(data)
        if existing is not None:
            return existing

        if not self.confirm(KEY_PROMPT.format(name=buffer.path.name)):
            logger.info("Key generation declined for %s", buffer.path)
            return None

        key = generate_key(self.runner)
        buffer.set_text(insert_key(data, key, indent=self.config.indent))
        logger.info("Inserted new public key into %s", buffer.path)
        return key

    # ------------------------------------------------------------------
    # Persist callbacks
    # ------------------------------------------------------------------

    def on_before_persist(
        self, buffer: Buffer, allow_plaintext: bool = True
    ) -> PersistAction:
        """Decide how the coming save should go.

        Args:
            buffer: Buffer about to be written.
            allow_plaintext: When False, refuse to write a decrypted view
                that will not be re-encrypted.

        Returns:
            ENCRYPT, PLAIN or ABORT.

        Raises:
            MalformedDocument: If auto-encrypt is on and the text is not a JSON object.
            DecryptedViewHazard: Decrypted view with nothing to re-encrypt it.
        """
        if not self.config.auto_encrypt:
            if buffer.state is BufferState.DECRYPTED_VIEW:
                self._plaintext_hazard(buffer, allow_plaintext)
            return PersistAction.PLAIN

        if self.ensure_key(buffer) is not None:
            return PersistAction.ENCRYPT

        if self.config.on_decline is DeclinePolicy.ABORT:
            logger.info("Save of %s aborted: no key", buffer.path)
            return PersistAction.ABORT

        if buffer.state is BufferState.DECRYPTED_VIEW:
            self._plaintext_hazard(buffer, allow_plaintext)
        logger.warning("Saving %s without encryption", buffer.path)
        return PersistAction.PLAIN

    def on_after_persist(self, buffer: Buffer, action: PersistAction) -> None:
        """Encrypt the file just written and reload it into the buffer.

        On encryption failure the error propagates and the buffer is
        left as it was.
        """
        if action is not PersistAction.ENCRYPT:
            return
        encrypt_file(self.runner, buffer.path)
        buffer.reload()

    def persist(self, buffer: Buffer, allow_plaintext: bool = True) -> PersistAction:
        """Full save: before-persist, write, after-persist.

        Returns:
            The action that was taken.
        """
        action = self.on_before_persist(buffer, allow_plaintext=allow_plaintext)
        if action is PersistAction.ABORT:
            return action

        buffer.write()
        logger.debug("Wrote %s (%s)", buffer.path, action.value)

        self.on_after_persist(buffer, action)
        return action

    # ------------------------------------------------------------------
    # Manual actions
    # ------------------------------------------------------------------

    def manual_decrypt(self, buffer: Buffer) -> str:
        """Replace the buffer with the decrypted document. Disk is untouched."""
        plaintext = decrypt_file(self.runner, buffer.path)
        buffer.text = plaintext
        buffer.state = BufferState.DECRYPTED_VIEW
        return plaintext

    def manual_encrypt(self, buffer: Buffer) -> None:
        """Encrypt the file on disk and reload, without saving first."""
        if buffer.state is BufferState.MODIFIED:
            logger.warning("Discarding unsaved edits in %s", buffer.path)
        encrypt_file(self.runner, buffer.path)
        buffer.reload()

    def _plaintext_hazard(self, buffer: Buffer, allow_plaintext: bool) -> None:
        message = f"Saving a decrypted view writes plaintext secrets to {buffer.path}"
        if not allow_plaintext:
            raise DecryptedViewHazard(message)
        logger.warning(message)
