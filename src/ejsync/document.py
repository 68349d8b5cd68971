"""
JSON document helpers.

The only field ejsync ever edits is ``_public_key``. Everything
else passes through untouched, in its original order.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional, Union

from . import PUBLIC_KEY_FIELD
from .errors import MalformedDocument
from .keys import is_valid_public_key
from .models import DocumentStatus

Document = Union[str, dict]

ENCRYPTED_VALUE_RE = re.compile(r"^EJ\[\d+:[A-Za-z0-9+/=]+:[A-Za-z0-9+/=]+:[A-Za-z0-9+/=]+\]$")


def parse_document(text: str) -> dict[str, Any]:
    """Parse document text into a dict.

    Raises:
        MalformedDocument: If the text is not JSON or the root is not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDocument(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedDocument(
            f"Document root must be a JSON object, got {type(data).__name__}"
        )
    return data


def load_document(path: Path) -> dict[str, Any]:
    """Read and parse a document from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDocument(f"{path} is not UTF-8 text: {exc}") from exc
    try:
        return parse_document(text)
    except MalformedDocument as exc:
        raise MalformedDocument(f"{path}: {exc}") from exc


def dump_document(data: dict[str, Any], indent: int = 2) -> str:
    """Serialize a document with stable, pretty formatting."""
    return json.dumps(data, indent=indent or None, ensure_ascii=False) + "\n"


def _as_dict(document: Document) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    return parse_document(document)


def get_document_key(document: Document) -> Optional[str]:
    """Return the document's ``_public_key``, or None when keyless.

    Raises:
        MalformedDocument: If the key is present but not a string.
    """
    value = _as_dict(document).get(PUBLIC_KEY_FIELD)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedDocument(
            f"{PUBLIC_KEY_FIELD} must be a string, got {type(value).__name__}"
        )
    return value


def insert_key(document: Document, key: str, indent: int = 2) -> str:
    """Set ``_public_key`` and return the re-serialized document.

    The key is always emitted first; remaining fields keep their order.
    Applying it twice with the same key gives the same text.

    Args:
        document: Document text or parsed dict.
        key: Public key to store.
        indent: Pretty-print indent.

    Returns:
        New document text.
    """
    data = _as_dict(document)
    updated = {PUBLIC_KEY_FIELD: key}
    updated.update((k, v) for k, v in data.items() if k != PUBLIC_KEY_FIELD)
    return dump_document(updated, indent=indent)


def is_encrypted_value(value: Any) -> bool:
    """Whether a value is already an ejson ciphertext envelope."""
    return isinstance(value, str) and bool(ENCRYPTED_VALUE_RE.match(value))


def _count_values(node: Any, counts: list[int], key: Optional[str] = None) -> None:
    # Mirrors ejson: keys starting with "_" are left in plaintext, and only
    # strings get encrypted.
    if key is not None and key.startswith("_"):
        return
    if isinstance(node, dict):
        for k, v in node.items():
            _count_values(v, counts, k)
    elif isinstance(node, list):
        for item in node:
            _count_values(item, counts)
    elif isinstance(node, str):
        counts[0 if is_encrypted_value(node) else 1] += 1


def document_status(path: Path) -> DocumentStatus:
    """Summarize the key and encryption coverage of a document on disk."""
    data = load_document(path)
    key = get_document_key(data)
    counts = [0, 0]
    _count_values(data, counts)
    return DocumentStatus(
        path=Path(path),
        public_key=key,
        key_valid=is_valid_public_key(key) if key else False,
        encrypted_values=counts[0],
        plaintext_values=counts[1],
    )
