"""Key generation through the ejson binary."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .runner import Runner

logger = logging.getLogger("ejsync.keys")

PUBLIC_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def is_valid_public_key(key: Optional[str]) -> bool:
    """Whether ``key`` looks like an ejson public key (64 hex chars)."""
    return bool(key) and bool(PUBLIC_KEY_RE.match(key))


def generate_key(runner: Runner) -> str:
    """Create a new keypair and return its public half.

    ``ejson keygen -w`` writes the private key into the keystore
    itself; only the public key comes back on stdout.

    Args:
        runner: Runner bound to the session's binary and keystore.

    Returns:
        The public key, exactly as printed.
    """
    key = runner.run("keygen", "-w").strip()
    if not is_valid_public_key(key):
        logger.warning("keygen printed an unexpected public key: %r", key)
    else:
        logger.info("Generated public key %s...", key[:12])
    return key
