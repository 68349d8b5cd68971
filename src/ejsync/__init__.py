"""
ejsync — secret-file sync workflow for ejson documents.

Keep the plaintext in your head, the ciphertext on disk.
Every save goes through the ejson binary; every load can be
peeked at through a transient decrypted view.
"""

import os

__version__ = "0.1.0"

DEFAULT_BINARY = "ejson"
KEYDIR_ENV = "EJSON_KEYDIR"
PUBLIC_KEY_FIELD = "_public_key"

CONFIG_PATH = os.environ.get("EJSYNC_CONFIG", "~/.config/ejsync/config.yaml")
