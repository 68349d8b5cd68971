"""
ejsync CLI — the secret-file workflow from the command line.

This package organizes the CLI into modular command groups.
The main Click group is defined here; it loads the session
configuration once and every subcommand reads it from the context.

Entry point: ejsync.cli:main
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..config import load_config


@click.group()
@click.version_option(version=__version__, prog_name="ejsync")
@click.option("--binary", default=None, help="Path to the ejson binary.")
@click.option(
    "--keydir", default=None, type=click.Path(file_okay=False, path_type=Path),
    help="Keystore directory passed to ejson as EJSON_KEYDIR.",
)
@click.option(
    "--config", "config_path", default=None, type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ~/.config/ejsync/config.yaml).",
)
@click.option(
    "--no-auto-encrypt", is_flag=True, default=False,
    help="Do not encrypt after saving.",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    binary: Optional[str],
    keydir: Optional[Path],
    config_path: Optional[Path],
    no_auto_encrypt: bool,
    verbose: bool,
):
    """ejsync — keep ejson secrets files encrypted on disk.

    Decrypt to look, edit in plaintext, save encrypted.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    config = load_config(
        config_path,
        binary=binary,
        keydir=keydir,
        auto_encrypt=False if no_auto_encrypt else None,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .crypt import register_crypt_commands
from .keys import register_key_commands
from .status import register_status_commands

register_crypt_commands(main)
register_key_commands(main)
register_status_commands(main)
