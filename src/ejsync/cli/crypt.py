"""Encryption commands: decrypt, encrypt, save, edit."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from ._common import build_workflow, console, reports_errors
from ..document import document_status, get_document_key, parse_document
from ..errors import MissingKey
from ..models import PersistAction
from ..workflow import Buffer

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _summary(path: Path) -> None:
    st = document_status(path)
    console.print(
        f"  [cyan]{path}[/]: {st.encrypted_values} encrypted, "
        f"{st.plaintext_values} plaintext"
    )


def register_crypt_commands(main: click.Group) -> None:
    """Register decrypt/encrypt/save/edit on the main CLI group."""

    @main.command()
    @click.argument("path", type=_FILE)
    @click.option("--output", "-o", default=None, type=click.Path(dir_okay=False, path_type=Path),
                  help="Write plaintext here instead of stdout.")
    @click.pass_context
    @reports_errors
    def decrypt(ctx: click.Context, path: Path, output: Optional[Path]):
        """Print the decrypted document. The file is left untouched."""
        workflow = build_workflow(ctx)
        buffer = Buffer.load(path)
        plaintext = workflow.manual_decrypt(buffer)

        if output:
            output.write_text(plaintext + "\n", encoding="utf-8")
            console.print(f"  [yellow]Plaintext written to {output}[/]; do not commit it.")
        else:
            click.echo(plaintext)

    @main.command()
    @click.argument("path", type=_FILE)
    @click.option("--yes", "-y", is_flag=True, help="Generate a key without asking if one is missing.")
    @click.pass_context
    @reports_errors
    def encrypt(ctx: click.Context, path: Path, yes: bool):
        """Encrypt the file in place and show the refreshed result."""
        workflow = build_workflow(ctx, yes=yes)
        buffer = Buffer.load(path)

        try:
            workflow.manual_encrypt(buffer)
        except MissingKey:
            if workflow.ensure_key(buffer) is None:
                raise
            buffer.write()
            workflow.manual_encrypt(buffer)

        console.print("[green]Encrypted[/]")
        _summary(path)

    @main.command()
    @click.argument("path", type=_FILE)
    @click.option("--yes", "-y", is_flag=True, help="Generate a key without asking if one is missing.")
    @click.option("--no-encrypt", is_flag=True, help="Save without the encrypt step.")
    @click.pass_context
    @reports_errors
    def save(ctx: click.Context, path: Path, yes: bool, no_encrypt: bool):
        """Run the full save workflow over a file on disk.

        Ensures a key (prompting to generate one), writes the file,
        encrypts it and reloads.
        """
        overrides = {"auto_encrypt": False} if no_encrypt else {}
        workflow = build_workflow(ctx, yes=yes, **overrides)
        buffer = Buffer.load(path)
        action = workflow.persist(buffer)

        if action is PersistAction.ENCRYPT:
            console.print("[green]Saved and encrypted[/]")
            _summary(path)
        elif action is PersistAction.PLAIN:
            console.print("[yellow]Saved without encryption[/]")
        else:
            console.print("[yellow]Save aborted: no public key[/]")
            sys.exit(1)

    @main.command()
    @click.argument("path", type=_FILE)
    @click.option("--yes", "-y", is_flag=True, help="Generate a key without asking if one is missing.")
    @click.pass_context
    @reports_errors
    def edit(ctx: click.Context, path: Path, yes: bool):
        """Edit the decrypted document in $EDITOR, then save it encrypted."""
        workflow = build_workflow(ctx, yes=yes)
        buffer = Buffer.load(path)

        if get_document_key(parse_document(buffer.text)) is not None:
            workflow.manual_decrypt(buffer)
        original = buffer.text

        edited = click.edit(original, extension=".json", require_save=True)
        if edited is None or edited == original:
            console.print("[dim]No changes.[/]")
            return

        buffer.set_text(edited)
        action = workflow.persist(buffer, allow_plaintext=False)
        if action is PersistAction.ENCRYPT:
            console.print("[green]Saved and encrypted[/]")
            _summary(path)
        elif action is PersistAction.PLAIN:
            console.print("[yellow]Saved without encryption[/]")
        else:
            console.print("[yellow]Save aborted: no public key; edits discarded[/]")
            sys.exit(1)
