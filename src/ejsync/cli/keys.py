"""Key commands: ensure-key, keygen."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ._common import build_workflow, console, reports_errors
from ..keys import generate_key, is_valid_public_key
from ..models import BufferState
from ..workflow import Buffer


def register_key_commands(main: click.Group) -> None:
    """Register key management commands on the main CLI group."""

    @main.command("ensure-key")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--yes", "-y", is_flag=True, help="Generate without asking.")
    @click.pass_context
    @reports_errors
    def ensure_key(ctx: click.Context, path: Path, yes: bool):
        """Make sure PATH has a _public_key, generating one if needed.

        The key is written into the file; values are not encrypted.
        """
        workflow = build_workflow(ctx, yes=yes)
        buffer = Buffer.load(path)
        key = workflow.ensure_key(buffer)

        if key is None:
            console.print(f"[yellow]No public key in {path}[/]")
            sys.exit(1)

        if buffer.state is BufferState.MODIFIED:
            buffer.write()
            console.print(f"  [green]New public key written to {path}[/]")
        elif not is_valid_public_key(key):
            console.print("  [yellow]Existing key does not look like an ejson key[/]")
        console.print(f"  [cyan]{key}[/]")

    @main.command()
    @click.pass_context
    @reports_errors
    def keygen(ctx: click.Context):
        """Generate a keypair in the keystore and print the public key."""
        workflow = build_workflow(ctx)
        click.echo(generate_key(workflow.runner))
