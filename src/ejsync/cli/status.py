"""Status and overview commands: status, config."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.panel import Panel
from rich.table import Table

from ._common import console, get_config, reports_errors
from ..document import document_status
from ..runner import Runner


def register_status_commands(main: click.Group) -> None:
    """Register status/config commands on the main CLI group."""

    @main.command()
    @click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--json-out", is_flag=True, help="Output as machine-readable JSON.")
    @reports_errors
    def status(path: Path, json_out: bool):
        """Show the key and encryption coverage of a secrets file."""
        st = document_status(path)

        if json_out:
            click.echo(st.model_dump_json(indent=2))
            return

        if not st.has_key:
            key_line = "[bold red]missing[/] (run [cyan]ejsync ensure-key[/])"
        elif st.key_valid:
            key_line = f"[green]{st.public_key}[/]"
        else:
            key_line = f"[yellow]{st.public_key}[/] (not a 64-char hex key)"

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Values", style="bold")
        table.add_column("Count")
        table.add_row("Encrypted", f"[green]{st.encrypted_values}[/]")
        plain_style = "green" if st.fully_encrypted else "bold yellow"
        table.add_row("Plaintext", f"[{plain_style}]{st.plaintext_values}[/]")

        console.print()
        console.print(
            Panel(
                f"Public key: {key_line}",
                title=str(st.path),
                border_style="bright_blue",
            )
        )
        console.print(table)
        console.print()

    @main.command("config")
    @click.pass_context
    def show_config(ctx: click.Context):
        """Show the effective configuration."""
        config = get_config(ctx)
        data = config.model_dump(mode="json")
        data["env"] = Runner(config).env_override()
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), nl=False)
