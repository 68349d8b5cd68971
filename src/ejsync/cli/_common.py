"""Shared utilities for all CLI command modules.

Provides the Rich console instance, error reporting and the
helpers that turn the click context into a configured workflow.
"""

from __future__ import annotations

import functools
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from ..errors import EjsyncError
from ..models import EjsonConfig
from ..runner import Runner
from ..workflow import SecretFileWorkflow

console = Console()
logger = logging.getLogger("ejsync.cli")


def fail(message: str) -> None:
    """Print an error in red and exit 1."""
    console.print(f"[bold red]Error:[/] {escape(message)}")
    sys.exit(1)


def reports_errors(func):
    """Turn EjsyncError into a red message and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EjsyncError as exc:
            logger.debug("Command failed", exc_info=True)
            fail(str(exc))

    return wrapper


def get_config(ctx: click.Context) -> EjsonConfig:
    """Return the session config stored by the main group."""
    return ctx.find_root().obj["config"]


def build_workflow(
    ctx: click.Context, yes: bool = False, **overrides
) -> SecretFileWorkflow:
    """Build a workflow for one command invocation.

    Args:
        ctx: Click context carrying the session config.
        yes: Answer the key-generation prompt with yes.
        **overrides: Config fields to replace for this command only.

    Returns:
        SecretFileWorkflow wired to a fresh Runner.
    """
    config = get_config(ctx)
    if overrides:
        config = config.model_copy(update=overrides)

    def confirm(prompt: str) -> bool:
        if yes:
            return True
        return click.confirm(prompt, default=True)

    return SecretFileWorkflow(Runner(config), config, confirm)
