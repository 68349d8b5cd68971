"""
Subprocess runner for the ejson binary.

One call, one child process, one environment built just for it.
The keystore directory is handed to the child explicitly; the
parent's os.environ is never touched.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from . import DEFAULT_BINARY, KEYDIR_ENV
from .errors import SubprocessLaunchFailure, SubprocessNonZeroExit
from .models import EjsonConfig, Invocation

logger = logging.getLogger("ejsync.runner")


class Runner:
    """Runs ejson subcommands and captures what they print.

    Calls block until the child exits. There is no timeout: a hung
    binary hangs the caller.
    """

    def __init__(self, config: Optional[EjsonConfig] = None):
        """Initialize the runner.

        Args:
            config: Session configuration. Defaults to EjsonConfig().
        """
        self.config = config or EjsonConfig()
        self.last_invocation: Optional[Invocation] = None

    def resolve_binary(self) -> str:
        """Locate the ejson executable.

        Returns:
            The configured path, or whatever PATH lookup finds.

        Raises:
            SubprocessLaunchFailure: If nothing can be found.
        """
        if self.config.binary:
            return str(Path(self.config.binary).expanduser())
        found = shutil.which(DEFAULT_BINARY)
        if not found:
            raise SubprocessLaunchFailure(
                f"{DEFAULT_BINARY} not found in PATH; set --binary or EJSYNC_BINARY"
            )
        return found

    def env_override(self) -> dict[str, str]:
        """Environment variables this runner adds for the child."""
        if self.config.keydir is None:
            return {}
        return {KEYDIR_ENV: str(self.config.keydir)}

    def build_env(self) -> dict[str, str]:
        """Full child environment: a copy of ours plus the override."""
        env = dict(os.environ)
        env.update(self.env_override())
        return env

    def run(self, command: str, *args: str) -> str:
        """Run ``ejson <command> <args...>``.

        Args:
            command: Subcommand name (keygen, encrypt, decrypt).
            *args: Remaining arguments.

        Returns:
            Captured stdout with trailing newlines stripped.

        Raises:
            SubprocessLaunchFailure: Binary missing or not executable.
            SubprocessNonZeroExit: Binary exited non-zero.
        """
        invocation = Invocation(
            command=command,
            args=[str(a) for a in args],
            env=self.env_override(),
        )
        self.last_invocation = invocation

        binary = self.resolve_binary()
        cmd = [binary, command, *invocation.args]
        logger.debug("Running %s (env=%s)", cmd, invocation.env)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=self.build_env(),
                check=False,
            )
        except OSError as exc:
            logger.warning("Could not launch %s: %s", binary, exc)
            raise SubprocessLaunchFailure(f"Could not launch {binary}: {exc}") from exc

        invocation.stdout = result.stdout or ""
        invocation.stderr = result.stderr or ""
        invocation.returncode = result.returncode

        if result.returncode != 0:
            logger.warning(
                "ejson %s exited %d: %s", command, result.returncode, invocation.output
            )
            raise SubprocessNonZeroExit(command, result.returncode, invocation.output)

        return invocation.stdout.rstrip("\n")
