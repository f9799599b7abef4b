"""Thin subprocess layer for docker, docker-compose, docker-machine and triton."""

import json
import logging
import os
import shutil
import subprocess
from typing import Any, Sequence

from .errors import CommandError, ConfigurationError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Run external tools and hand back their output."""

    def available(self, tool: str) -> bool:
        """Return True if the executable is on PATH."""
        return shutil.which(tool) is not None

    def _environ(self, env: dict[str, str] | None) -> dict[str, str] | None:
        if not env:
            return None
        return {**os.environ, **env}

    def run(self, args: Sequence[str], env: dict[str, str] | None = None) -> str:
        """Run a command and return its stripped stdout.

        Args:
            args: Command and arguments
            env: Extra environment variables layered over os.environ

        Returns:
            Captured standard output with surrounding whitespace removed

        Raises:
            CommandError: If the command exits non-zero
            ConfigurationError: If the executable is not installed
        """
        args = list(args)
        logger.debug(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                env=self._environ(env),
            )
        except FileNotFoundError:
            raise ConfigurationError(
                f"{args[0]} is required, but does not appear to be installed."
            ) from None

        if result.returncode != 0:
            logger.debug(f"{args[0]} failed ({result.returncode}): {result.stderr.strip()}")
            raise CommandError(args, result.returncode, result.stderr)
        return result.stdout.strip()

    def run_json(self, args: Sequence[str], env: dict[str, str] | None = None) -> Any:
        """Run a command whose stdout is a JSON document and parse it."""
        output = self.run(args, env=env)
        try:
            return json.loads(output)
        except (json.JSONDecodeError, ValueError) as e:
            raise CommandError(list(args), 0, f"invalid JSON output: {e}") from e

    def stream(self, args: Sequence[str], env: dict[str, str] | None = None) -> None:
        """Run a lifecycle command with output going straight to the terminal."""
        args = list(args)
        logger.info(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(args, env=self._environ(env))
        except FileNotFoundError:
            raise ConfigurationError(
                f"{args[0]} is required, but does not appear to be installed."
            ) from None

        if result.returncode != 0:
            raise CommandError(args, result.returncode)
