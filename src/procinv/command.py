"""Running external enumeration commands."""

import os
import shlex
import subprocess
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class CommandSource(Protocol):
    """Anything that can run a command string and return its stdout lines."""

    def run(self, command: str) -> list[str]:
        ...


class SubprocessCommandSource:
    """
    Command source backed by ``subprocess``.

    Output is returned whatever the exit status is (``pgrep`` exits non-zero
    when nothing matches). A command that cannot be started yields no lines.
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        """
        Initialize the command source.

        Args:
            env: Environment for the child processes. Defaults to the current
                environment with ``LC_ALL=C`` so column formats stay stable.
        """
        self._env = env

    def run(self, command: str) -> list[str]:
        """Run ``command`` and return its stdout split into lines."""
        try:
            args = shlex.split(command)
            if not args:
                return []
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                env=self._env if self._env is not None else _c_locale_env(),
            )
        except (OSError, ValueError) as exc:
            logger.debug("command_failed", command=command, error=str(exc))
            return []

        if result.returncode != 0:
            logger.debug("command_nonzero_exit", command=command, returncode=result.returncode)
        return result.stdout.splitlines()


def _c_locale_env() -> dict[str, str]:
    env = dict(os.environ)
    env["LC_ALL"] = "C"
    return env
