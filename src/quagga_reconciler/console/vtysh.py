"""Local vtysh console.

Runs the ``vtysh`` binary on the same host. Each command is passed as its
own ``-c`` argument, so vtysh executes them in order within one session and
no shell quoting is involved.
"""
import logging
import subprocess

from ..utils.logging_config import timed
from .base import ConsoleError, ConsoleSession

logger = logging.getLogger(__name__)


class VtyshConsole(ConsoleSession):
    """vtysh on the local host."""

    def _run(self, commands: list[str]) -> subprocess.CompletedProcess:
        argv = self.vtysh_command(commands)
        logger.debug(f"Running: {' '.join(argv)}")

        try:
            return subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ConsoleError(f"vtysh timed out after {self.config.timeout}s") from e
        except OSError as e:
            raise ConsoleError(f"Cannot run {self.config.vtysh_path}: {e}") from e

    @timed("vtysh_read")
    def read(self, query: str) -> str:
        """Run a show command."""
        result = self._run([query])
        if result.returncode != 0:
            logger.error(f"vtysh '{query}' failed: {result.stderr}")
            raise ConsoleError(
                f"vtysh returned status {result.returncode} for command \"{query}\"",
                status=result.returncode,
                output=f"{result.stdout}{result.stderr}",
            )
        return result.stdout

    @timed("vtysh_exec")
    def exec(self, commands: list[str]) -> tuple[str, int]:
        """Run a command list; the caller interprets the status."""
        result = self._run(commands)
        if result.returncode != 0:
            logger.debug(f"vtysh exited {result.returncode}: {result.stderr}")
        return f"{result.stdout}{result.stderr}".strip(), result.returncode
