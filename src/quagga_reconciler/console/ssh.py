"""Remote vtysh console over SSH.

The whole command list travels in one ``exec_command`` call, so vtysh on
the router sees a single session. Each argument is shell-quoted because
the remote side runs it through the login shell.
"""
import logging
import shlex
from typing import Optional

import paramiko

from ..utils.connection import connect_with_retry
from ..utils.logging_config import timed
from .base import ConsoleConfig, ConsoleError, ConsoleSession

logger = logging.getLogger(__name__)


class SSHVtyshConsole(ConsoleSession):
    """vtysh on a remote router reached over SSH."""

    def __init__(self, device_id: str, config: ConsoleConfig):
        super().__init__(device_id, config)
        self._ssh: Optional[paramiko.SSHClient] = None

    def open(self) -> None:
        """Connect, retrying transient transport failures."""
        if self._ssh is not None:
            return
        try:
            self._ssh = connect_with_retry(
                self._connect, self.config.retries, self.config.retry_delay
            )
        except paramiko.AuthenticationException as e:
            raise ConsoleError(f"Authentication to {self.config.host} failed: {e}") from e
        except (paramiko.SSHException, OSError) as e:
            raise ConsoleError(f"Cannot connect to {self.config.host}: {e}") from e
        self._connected = True
        logger.info(f"Connected to {self.device_id} at {self.config.host}")

    @timed("ssh_connect")
    def _connect(self) -> paramiko.SSHClient:
        logger.info(f"Connecting to {self.device_id} at {self.config.host}:{self.config.port}")
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        password = self.config.get_password()
        ssh.connect(
            hostname=self.config.host,
            port=self.config.port,
            username=self.config.username,
            password=password or None,
            key_filename=self.config.key_filename,
            timeout=self.config.timeout,
            allow_agent=not password,
            look_for_keys=not password,
        )
        return ssh

    def close(self) -> None:
        """Disconnect from the router."""
        if self._ssh:
            self._ssh.close()
            self._ssh = None
            logger.info(f"Disconnected from {self.device_id}")
        self._connected = False

    def remote_command(self, commands: list[str]) -> str:
        """The shell command line running ``commands`` through vtysh."""
        return " ".join(shlex.quote(arg) for arg in self.vtysh_command(commands))

    def _run(self, commands: list[str]) -> tuple[int, str, str]:
        if self._ssh is None:
            self.open()

        command = self.remote_command(commands)
        logger.debug(f"Running on {self.device_id}: {command}")
        try:
            stdin, stdout, stderr = self._ssh.exec_command(command, timeout=self.config.timeout)
            out = stdout.read().decode("utf-8", errors="ignore")
            err = stderr.read().decode("utf-8", errors="ignore")
            exit_code = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise ConsoleError(f"SSH command on {self.device_id} failed: {e}") from e
        return exit_code, out, err

    @timed("ssh_read")
    def read(self, query: str) -> str:
        """Run a show command remotely."""
        exit_code, out, err = self._run([query])
        if exit_code != 0:
            logger.error(f"'{query}' on {self.device_id} failed (exit {exit_code}): {err}")
            raise ConsoleError(
                f"vtysh returned status {exit_code} for command \"{query}\"",
                status=exit_code,
                output=f"{out}\n{err}".strip(),
            )
        return out

    @timed("ssh_exec")
    def exec(self, commands: list[str]) -> tuple[str, int]:
        """Run a command list remotely; the caller interprets the status."""
        exit_code, out, err = self._run(commands)
        if exit_code != 0:
            logger.debug(f"vtysh on {self.device_id} exited {exit_code}: {err}")
        return f"{out}\n{err}".strip(), exit_code
