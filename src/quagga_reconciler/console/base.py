"""Base console abstraction for vtysh sessions."""
import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SHOW_RUNNING_CONFIG = "show running-config"


class ConsoleError(Exception):
    """A console read or exec failed.

    ``status`` is the exit status when the console ran but reported failure.
    """

    def __init__(self, message: str, status: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.status = status
        self.output = output


@dataclass
class ConsoleConfig:
    """Configuration for a router console."""
    type: str
    name: str = ""
    host: str = "localhost"
    port: int = 22
    username: str = ""
    password: Optional[str] = None
    password_env: str = "VTYSH_PASSWORD"
    key_filename: Optional[str] = None
    timeout: int = 30
    retries: int = 3
    retry_delay: float = 2
    vtysh_path: str = "vtysh"
    use_sudo: bool = False

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


class ConsoleSession(ABC):
    """Abstract base class for a vtysh console.

    A session is a single ordered command stream; callers must not
    interleave two command lists on the same device.
    """

    def __init__(self, device_id: str, config: ConsoleConfig):
        self.device_id = device_id
        self.config = config
        self._connected = False

    @property
    def name(self) -> str:
        return self.config.name or self.device_id

    @property
    def is_connected(self) -> bool:
        return self._connected

    # Connection management
    def open(self) -> None:
        """Establish the session (no-op for local consoles)."""
        self._connected = True

    def close(self) -> None:
        """Close the session."""
        self._connected = False

    # Command execution
    @abstractmethod
    def read(self, query: str) -> str:
        """Run a read-only query and return its output.

        Raises:
            ConsoleError: If the query fails
        """
        pass

    @abstractmethod
    def exec(self, commands: list[str]) -> tuple[str, int]:
        """Run an ordered command list in one vtysh invocation.

        Returns:
            Tuple of (output, exit status)
        """
        pass

    def get_running_config(self) -> str:
        """Get the current running configuration."""
        return self.read(SHOW_RUNNING_CONFIG)

    def vtysh_command(self, commands: list[str]) -> list[str]:
        """Argument vector running ``commands`` through vtysh, one ``-c`` each."""
        argv = ["sudo", self.config.vtysh_path] if self.config.use_sudo else [self.config.vtysh_path]
        for command in commands:
            argv.extend(["-c", command])
        return argv

    # Context manager support
    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
