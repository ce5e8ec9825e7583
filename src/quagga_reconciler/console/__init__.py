"""Console adapters for vtysh."""
from .base import ConsoleConfig, ConsoleError, ConsoleSession, SHOW_RUNNING_CONFIG
from .ssh import SSHVtyshConsole
from .vtysh import VtyshConsole

CONSOLE_TYPES = {
    "vtysh": VtyshConsole,
    "local": VtyshConsole,
    "ssh": SSHVtyshConsole,
}


def create_console(device_id: str, config: ConsoleConfig) -> ConsoleSession:
    """Create a console session of the configured type.

    Raises:
        ValueError: If the console type is unknown
    """
    console_class = CONSOLE_TYPES.get(config.type)
    if console_class is None:
        raise ValueError(
            f"Unknown console type: {config.type}. "
            f"Must be one of {', '.join(sorted(CONSOLE_TYPES))}"
        )
    return console_class(device_id, config)


__all__ = [
    "CONSOLE_TYPES",
    "ConsoleConfig",
    "ConsoleError",
    "ConsoleSession",
    "SHOW_RUNNING_CONFIG",
    "SSHVtyshConsole",
    "VtyshConsole",
    "create_console",
]
