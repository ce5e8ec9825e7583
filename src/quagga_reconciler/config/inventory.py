"""Router inventory management from YAML configuration."""
import logging
from dataclasses import fields
from pathlib import Path
from typing import Optional

import yaml

from ..console import ConsoleConfig, ConsoleSession, create_console

logger = logging.getLogger(__name__)


class RouterInventory:
    """Manages the router inventory loaded from YAML config.

    ```yaml
    defaults:
      type: ssh
      username: quagga
      password_env: VTYSH_PASSWORD

    routers:
      edge-1:
        host: 192.0.2.1
      lab:
        type: vtysh
        use_sudo: true
    ```
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._config: dict = {}
        self._consoles: dict[str, ConsoleSession] = {}
        self._load_config()

    def _find_config(self) -> str:
        """Find the routers.yaml config file."""
        search_paths = [
            Path.cwd() / "configs" / "routers.yaml",
            Path.cwd() / "routers.yaml",
            Path.home() / ".config" / "quagga-reconciler" / "routers.yaml",
            Path("/etc/quagga-reconciler/routers.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find routers.yaml. Create one in ./configs/routers.yaml"
        )

    def _load_config(self) -> None:
        """Load the YAML configuration."""
        with open(self.config_path) as f:
            self._config = yaml.safe_load(f) or {}

        defaults = self._config.get("defaults") or {}
        routers = self._config.get("routers") or {}
        for router_id, router_config in routers.items():
            if router_config is None:
                router_config = routers[router_id] = {}
            for key, value in defaults.items():
                router_config.setdefault(key, value)

        self._config["routers"] = routers
        logger.debug(f"Loaded {len(routers)} routers from {self.config_path}")

    def get_device_ids(self) -> list[str]:
        """Get all router IDs."""
        return list(self._config["routers"].keys())

    def get_device_config(self, device_id: str) -> dict:
        """Get raw config for a router."""
        routers = self._config["routers"]
        if device_id not in routers:
            raise KeyError(f"Unknown router: {device_id}")
        return routers[device_id]

    def get_console_config(self, device_id: str) -> ConsoleConfig:
        """Build the console configuration for a router.

        Keys that are not console settings are ignored.
        """
        raw = self.get_device_config(device_id)
        known = {f.name for f in fields(ConsoleConfig)}
        unknown = set(raw) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings for {device_id}: {sorted(unknown)}")
        settings = {key: value for key, value in raw.items() if key in known}
        settings.setdefault("type", "vtysh")
        settings.setdefault("name", device_id)
        return ConsoleConfig(**settings)

    def get_console(self, device_id: str) -> ConsoleSession:
        """Get or create a console session for a router."""
        if device_id not in self._consoles:
            self._consoles[device_id] = create_console(
                device_id, self.get_console_config(device_id)
            )
        return self._consoles[device_id]

    def close_all(self) -> None:
        """Close all console sessions."""
        for console in self._consoles.values():
            if console.is_connected:
                console.close()
        self._consoles.clear()
