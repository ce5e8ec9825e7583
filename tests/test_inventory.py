"""Tests for router inventory management."""
import pytest
import tempfile
import os
from quagga_reconciler.config.inventory import RouterInventory
from quagga_reconciler.console import SSHVtyshConsole, VtyshConsole


class TestRouterInventory:
    """Tests for RouterInventory class."""

    @pytest.fixture
    def temp_config(self):
        """Create a temporary config file for testing."""
        config_content = """
defaults:
  type: ssh
  username: quagga
  password_env: "TEST_PASSWORD"
  timeout: 30
  retries: 3

routers:
  edge-1:
    name: "Edge 1"
    host: 192.0.2.1
    port: 2222

  lab:
    type: vtysh
    use_sudo: true
    vtysh_path: /usr/bin/vtysh
    rack: B4
"""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(config_content)
            f.flush()
            yield f.name
        os.unlink(f.name)

    def test_load_config(self, temp_config):
        """Inventory loads config file correctly."""
        inv = RouterInventory(temp_config)
        assert inv.get_device_ids() == ["edge-1", "lab"]

    def test_get_device_config(self, temp_config):
        """Defaults are merged into every router."""
        inv = RouterInventory(temp_config)
        config = inv.get_device_config("edge-1")
        assert config["host"] == "192.0.2.1"
        assert config["username"] == "quagga"
        assert config["password_env"] == "TEST_PASSWORD"

    def test_router_overrides_defaults(self, temp_config):
        inv = RouterInventory(temp_config)
        assert inv.get_device_config("lab")["type"] == "vtysh"

    def test_unknown_router(self, temp_config):
        inv = RouterInventory(temp_config)
        with pytest.raises(KeyError):
            inv.get_device_config("nonexistent")

    def test_console_config(self, temp_config):
        inv = RouterInventory(temp_config)
        config = inv.get_console_config("edge-1")
        assert config.type == "ssh"
        assert config.port == 2222
        assert config.name == "Edge 1"

    def test_console_config_ignores_unknown_keys(self, temp_config):
        inv = RouterInventory(temp_config)
        config = inv.get_console_config("lab")
        assert config.use_sudo is True
        assert config.vtysh_path == "/usr/bin/vtysh"
        assert config.name == "lab"

    def test_get_console(self, temp_config):
        inv = RouterInventory(temp_config)
        assert isinstance(inv.get_console("edge-1"), SSHVtyshConsole)
        assert isinstance(inv.get_console("lab"), VtyshConsole)

    def test_console_cached(self, temp_config):
        inv = RouterInventory(temp_config)
        assert inv.get_console("lab") is inv.get_console("lab")

    def test_close_all(self, temp_config):
        inv = RouterInventory(temp_config)
        console = inv.get_console("lab")
        console.open()
        inv.close_all()
        assert not console.is_connected
        assert inv.get_console("lab") is not console

    def test_missing_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        if os.path.exists("/etc/quagga-reconciler/routers.yaml"):
            pytest.skip("system inventory present")
        with pytest.raises(FileNotFoundError):
            RouterInventory()

    def test_found_in_configs_dir(self, tmp_path, monkeypatch):
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / "routers.yaml").write_text("routers:\n  r1:\n    type: vtysh\n")
        monkeypatch.chdir(tmp_path)

        inv = RouterInventory()
        assert inv.get_device_ids() == ["r1"]
