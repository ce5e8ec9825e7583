"""Tests for the command line interface."""
import json
import logging
from unittest.mock import patch

import pytest

from quagga_reconciler import cli
from quagga_reconciler.config import RouterInventory
from quagga_reconciler.utils import audit_log

from conftest import RUNNING_CONFIG, FakeConsole


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setenv("QUAGGA_RECONCILER_LOG_FILE", str(tmp_path / "logs" / "r.log"))
    (tmp_path / "routers.yaml").write_text("routers:\n  edge-1:\n    type: vtysh\n")
    (tmp_path / "edge-1.yaml").write_text(
        "device: edge-1\n"
        "ospf:\n"
        "  router_id: 10.0.0.2\n"
        "  opaque: false\n"
    )
    yield tmp_path
    for name in ("quagga_reconciler", "quagga_reconciler.perf", "quagga_reconciler.audit"):
        named = logging.getLogger(name)
        for handler in named.handlers:
            handler.close()
        named.handlers.clear()


def run(workspace, console, *argv):
    with patch.object(RouterInventory, "get_console", return_value=console):
        return cli.main([
            "--inventory", str(workspace / "routers.yaml"),
            "--audit-dir", str(workspace / "audit"),
            *argv,
        ])


class TestCli:
    """Tests for cli.main."""

    def test_show(self, workspace, capsys):
        assert run(workspace, FakeConsole(RUNNING_CONFIG), "show", "ospf", "--device", "edge-1") == 0

        [record] = json.loads(capsys.readouterr().out)
        assert record["fields"]["router_id"] == "10.0.0.1"

    def test_plan_does_not_exec(self, workspace, capsys):
        console = FakeConsole(RUNNING_CONFIG)
        assert run(workspace, console, "plan", str(workspace / "edge-1.yaml")) == 0

        out = capsys.readouterr().out
        assert "no capability opaque" in out
        assert console.execs == []

    def test_apply(self, workspace, capsys):
        console = FakeConsole(RUNNING_CONFIG)
        assert run(workspace, console, "apply", str(workspace / "edge-1.yaml"), "--no-save") == 0

        [commands] = console.execs
        assert "ospf router-id 10.0.0.2" in commands
        assert "write memory" not in commands
        assert json.loads(capsys.readouterr().out)["success"] is True

        [record] = audit_log.get_recent_changes(str(workspace / "audit" / "audit.log"))
        assert record.device_id == "edge-1"

    def test_apply_dry_run(self, workspace):
        console = FakeConsole(RUNNING_CONFIG)
        assert run(workspace, console, "apply", str(workspace / "edge-1.yaml"), "--dry-run") == 0
        assert console.execs == []

    def test_apply_rejected(self, workspace):
        console = FakeConsole(RUNNING_CONFIG, status=1, output="% Unknown command")
        assert run(workspace, console, "apply", str(workspace / "edge-1.yaml")) == 1

    def test_missing_inventory(self, workspace):
        assert cli.main(["--inventory", str(workspace / "nope.yaml"), "--audit-dir", str(workspace), "show", "ospf", "--device", "x"]) == 1

    def test_history(self, workspace, capsys):
        console = FakeConsole(RUNNING_CONFIG)
        run(workspace, console, "apply", str(workspace / "edge-1.yaml"), "--dry-run")
        capsys.readouterr()

        assert cli.main(["--audit-dir", str(workspace / "audit"), "history", "--device", "edge-1"]) == 0

        [line] = capsys.readouterr().out.splitlines()
        assert "edge-1 modify [ospf ospf]" in line
        assert line.endswith("dry-run")
