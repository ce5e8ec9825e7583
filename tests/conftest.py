"""Shared fixtures: a running-config dump and an in-memory console."""
import pytest

from quagga_reconciler.console.base import ConsoleConfig, ConsoleSession

RUNNING_CONFIG = """\
!
! Zebra configuration saved from vty
!
hostname edge-1
log file /var/log/quagga/bgpd.log
!
ip multicast-routing
!
interface eth0
 ip address 192.0.2.1/24
!
router bgp 65000
 bgp router-id 10.0.0.1
 network 10.0.0.0/8
 maximum-paths 4
 neighbor 192.0.2.2 remote-as 65001
!
 address-family ipv6
 network 2001:db8::/32
 aggregate-address 2001:db8::/29 summary-only
 maximum-paths ibgp 2
 exit-address-family
!
router ospf
 ospf router-id 10.0.0.1
 log-adjacency-changes detail
 capability opaque
!
route-map RM-OUT permit 10
 match ip address prefix-list PL-OUT
 set community 65000:100
 set local-preference 200
!
route-map RM-OUT deny 20
!
line vty
!
"""


class FakeConsole(ConsoleSession):
    """Console that serves a fixed running-config and records exec calls."""

    def __init__(self, running_config: str = "", status: int = 0, output: str = ""):
        super().__init__("test-router", ConsoleConfig(type="fake"))
        self.running_config = running_config
        self.status = status
        self.output = output
        self.reads: list[str] = []
        self.execs: list[list[str]] = []

    def read(self, query: str) -> str:
        self.reads.append(query)
        return self.running_config

    def exec(self, commands: list[str]) -> tuple[str, int]:
        self.execs.append(list(commands))
        return self.output, self.status


@pytest.fixture
def running_config():
    return RUNNING_CONFIG


@pytest.fixture
def fake_console():
    return FakeConsole(RUNNING_CONFIG)
