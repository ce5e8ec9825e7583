"""Tests for the desired state parser."""
import pytest

from quagga_reconciler.config_engine.errors import ParseError
from quagga_reconciler.config_engine.parser import DesiredStateParser
from quagga_reconciler.config_engine.schema import ABSENT, Existence


class TestDesiredStateParser:
    """Tests for DesiredStateParser."""

    def test_parse_minimal_config(self):
        result = DesiredStateParser().parse({"device": "edge-1"})

        assert result.device_id == "edge-1"
        assert result.resources == []

    def test_device_id_alias(self):
        assert DesiredStateParser().parse({"device_id": "edge-1"}).device_id == "edge-1"

    def test_parse_missing_device_raises(self):
        with pytest.raises(ParseError) as exc:
            DesiredStateParser().parse({})
        assert "device_id" in str(exc.value).lower()

    def test_parse_not_a_mapping(self):
        with pytest.raises(ParseError):
            DesiredStateParser().parse(["edge-1"])

    def test_unknown_kind(self):
        with pytest.raises(ParseError) as exc:
            DesiredStateParser().parse({"device": "edge-1", "isis": {}})
        assert "isis" in str(exc.value)

    def test_singleton_section(self):
        result = DesiredStateParser().parse({
            "device": "edge-1",
            "ospf": {
                "router_id": "10.0.0.1",
                "opaque": True,
                "abr_type": "ibm",
                "log_adjacency_changes": "detail",
            },
        })

        [resource] = result.resources
        assert resource.kind == "ospf"
        assert resource.identity == "ospf"
        assert resource.ensure == Existence.PRESENT
        assert resource.values == {
            "router_id": "10.0.0.1",
            "opaque": True,
            "abr_type": "ibm",
            "log_adjacency_changes": "detail",
        }

    def test_multi_record_section(self):
        result = DesiredStateParser().parse({
            "device": "edge-1",
            "route_map": {
                "RM-OUT 10": {"action": "permit", "set": ["metric 10"]},
                "RM-OUT 20": {"ensure": "absent"},
            },
        })

        first, second = result.resources
        assert first.identity == "RM-OUT 10"
        assert first.context == {"action": "permit"}
        assert first.values == {"set": ["metric 10"]}
        assert second.ensure == Existence.ABSENT

    def test_bgp_asn_context(self):
        result = DesiredStateParser().parse({
            "device": "edge-1",
            "bgp_address_family": {
                "ipv6_unicast": {"asn": "65000", "networks": "2001:db8::/32", "maximum_ebgp_paths": "4"},
            },
        })

        [resource] = result.resources
        assert resource.context == {"asn": 65000}
        assert resource.values == {"networks": ["2001:db8::/32"], "maximum_ebgp_paths": 4}

    def test_invalid_asn(self):
        with pytest.raises(ParseError):
            DesiredStateParser().parse({
                "device": "edge-1",
                "bgp_address_family": {"ipv4_unicast": {"asn": "private"}},
            })

    def test_invalid_integer(self):
        with pytest.raises(ParseError):
            DesiredStateParser().parse({
                "device": "edge-1",
                "bgp_address_family": {"ipv4_unicast": {"maximum_ibgp_paths": "lots"}},
            })

    def test_invalid_ensure(self):
        with pytest.raises(ParseError) as exc:
            DesiredStateParser().parse({"device": "edge-1", "ospf": {"ensure": "maybe"}})
        assert "present" in str(exc.value)

    def test_absent_values(self):
        result = DesiredStateParser().parse({
            "device": "edge-1",
            "ospf": {"router_id": None, "abr_type": "absent"},
            "route_map": {"RM 10": {"on_match": "none", "set": None}},
        })

        ospf, route_map = result.resources
        assert ospf.values == {"router_id": ABSENT, "abr_type": ABSENT}
        assert route_map.values == {"on_match": ABSENT, "set": []}

    def test_symbol_normalized(self):
        result = DesiredStateParser().parse({
            "device": "edge-1",
            "ospf": {"abr_type": "alternative-cisco"},
        })
        assert result.resources[0].values["abr_type"] == "alternative_cisco"

    def test_unknown_field_kept_for_validator(self):
        result = DesiredStateParser().parse({"device": "edge-1", "ospf": {"area": "0"}})
        assert result.resources[0].values == {"area": "0"}

    def test_empty_section(self):
        result = DesiredStateParser().parse({"device": "edge-1", "pim_router": None})
        [resource] = result.resources
        assert resource.identity == "pim"
        assert resource.values == {}

    def test_parse_file(self, tmp_path):
        path = tmp_path / "edge-1.yaml"
        path.write_text(
            "device: edge-1\n"
            "pim_router:\n"
            "  ip_multicast_routing: true\n"
            "route_map:\n"
            "  RM-OUT 10:\n"
            "    action: permit\n"
            "    match:\n"
            "      - ip address prefix-list PL-OUT\n"
        )

        result = DesiredStateParser().parse_file(path)

        assert result.device_id == "edge-1"
        assert [r.kind for r in result.resources] == ["pim_router", "route_map"]
        assert result.for_kind("route_map")[0].values == {"match": ["ip address prefix-list PL-OUT"]}

    def test_parse_file_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("device: [edge-1\n")
        with pytest.raises(ParseError):
            DesiredStateParser().parse_file(path)
