"""Tests for the desired state validator."""
from quagga_reconciler.config_engine.schema import (
    ABSENT,
    DesiredResource,
    DesiredState,
    Existence,
)
from quagga_reconciler.config_engine.validator import ConfigValidator


def validate(*resources):
    return ConfigValidator().validate(DesiredState(device_id="edge-1", resources=list(resources)))


class TestConfigValidator:
    """Tests for ConfigValidator."""

    def test_valid_config(self):
        result = validate(
            DesiredResource(kind="ospf", identity="ospf", values={"router_id": "10.0.0.1", "opaque": True}),
            DesiredResource(
                kind="bgp_address_family", identity="ipv6_unicast",
                context={"asn": 65000}, values={"networks": ["2001:db8::/32"], "maximum_ebgp_paths": 4},
            ),
            DesiredResource(
                kind="route_map", identity="RM-OUT 10",
                context={"action": "permit"}, values={"set": ["metric 1"]},
            ),
        )

        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_unknown_kind(self):
        result = validate(DesiredResource(kind="isis", identity="1"))
        assert not result.valid
        assert "Unknown resource kind" in result.errors[0]

    def test_duplicate_resource(self):
        result = validate(
            DesiredResource(kind="route_map", identity="RM 10", context={"action": "permit"}),
            DesiredResource(kind="route_map", identity="RM 10", context={"action": "deny"}),
        )
        assert not result.valid
        assert "Duplicate" in result.errors[0]

    def test_bad_identities(self):
        result = validate(
            DesiredResource(kind="bgp_address_family", identity="ipv5_unicast"),
            DesiredResource(kind="route_map", identity="RM-OUT", context={"action": "permit"}),
            DesiredResource(kind="ospf", identity="ospf 2"),
        )
        assert len(result.errors) == 3

    def test_asn_out_of_range(self):
        result = validate(DesiredResource(
            kind="bgp_address_family", identity="ipv4_unicast", context={"asn": 0},
        ))
        assert not result.valid
        assert "AS number" in result.errors[0]

    def test_invalid_action(self):
        result = validate(DesiredResource(
            kind="route_map", identity="RM 10", context={"action": "allow"},
        ))
        assert not result.valid
        assert "allow" in result.errors[0]

    def test_missing_action_warns(self):
        result = validate(DesiredResource(kind="route_map", identity="RM 10", values={"set": ["metric 1"]}))
        assert result.valid
        assert "no action" in result.warnings[0]

    def test_unknown_field(self):
        result = validate(DesiredResource(kind="ospf", identity="ospf", values={"area": "0"}))
        assert not result.valid
        assert "Unknown field 'area'" in result.errors[0]

    def test_type_mismatches(self):
        result = validate(
            DesiredResource(kind="ospf", identity="ospf", values={"opaque": "yes"}),
            DesiredResource(
                kind="bgp_address_family", identity="ipv4_unicast",
                context={"asn": 1}, values={"maximum_ebgp_paths": 0, "networks": "10.0.0.0/8"},
            ),
        )
        assert not result.valid
        assert len(result.errors) == 3

    def test_absent_values_allowed(self):
        result = validate(DesiredResource(
            kind="ospf", identity="ospf", values={"router_id": ABSENT, "abr_type": ABSENT},
        ))
        assert result.valid

    def test_router_id_must_be_ipv4(self):
        result = validate(DesiredResource(kind="ospf", identity="ospf", values={"router_id": "edge-1"}))
        assert not result.valid
        assert "IPv4" in result.errors[0]

    def test_values_on_absent_resource_warn(self):
        result = validate(DesiredResource(
            kind="ospf", identity="ospf", ensure=Existence.ABSENT, values={"opaque": True},
        ))
        assert result.valid
        assert "ignored" in result.warnings[0]

    def test_too_many_paths_warns(self):
        result = validate(DesiredResource(
            kind="bgp_address_family", identity="ipv4_unicast",
            context={"asn": 1}, values={"maximum_ibgp_paths": 128},
        ))
        assert result.valid
        assert "exceeds" in result.warnings[0]
