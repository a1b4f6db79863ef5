"""Tests for subnet discovery."""

import ipaddress
import socket
from types import SimpleNamespace

import pytest

from gridscan.services import subnet as subnet_module
from gridscan.services.subnet import (
    default_subnet,
    discover_active_subnet,
    resolve_subnet,
    subnet_from_network,
)


def addr(address, netmask, family=socket.AF_INET):
    return SimpleNamespace(family=family, address=address, netmask=netmask)


def fake_interfaces(monkeypatch, addrs, down=()):
    """Replace psutil interface enumeration with fixed tables."""
    stats = {name: SimpleNamespace(isup=name not in down) for name in addrs}
    monkeypatch.setattr(subnet_module.psutil, "net_if_addrs", lambda: addrs)
    monkeypatch.setattr(subnet_module.psutil, "net_if_stats", lambda: stats)


class TestSubnetFromNetwork:
    """Tests for subnet_from_network()."""

    def test_class_c(self):
        """Test a /24 network."""
        subnet = subnet_from_network(ipaddress.IPv4Network("192.168.1.0/24"), "eth0")

        assert subnet.base_address == "192.168.1."
        assert subnet.prefix_length == 24
        assert subnet.host_range == range(1, 255)
        assert subnet.size == 254
        assert subnet.description == "192.168.1.0/24 (eth0)"

    def test_large_network_capped(self):
        """Test that wide networks are capped at one /24 worth of hosts."""
        subnet = subnet_from_network(ipaddress.IPv4Network("10.0.0.0/16"))

        assert subnet.base_address == "10.0.0."
        assert subnet.prefix_length == 16
        assert subnet.size == 254
        assert subnet.description == "10.0.0.0/16 (default)"

    def test_small_network(self):
        """Test that a narrow network only covers its own hosts."""
        subnet = subnet_from_network(ipaddress.IPv4Network("192.168.1.64/28"))

        assert subnet.host_range == range(65, 79)
        assert subnet.addresses()[0] == "192.168.1.65"
        assert subnet.addresses()[-1] == "192.168.1.78"

    def test_no_usable_hosts(self):
        """Test that /31 and /32 networks are rejected."""
        assert subnet_from_network(ipaddress.IPv4Network("192.168.1.0/31")) is None
        assert subnet_from_network(ipaddress.IPv4Network("192.168.1.1/32")) is None


class TestDiscoverActiveSubnet:
    """Tests for discover_active_subnet()."""

    def test_picks_first_usable_interface(self, monkeypatch):
        """Test that loopback and IPv6 entries are skipped."""
        fake_interfaces(
            monkeypatch,
            {
                "lo": [addr("127.0.0.1", "255.0.0.0")],
                "eth0": [
                    addr("fe80::1", "ffff:ffff:ffff:ffff::", family=socket.AF_INET6),
                    addr("192.168.7.42", "255.255.255.0"),
                ],
            },
        )

        subnet = discover_active_subnet()

        assert subnet.base_address == "192.168.7."
        assert subnet.interface == "eth0"
        assert subnet.network == "192.168.7.0/24"

    def test_skips_down_interfaces(self, monkeypatch):
        """Test that interfaces reported down are ignored."""
        fake_interfaces(
            monkeypatch,
            {
                "eth0": [addr("10.1.1.5", "255.255.255.0")],
                "wlan0": [addr("192.168.0.9", "255.255.255.0")],
            },
            down={"eth0"},
        )

        assert discover_active_subnet().interface == "wlan0"

    def test_skips_missing_netmask(self, monkeypatch):
        """Test that entries without a netmask are ignored."""
        fake_interfaces(monkeypatch, {"tun0": [addr("10.8.0.2", None)]})
        assert discover_active_subnet() is None

    def test_skips_point_to_point(self, monkeypatch):
        """Test that a /32 interface is not sweepable."""
        fake_interfaces(monkeypatch, {"ppp0": [addr("10.64.0.1", "255.255.255.255")]})
        assert discover_active_subnet() is None

    def test_enumeration_failure(self, monkeypatch):
        """Test that a failing interface query yields None."""

        def broken():
            raise OSError("permission denied")

        monkeypatch.setattr(subnet_module.psutil, "net_if_addrs", broken)

        assert discover_active_subnet() is None


class TestFallback:
    """Tests for the default range."""

    def test_default_subnet(self):
        """Test the built-in fallback range."""
        subnet = default_subnet()

        assert subnet.base_address == "192.168.1."
        assert subnet.prefix_length == 24
        assert subnet.host_range == range(1, 255)
        assert subnet.interface is None

    def test_default_subnet_rejects_tiny_range(self):
        """Test that a range without hosts is rejected."""
        with pytest.raises(ValueError):
            default_subnet("10.0.0.0/32")

    def test_resolve_falls_back(self, monkeypatch):
        """Test that no interface means the fallback range."""
        fake_interfaces(monkeypatch, {"lo": [addr("127.0.0.1", "255.0.0.0")]})

        subnet = resolve_subnet("10.20.30.0/24")

        assert subnet.base_address == "10.20.30."
        assert subnet.host_range == range(1, 255)
