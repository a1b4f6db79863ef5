"""Pytest configuration and fixtures."""

import asyncio
import ipaddress
import json
import tempfile
from pathlib import Path

import pytest

from gridscan.models.host import Host
from gridscan.services.subnet import SubnetInfo, subnet_from_network


class MemoryStore:
    """In-memory stand-in for HostStore."""

    def __init__(self, hosts: list[Host] | None = None):
        self.hosts = [h.model_copy() for h in hosts] if hosts is not None else None
        self.saves = 0
        self.fail = False

    def load(self) -> list[Host] | None:
        if self.fail:
            raise OSError("store unavailable")
        if self.hosts is None:
            return None
        return [h.model_copy() for h in self.hosts]

    def save(self, hosts: list[Host]) -> bool:
        if self.fail:
            raise OSError("disk full")
        self.saves += 1
        self.hosts = [h.model_copy() for h in hosts]
        return True

    def clear(self) -> None:
        self.hosts = None

    def by_address(self) -> dict[str, Host]:
        return {h.ip_address: h for h in self.hosts or []}


class FakeProber:
    """Answers from a table of ip -> {port: latency_ms}."""

    def __init__(self, responders: dict[str, dict[int, float]] | None = None, delay: float = 0.0):
        self.responders = responders or {}
        self.delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.fail_on: set[str] = set()

    async def probe(self, ip: str, ports, timeout: float) -> Host | None:
        self.calls.append(ip)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1

        if ip in self.fail_on:
            raise RuntimeError("probe blew up")

        table = self.responders.get(ip, {})
        open_ports = [p for p in table if p in set(ports)]
        if not open_ports:
            return None
        return Host(
            ip_address=ip,
            open_ports=open_ports,
            latency_ms=min(table[p] for p in open_ports),
        )


class FakeResolver:
    """Returns names from a table, None otherwise."""

    def __init__(self, names: dict[str, str] | None = None):
        self.names = names or {}
        self.calls: list[str] = []

    async def resolve(self, ip: str) -> str | None:
        self.calls.append(ip)
        await asyncio.sleep(0)
        return self.names.get(ip)


def fixed_subnet(cidr: str = "192.168.1.0/24", interface: str = "eth0") -> SubnetInfo:
    subnet = subnet_from_network(ipaddress.IPv4Network(cidr), interface=interface)
    assert subnet is not None
    return subnet


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def router_host():
    """Router answering on the web ports."""
    return Host(ip_address="192.168.1.1", open_ports=[443, 80], latency_ms=50.0)


@pytest.fixture
def sample_hosts():
    """A small mixed host list."""
    return [
        Host(
            ip_address="192.168.1.1",
            hostname="router.lan",
            open_ports=[80, 443],
            display_name="Gateway",
            notes="Hall closet",
            latency_ms=4.2,
        ),
        Host(ip_address="192.168.1.20", open_ports=[22], latency_ms=1.5),
        Host(ip_address="192.168.1.30", open_ports=[631, 9100], is_new=True),
    ]


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "scanner": {
            "concurrency_limit": 32,
            "probe_timeout_seconds": 0.5,
            "dns_timeout_seconds": 1.5,
            "persist_every": 4,
            "default_profile": "Standard",
            "fallback_range": "10.0.0.0/24",
        },
        "storage": {"hosts_path": "data/hosts.json", "export_dir": "out"},
        "settings": {"log_level": "DEBUG"},
    }


@pytest.fixture
def sample_config_file(temp_dir, sample_config_data):
    """Create a sample config file for testing."""
    config_path = temp_dir / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_data, f)
    return config_path
