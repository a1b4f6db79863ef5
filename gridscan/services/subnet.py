"""Active subnet discovery from local network interfaces."""

import ipaddress
import logging
import socket
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

DEFAULT_RANGE = "192.168.1.0/24"
MAX_HOSTS = 254


@dataclass(frozen=True)
class SubnetInfo:
    """A sweepable IPv4 range.

    host_range holds last-octet values appended to base_address.
    """

    base_address: str
    prefix_length: int
    host_range: range
    network: str
    interface: str | None = None

    @property
    def size(self) -> int:
        return len(self.host_range)

    @property
    def description(self) -> str:
        source = self.interface or "default"
        return f"{self.network} ({source})"

    def addresses(self) -> list[str]:
        """Dotted addresses in sweep order."""
        return [f"{self.base_address}{octet}" for octet in self.host_range]


def subnet_from_network(network: ipaddress.IPv4Network, interface: str | None = None) -> SubnetInfo | None:
    """Build a SubnetInfo for a network, or None if it has no usable hosts."""
    usable = min(MAX_HOSTS, 2 ** (32 - network.prefixlen) - 2)
    if usable < 1:
        return None

    octets = str(network.network_address).split(".")
    first = int(octets[3]) + 1
    return SubnetInfo(
        base_address=".".join(octets[:3]) + ".",
        prefix_length=network.prefixlen,
        host_range=range(first, first + usable),
        network=str(network),
        interface=interface,
    )


def discover_active_subnet() -> SubnetInfo | None:
    """Inspect interfaces and return the first non-loopback IPv4 subnet.

    Returns None when no usable interface exists; callers supply a default.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except (OSError, RuntimeError) as e:
        logger.debug(f"Interface enumeration failed: {e}")
        return None

    for ifname, entries in addrs.items():
        st = stats.get(ifname)
        if st is not None and not st.isup:
            continue

        for entry in entries:
            if entry.family != socket.AF_INET or not entry.address or not entry.netmask:
                continue
            try:
                address = ipaddress.IPv4Address(entry.address)
                network = ipaddress.IPv4Network(f"{address}/{entry.netmask}", strict=False)
            except ValueError as e:
                logger.debug(f"Skipping {ifname} {entry.address}/{entry.netmask}: {e}")
                continue
            if address.is_loopback:
                continue

            subnet = subnet_from_network(network, interface=ifname)
            if subnet is None:
                logger.debug(f"Skipping {ifname} {network}: no usable hosts")
                continue
            logger.debug(f"Active subnet {subnet.description}")
            return subnet

    return None


def default_subnet(cidr: str = DEFAULT_RANGE) -> SubnetInfo:
    """The fallback range used when discovery finds nothing."""
    subnet = subnet_from_network(ipaddress.IPv4Network(cidr, strict=False))
    if subnet is None:
        raise ValueError(f"CIDR range '{cidr}' has no usable host addresses")
    return subnet


def resolve_subnet(fallback: str = DEFAULT_RANGE) -> SubnetInfo:
    """Discover the active subnet, falling back to a default range."""
    subnet = discover_active_subnet()
    if subnet is None:
        logger.info(f"No usable interface found, falling back to {fallback}")
        return default_subnet(fallback)
    return subnet
