"""Sorting, filtering and summaries over a host list for display."""

from collections import Counter
from collections.abc import Iterable
from enum import Enum

from .classification import DeviceRole
from .host import Host
from .profile import service_name


class SortMode(str, Enum):
    """Orderings offered by the hosts table."""

    IP = "IP"
    NAME = "Name"
    PORTS = "Ports"

    def next(self) -> "SortMode":
        """Return the following mode, wrapping around."""
        members = list(SortMode)
        return members[(members.index(self) + 1) % len(members)]


def filter_hosts(
    hosts: Iterable[Host],
    text: str = "",
    roles: Iterable[DeviceRole] = (),
) -> list[Host]:
    """Keep hosts matching the text and, if any roles are given, one of the roles.

    Text matches case-insensitively against the address, hostname, display
    name and device type.
    """
    needle = text.strip().lower()
    wanted = set(roles)

    def matches(host: Host) -> bool:
        if wanted and host.role not in wanted:
            return False
        if not needle:
            return True
        fields = (host.ip_address, host.hostname, host.display_name, host.device_type)
        return any(needle in value.lower() for value in fields if value)

    return [host for host in hosts if matches(host)]


def sort_hosts(hosts: Iterable[Host], mode: SortMode = SortMode.IP) -> list[Host]:
    """Order hosts for display; ties fall back to address order."""
    by_address = sorted(hosts, key=lambda h: h.sort_key)
    if mode == SortMode.NAME:
        return sorted(by_address, key=lambda h: h.title.lower())
    if mode == SortMode.PORTS:
        return sorted(by_address, key=lambda h: len(h.open_ports), reverse=True)
    return by_address


def port_histogram(hosts: Iterable[Host], top: int = 10) -> list[tuple[int, int]]:
    """Most common open ports as (port, host count), busiest first."""
    counts = Counter(port for host in hosts for port in host.open_ports)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:top]


def services_summary(hosts: Iterable[Host], top: int = 3) -> str:
    """Short text such as "SSH(4) HTTP(2) 5353(1)"."""
    return " ".join(
        f"{service_name(port) or port}({count})" for port, count in port_histogram(hosts, top)
    )
