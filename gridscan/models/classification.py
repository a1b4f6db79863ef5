"""Device classification from open ports and address.

The heuristic is an ordered rule table: each rule is a predicate over the
open-port set and the address, and the first matching rule wins.
"""

from collections.abc import Callable, Iterable
from enum import Enum


class DeviceRole(str, Enum):
    """Coarse role of a device on the network."""

    ROUTER = "router"
    SERVER = "server"
    PRINTER = "printer"
    WORKSTATION = "workstation"
    APPLIANCE = "appliance"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return _ROLE_LABELS[self]


_ROLE_LABELS = {
    DeviceRole.ROUTER: "Router",
    DeviceRole.SERVER: "Server/NAS",
    DeviceRole.PRINTER: "Printer",
    DeviceRole.WORKSTATION: "Workstation",
    DeviceRole.APPLIANCE: "Appliance",
    DeviceRole.UNKNOWN: "Unknown",
}

WEB_PORTS = frozenset({80, 443})
PRINTER_PORTS = frozenset({9100, 631})
FILE_SHARING_PORTS = frozenset({445, 139, 2049, 8080})

Rule = tuple[Callable[[frozenset[int], str], bool], str, DeviceRole]

RULES: list[Rule] = [
    (
        lambda ports, ip: ip.endswith(".1") and bool(ports & WEB_PORTS),
        "Likely router",
        DeviceRole.ROUTER,
    ),
    (lambda ports, ip: bool(ports & PRINTER_PORTS), "Likely printer", DeviceRole.PRINTER),
    (
        lambda ports, ip: 22 in ports and bool(ports & FILE_SHARING_PORTS),
        "Likely NAS / server",
        DeviceRole.SERVER,
    ),
    (lambda ports, ip: 3389 in ports, "Likely Windows host (RDP)", DeviceRole.WORKSTATION),
    (lambda ports, ip: 22 in ports, "Likely Unix-like host (SSH)", DeviceRole.WORKSTATION),
    (lambda ports, ip: bool(ports & WEB_PORTS), "Likely web server / appliance", DeviceRole.APPLIANCE),
]

UNKNOWN_DEVICE = ("Unknown device", DeviceRole.UNKNOWN)


def classify(open_ports: Iterable[int], ip_address: str) -> tuple[str, DeviceRole]:
    """Return (device type label, role) for a port set and address."""
    ports = frozenset(open_ports)
    for predicate, device_type, role in RULES:
        if predicate(ports, ip_address):
            return device_type, role
    return UNKNOWN_DEVICE
