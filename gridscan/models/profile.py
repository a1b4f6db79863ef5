"""Scan profiles and well-known port names."""

from enum import Enum

COMMON_PORT_NAMES: dict[int, str] = {
    20: "FTP-D", 21: "FTP", 22: "SSH", 23: "Telnet", 25: "SMTP",
    53: "DNS", 67: "DHCP", 68: "DHCP", 69: "TFTP", 80: "HTTP",
    110: "POP3", 123: "NTP", 135: "EPMAP", 137: "NetBIOS-Ns",
    138: "NetBIOS-Dgm", 139: "NetBIOS", 143: "IMAP", 161: "SNMP",
    162: "SNMP-trap", 179: "BGP", 389: "LDAP", 443: "HTTPS",
    445: "SMB", 465: "SMTPS", 500: "ISAKMP", 514: "Syslog", 515: "LPD",
    587: "Submission", 631: "IPP", 636: "LDAPS", 993: "IMAPS", 995: "POP3S",
    1080: "SOCKS", 1433: "MSSQL", 1521: "Oracle", 1723: "PPTP", 1883: "MQTT",
    2049: "NFS", 2375: "Docker", 2376: "Docker TLS", 2483: "Oracle",
    2484: "Oracle TLS", 3000: "Node", 3128: "Proxy", 3268: "GC",
    3269: "GC TLS", 3306: "MySQL", 3389: "RDP", 4444: "Metasploit",
    5000: "UPnP", 5432: "Postgres", 5672: "AMQP", 5900: "VNC",
    5985: "WinRM", 5986: "WinRM TLS", 6379: "Redis", 7001: "WebLogic",
    8000: "HTTP-alt", 8080: "HTTP-alt", 8081: "HTTP-alt", 8443: "HTTPS-alt",
    8530: "WSUS", 8531: "WSUS TLS", 8888: "HTTP-alt", 9000: "SonarQube",
    9001: "Tor", 9100: "JetDirect", 9200: "Elasticsearch", 9300: "Elastic-Node",
    10000: "Webmin",
}  # fmt: skip

QUICK_PORTS = (21, 22, 53, 80, 139, 443, 445, 631, 3389, 8080, 8443, 9100)

STANDARD_PORTS = QUICK_PORTS + (
    23, 25, 110, 135, 143, 161, 389, 515, 548, 554, 1883, 2049,
    3000, 3306, 5000, 5432, 5900, 8000, 8081, 8888, 62078,
)  # fmt: skip


def service_name(port: int) -> str | None:
    """Return the well-known service name for a port, if any."""
    return COMMON_PORT_NAMES.get(port)


class ScanProfile(str, Enum):
    """Named port sets applied uniformly to a sweep."""

    QUICK = "Quick"
    STANDARD = "Standard"
    FULL = "Full"

    @property
    def ports(self) -> tuple[int, ...]:
        """Sorted, unique ports probed under this profile."""
        return _PROFILE_PORTS[self]

    def next(self) -> "ScanProfile":
        """Return the following profile, wrapping around."""
        members = list(ScanProfile)
        return members[(members.index(self) + 1) % len(members)]


_PROFILE_PORTS = {
    ScanProfile.QUICK: tuple(sorted(QUICK_PORTS)),
    ScanProfile.STANDARD: tuple(sorted(set(STANDARD_PORTS))),
    ScanProfile.FULL: tuple(sorted(COMMON_PORT_NAMES)),
}
