"""Data models for the scanner."""

from .classification import DeviceRole, classify
from .config import Config, ScannerConfig, Settings, StorageConfig
from .host import Host, ScanProgress
from .host_view import SortMode, filter_hosts, port_histogram, services_summary, sort_hosts
from .profile import COMMON_PORT_NAMES, ScanProfile, service_name

__all__ = [
    "COMMON_PORT_NAMES",
    "Config",
    "DeviceRole",
    "Host",
    "ScanProfile",
    "ScanProgress",
    "ScannerConfig",
    "Settings",
    "SortMode",
    "StorageConfig",
    "classify",
    "filter_hosts",
    "port_histogram",
    "service_name",
    "services_summary",
    "sort_hosts",
]
