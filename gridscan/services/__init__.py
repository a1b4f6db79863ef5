"""Services for probing, discovering and tracking network hosts."""

from .host_store import HostStore
from .limiter import ConcurrencyLimiter
from .prober import HostProber
from .resolver import ReverseDNSResolver
from .scanner import ScanEngine, ScanState

__all__ = [
    "ConcurrencyLimiter",
    "HostProber",
    "HostStore",
    "ReverseDNSResolver",
    "ScanEngine",
    "ScanState",
]
