"""Per-host port fan-out and aggregation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime

from ..models.host import Host
from .probe import DEFAULT_PROBE_TIMEOUT, ProbeResult, connect

logger = logging.getLogger(__name__)

ConnectFunc = Callable[[str, int, float], Awaitable[ProbeResult]]


class HostProber:
    """Probes every port of a host concurrently and folds the outcomes into a Host."""

    def __init__(self, connect_func: ConnectFunc = connect):
        self._connect = connect_func

    async def probe(
        self,
        ip: str,
        ports: Iterable[int],
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ) -> Host | None:
        """Return a Host if at least one port accepted a connection, else None."""
        targets = sorted(set(ports))
        if not targets:
            return None

        results = await asyncio.gather(
            *(self._connect(ip, port, timeout) for port in targets),
            return_exceptions=True,
        )

        successes: list[ProbeResult] = []
        for port, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.debug(f"Probe error {ip}:{port}: {result}")
                continue
            if result.succeeded:
                successes.append(result)

        if not successes:
            return None

        latencies = [r.elapsed_ms for r in successes if r.elapsed_ms is not None]
        host = Host(
            ip_address=ip,
            open_ports=[r.port for r in successes],
            latency_ms=min(latencies) if latencies else None,
            last_seen=datetime.now(),
        )
        logger.debug(f"{ip} open ports {host.open_ports} ({host.device_type})")
        return host
