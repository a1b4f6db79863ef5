"""Single-port TCP connect probe."""

import asyncio
import logging
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 0.6


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one connection attempt."""

    port: int
    succeeded: bool
    elapsed_ms: float | None = None


async def connect(ip: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT) -> ProbeResult:
    """Attempt a TCP handshake to ip:port within timeout.

    Refused, unreachable and timed-out attempts all count as a closed port.
    Elapsed time is only reported for successful handshakes.
    """
    start = time.perf_counter()
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(ip, port), timeout=timeout)
    except TimeoutError:
        logger.debug(f"Connect timeout {ip}:{port}")
        return ProbeResult(port=port, succeeded=False)
    except (OSError, ValueError) as e:
        logger.debug(f"Connect failed {ip}:{port}: {e}")
        return ProbeResult(port=port, succeeded=False)

    elapsed_ms = (time.perf_counter() - start) * 1000.0

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass  # Peer reset during close; the handshake already succeeded

    return ProbeResult(port=port, succeeded=True, elapsed_ms=elapsed_ms)
