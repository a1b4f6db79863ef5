"""Best-effort reverse DNS lookups."""

import asyncio
import logging
import socket

logger = logging.getLogger(__name__)

DEFAULT_DNS_TIMEOUT = 1.0


class ReverseDNSResolver:
    """Resolves addresses to names without blocking the event loop."""

    def __init__(self, timeout: float = DEFAULT_DNS_TIMEOUT):
        self.timeout = timeout

    async def resolve(self, ip: str) -> str | None:
        """Return the PTR name for ip, or None on any failure."""
        loop = asyncio.get_running_loop()
        try:
            hostname, _, _ = await asyncio.wait_for(
                loop.run_in_executor(None, socket.gethostbyaddr, ip),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.debug(f"DNS lookup timeout for {ip}")
            return None
        except (socket.herror, socket.gaierror):
            return None  # No reverse DNS
        except (OSError, UnicodeError) as e:
            logger.debug(f"DNS lookup error for {ip}: {e}")
            return None

        hostname = (hostname or "").rstrip(".")
        if not hostname or hostname == ip:
            return None
        return hostname
