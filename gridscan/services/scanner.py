"""Sweep orchestration: subnet discovery, bounded probing, reconciliation, persistence."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ..models.config import Config, ScannerConfig
from ..models.host import Host, ScanProgress
from ..models.profile import ScanProfile
from .host_store import HostStore
from .limiter import ConcurrencyLimiter
from .prober import HostProber
from .reconcile import index_by_address, merge
from .resolver import ReverseDNSResolver
from .subnet import SubnetInfo, default_subnet, discover_active_subnet

logger = logging.getLogger(__name__)

Listener = Callable[["ScanEngine"], None]


class ScanState(str, Enum):
    """Lifecycle of the engine."""

    IDLE = "idle"
    SCANNING = "scanning"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class _ProbeOutcome:
    """What a worker hands back to the coordinator."""

    ip: str
    host: Host | None


@dataclass
class _Sweep:
    """Bookkeeping for one pass over the range."""

    profile: ScanProfile
    results: asyncio.Queue = field(default_factory=asyncio.Queue)
    persisted: dict[str, Host] = field(default_factory=dict)
    cancelled: bool = False
    dispatcher: asyncio.Task | None = None


class ScanEngine:
    """Drives sweeps over the active subnet and owns the resulting host set.

    All published state (hosts, progress, state) is mutated on the event loop
    only. Probe workers hand immutable outcomes back through a queue and the
    coordinator applies them.
    """

    def __init__(
        self,
        store: HostStore | None = None,
        prober: HostProber | None = None,
        resolver: ReverseDNSResolver | None = None,
        discover: Callable[[], SubnetInfo | None] | None = None,
        config: ScannerConfig | None = None,
    ):
        self.config = config or ScannerConfig()
        self.store = store if store is not None else HostStore()
        self.prober = prober or HostProber()
        self.resolver = resolver or ReverseDNSResolver(timeout=self.config.dns_timeout_seconds)
        self._discover = discover or discover_active_subnet

        self._hosts: dict[str, Host] = {}
        self._state = ScanState.IDLE
        self._progress = ScanProgress()
        self._selected_profile = self.config.default_profile
        self._active_subnet: SubnetInfo | None = None
        self._sweep: _Sweep | None = None
        self._background: set[asyncio.Task] = set()
        # Shared by every sweep so a restart cannot exceed the limit
        self._limiter = ConcurrencyLimiter(self.config.concurrency_limit)
        self._listeners: list[Listener] = []
        self.last_outcome: ScanState | None = None

    @classmethod
    def from_config(cls, config: Config) -> "ScanEngine":
        """Build an engine with the store and timeouts from configuration."""
        return cls(store=HostStore(config.storage.hosts_path), config=config.scanner)

    # Observable state

    @property
    def hosts(self) -> list[Host]:
        return list(self._hosts.values())

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def is_scanning(self) -> bool:
        return self._state == ScanState.SCANNING

    @property
    def progress(self) -> ScanProgress:
        return self._progress.model_copy()

    @property
    def selected_profile(self) -> ScanProfile:
        return self._selected_profile

    @property
    def active_subnet(self) -> SubnetInfo | None:
        return self._active_subnet

    @property
    def active_subnet_description(self) -> str:
        if self._active_subnet is None:
            return "Subnet not detected yet"
        return self._active_subnet.description

    def add_listener(self, listener: Listener) -> None:
        """Call listener(engine) whenever published state changes."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Scan listener failed: {e}")

    def _set_state(self, state: ScanState) -> None:
        self._state = state
        self._notify()

    # Public operations

    def select_profile(self, profile: ScanProfile) -> None:
        """Use profile for every subsequent probe."""
        self._selected_profile = profile
        self._notify()

    def start_scan(self, profile: ScanProfile | None = None) -> asyncio.Task:
        """Start a sweep in the background, cancelling any sweep in flight."""
        if self.is_scanning:
            self.cancel_scan()
        if profile is not None:
            self._selected_profile = profile

        sweep = _Sweep(profile=self._selected_profile)
        self._sweep = sweep
        self._progress = ScanProgress(label="Preparing scan")
        self._set_state(ScanState.SCANNING)
        return asyncio.create_task(self._run_sweep(sweep))

    async def scan(self, profile: ScanProfile | None = None) -> list[Host]:
        """Run a full sweep and return the resulting host set."""
        return await self.start_scan(profile)

    async def rescan(self) -> list[Host]:
        """Sweep again with the current profile."""
        return await self.scan()

    def cancel_scan(self) -> None:
        """Stop admitting probes; in-flight probes finish and are discarded."""
        sweep = self._sweep
        if sweep is None:
            return

        sweep.cancelled = True
        sweep.results.put_nowait(None)  # Wake the coordinator
        self._sweep = None
        self._progress = ScanProgress()
        self.last_outcome = ScanState.CANCELLED
        logger.info("Scan cancelled")
        self._set_state(ScanState.CANCELLED)
        self._set_state(ScanState.IDLE)

    async def refresh_host(self, host: Host) -> Host | None:
        """Re-probe a single host with the current profile and persist the result."""
        ip = host.ip_address
        try:
            fresh = await self.prober.probe(
                ip, self._selected_profile.ports, self.config.probe_timeout_seconds
            )
        except Exception as e:
            logger.debug(f"Refresh of {ip} failed: {e}")
            fresh = None

        if fresh is None:
            logger.info(f"{ip} did not respond to refresh")
            return None

        loop = asyncio.get_running_loop()
        persisted = await loop.run_in_executor(None, self._load_persisted)
        updated = self._upsert(merge(fresh, index_by_address(persisted)))
        self._notify()
        await self._persist()
        self._schedule_enrichment(ip)
        return updated

    async def update_labels(
        self, ip: str, display_name: str | None = None, notes: str | None = None
    ) -> Host | None:
        """Set the user labels of a known host and persist them."""
        host = self._hosts.get(ip)
        if host is None:
            return None
        host.display_name = display_name or None
        host.notes = notes or None
        self._notify()
        await self._persist()
        return host

    async def clear_hosts(self) -> None:
        """Forget every known host, including the stored ones."""
        self._hosts = {}
        self._notify()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._clear_store)

    async def wait_until_settled(self) -> None:
        """Wait for in-flight probes of past sweeps and pending lookups to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # Sweep internals

    async def _run_sweep(self, sweep: _Sweep) -> list[Host]:
        loop = asyncio.get_running_loop()
        subnet = await loop.run_in_executor(None, self._resolve_subnet)
        persisted = await loop.run_in_executor(None, self._load_persisted)
        if sweep.cancelled:
            return self.hosts

        self._active_subnet = subnet
        sweep.persisted = index_by_address(persisted)
        seeded = {host.ip_address: host.stripped() for host in persisted}
        # Entries already in memory are at least as recent as the store
        seeded.update((ip, host.stripped()) for ip, host in self._hosts.items())
        self._hosts = seeded

        addresses = subnet.addresses()
        total = len(addresses)
        self._progress = ScanProgress(
            current=0, total=total, label=f"Scanning {total} hosts on {subnet.network}"
        )
        logger.info(f"Scanning {subnet.description} with profile {sweep.profile.value}")
        self._notify()

        sweep.dispatcher = asyncio.create_task(self._dispatch(sweep, addresses, self._limiter))
        self._track(sweep.dispatcher)

        completed = 0
        found = 0
        while True:
            outcome = await sweep.results.get()
            if outcome is None or sweep.cancelled:
                break

            completed += 1
            self._progress.current = completed
            if outcome.host is not None:
                found += 1
                self._upsert(merge(outcome.host, sweep.persisted))
                self._schedule_enrichment(outcome.ip)

            if completed % self.config.persist_every == 0:
                await self._persist()
            self._notify()

        if sweep.cancelled:
            return self.hosts

        await self._persist()
        if sweep.cancelled:
            return self.hosts

        self._sweep = None
        self._progress = ScanProgress(current=total, total=total, label="Done")
        self.last_outcome = ScanState.COMPLETED
        logger.info(f"Scan complete: {found} of {total} addresses responded")
        self._set_state(ScanState.COMPLETED)
        self._set_state(ScanState.IDLE)
        return self.hosts

    async def _dispatch(self, sweep: _Sweep, addresses: list[str], limiter: ConcurrencyLimiter) -> None:
        """Admit one worker per address under the limiter, then join them all."""
        workers = []
        try:
            for ip in addresses:
                if sweep.cancelled:
                    break
                await limiter.acquire()
                if sweep.cancelled:
                    limiter.release()
                    break
                workers.append(asyncio.create_task(self._probe_one(sweep, ip, limiter)))
            await asyncio.gather(*workers, return_exceptions=True)
        finally:
            sweep.results.put_nowait(None)

    async def _probe_one(self, sweep: _Sweep, ip: str, limiter: ConcurrencyLimiter) -> None:
        host = None
        try:
            host = await self.prober.probe(ip, sweep.profile.ports, self.config.probe_timeout_seconds)
        except Exception as e:
            logger.debug(f"Probe of {ip} failed: {e}")
        finally:
            limiter.release()
        sweep.results.put_nowait(_ProbeOutcome(ip=ip, host=host))

    def _upsert(self, host: Host) -> Host:
        existing = self._hosts.get(host.ip_address)
        if existing is not None:
            # Labels edited since the store snapshot win over the snapshot
            update = {
                "id": existing.id,
                "display_name": existing.display_name,
                "notes": existing.notes,
            }
            if host.hostname is None and existing.hostname:
                # Keep the last known name until a lookup replaces it
                update["hostname"] = existing.hostname
            host = host.model_copy(update=update)
        self._hosts[host.ip_address] = host
        return host

    def _track(self, task: asyncio.Task) -> None:
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _schedule_enrichment(self, ip: str) -> None:
        self._track(asyncio.create_task(self._enrich(ip)))

    async def _enrich(self, ip: str) -> None:
        try:
            name = await self.resolver.resolve(ip)
        except Exception as e:
            logger.debug(f"Reverse lookup of {ip} failed: {e}")
            return

        host = self._hosts.get(ip)
        if not name or host is None or host.hostname == name:
            return

        host.hostname = name
        self._notify()
        await self._persist()

    # Collaborator calls; these run in the default executor and never raise

    def _resolve_subnet(self) -> SubnetInfo:
        try:
            subnet = self._discover()
        except Exception as e:
            logger.warning(f"Subnet discovery failed: {e}")
            subnet = None
        if subnet is None:
            logger.info(f"Using fallback range {self.config.fallback_range}")
            subnet = default_subnet(self.config.fallback_range)
        return subnet

    def _load_persisted(self) -> list[Host]:
        try:
            hosts = self.store.load()
        except Exception as e:
            logger.error(f"Error loading stored hosts: {e}")
            return []
        return hosts or []

    def _save(self, hosts: list[Host]) -> bool:
        try:
            return self.store.save(hosts)
        except Exception as e:
            logger.error(f"Error saving hosts: {e}")
            return False

    def _clear_store(self) -> None:
        try:
            self.store.clear()
        except Exception as e:
            logger.error(f"Error clearing stored hosts: {e}")

    async def _persist(self) -> bool:
        snapshot = [host.model_copy() for host in self._hosts.values()]
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._save, snapshot)
