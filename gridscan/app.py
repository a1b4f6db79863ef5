"""Terminal front-end driving the scan engine."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .components import HostsPanel, LabelsScreen, StatusBar
from .models.config import Config
from .models.host import Host
from .services.exporter import ExportFormat, write_export
from .services.scanner import ScanEngine

logger = logging.getLogger(__name__)


class GridScanApp(App):
    """Local network scanner UI."""

    TITLE = "Grid Scan"

    BINDINGS = [
        Binding("r", "scan", "Scan"),
        Binding("escape", "cancel_scan", "Cancel"),
        Binding("p", "cycle_profile", "Profile"),
        Binding("f", "refresh_host", "Refresh host"),
        Binding("l", "edit_labels", "Labels"),
        Binding("e", "export('json')", "Export JSON"),
        Binding("E", "export('csv')", "Export CSV", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config_path: Path | None = None,
        config: Config | None = None,
        engine: ScanEngine | None = None,
        scan_on_start: bool = True,
    ) -> None:
        super().__init__()
        self.config = config or Config.load_or_default(config_path or Path("config.json"))
        self.engine = engine or ScanEngine.from_config(self.config)
        self._scan_on_start = scan_on_start
        self._scan_task: asyncio.Task | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        self.hosts_panel = HostsPanel()
        self.status_bar = StatusBar()
        yield self.hosts_panel
        yield self.status_bar
        yield Footer()

    def on_mount(self) -> None:
        self.engine.add_listener(self._on_engine_changed)
        self._render_engine()
        if self._scan_on_start:
            self.action_scan()

    def on_unmount(self) -> None:
        self.engine.remove_listener(self._on_engine_changed)
        self.engine.cancel_scan()

    def _on_engine_changed(self, engine: ScanEngine) -> None:
        self._render_engine()

    def _render_engine(self) -> None:
        engine = self.engine
        # Held references keep rendering working while a modal screen is on top
        panel = self.hosts_panel
        status_bar = self.status_bar

        panel.update_hosts(engine.hosts)
        panel.update_progress(engine.progress, engine.is_scanning, engine.active_subnet_description)
        profile = engine.selected_profile
        status_bar.set_context(profile.value, len(profile.ports), engine.active_subnet_description)
        if engine.is_scanning:
            status_bar.set_activity("Scanning...")
        else:
            status_bar.clear_activity()

    def action_scan(self) -> None:
        """Start (or restart) a sweep."""
        self._scan_task = self.engine.start_scan()

    def action_cancel_scan(self) -> None:
        """Stop the current sweep."""
        if self.engine.is_scanning:
            self.engine.cancel_scan()
            self.notify("Scan cancelled")

    def action_cycle_profile(self) -> None:
        """Switch to the next scan profile."""
        profile = self.engine.selected_profile.next()
        self.engine.select_profile(profile)
        self.notify(f"Profile: {profile.value} ({len(profile.ports)} ports)")

    def action_refresh_host(self) -> None:
        """Re-probe the selected host."""
        host = self.hosts_panel.selected_host()
        if host is not None:
            self.run_worker(self._refresh_host(host), exclusive=False)

    def on_hosts_panel_refresh_host_requested(self, event: HostsPanel.RefreshHostRequested) -> None:
        self.run_worker(self._refresh_host(event.host), exclusive=False)

    async def _refresh_host(self, host: Host) -> None:
        self.status_bar.set_activity(f"Probing {host.ip_address}...")
        updated = await self.engine.refresh_host(host)
        self.status_bar.clear_activity()
        if updated is None:
            self.notify(f"{host.ip_address} did not respond", severity="warning")
        elif updated.has_changed:
            self.notify(f"{host.ip_address} ports changed: {updated.open_ports}")

    def action_edit_labels(self) -> None:
        """Edit the display name and notes of the selected host."""
        host = self.hosts_panel.selected_host()
        if host is None:
            return

        def on_dismiss(result: tuple[str, str] | None) -> None:
            if result is not None:
                self.run_worker(self._save_labels(host.ip_address, *result), exclusive=False)

        self.push_screen(LabelsScreen(host), on_dismiss)

    async def _save_labels(self, ip: str, display_name: str, notes: str) -> None:
        updated = await self.engine.update_labels(ip, display_name, notes)
        if updated is None:
            self.notify(f"{ip} is no longer listed", severity="warning")
        else:
            self.notify(f"Saved labels for {updated.title}")

    def action_export(self, fmt: ExportFormat) -> None:
        """Export the current host set."""
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = self.config.storage.export_dir / f"gridscan-{timestamp}.{fmt}"
        try:
            write_export(self.engine.hosts, path, fmt)
        except OSError as e:
            logger.error(f"Export failed: {e}")
            self.notify(f"Export failed: {e}", severity="error")
            return
        self.notify(f"Exported {len(self.engine.hosts)} hosts to {path}")
