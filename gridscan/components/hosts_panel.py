"""Hosts panel component for displaying scan results."""

import logging
import subprocess
import sys
import webbrowser

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import DataTable, Input, Label, Static

from ..models.classification import DeviceRole
from ..models.host import Host, ScanProgress
from ..models.host_view import SortMode, filter_hosts, services_summary, sort_hosts

logger = logging.getLogger(__name__)


class HostsPanel(Static):
    """Panel displaying discovered hosts."""

    class RefreshHostRequested(Message):
        """Message sent when user asks to re-probe the selected host."""

        def __init__(self, host: Host) -> None:
            super().__init__()
            self.host = host

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("c", "copy_ip", "Copy IP", show=True),
        Binding("o", "open_ip", "Open", show=True),
        Binding("s", "cycle_sort", "Sort", show=True),
        Binding("t", "cycle_role", "Type", show=True),
        Binding("slash", "filter", "Filter", show=True),
    ]

    # None shows every role
    ROLE_FILTERS: list[DeviceRole | None] = [None, *DeviceRole]

    DEFAULT_CSS = """
    HostsPanel {
        height: 1fr;
        border: solid $primary;
        padding: 0 1;
    }

    HostsPanel #hosts-header {
        text-style: bold;
        color: $text;
        padding: 0 0 1 0;
    }

    HostsPanel #hosts-status {
        color: $text-muted;
        padding: 0 0 1 0;
    }

    HostsPanel #hosts-filter {
        display: none;
        margin: 0 0 1 0;
    }

    HostsPanel #hosts-filter.visible {
        display: block;
    }

    HostsPanel #hosts-copy-status {
        color: $success;
        padding: 0 0 0 1;
    }

    HostsPanel DataTable {
        height: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._all_hosts: list[Host] = []
        self._hosts: list[Host] = []
        self.sort_mode = SortMode.IP
        self.filter_text = ""
        self.role_filter: DeviceRole | None = None

    def compose(self) -> ComposeResult:
        yield Label("Hosts", id="hosts-header")
        yield Label("", id="hosts-status")
        yield Input(placeholder="Filter by IP, name, type...", id="hosts-filter")
        yield Label("", id="hosts-copy-status")
        with VerticalScroll():
            yield DataTable(id="hosts-table")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("Status", "IP Address", "Name", "Type", "Ports", "Latency")
        table.cursor_type = "row"
        table.zebra_stripes = True

    def update_progress(self, progress: ScanProgress, scanning: bool, subnet: str) -> None:
        """Show sweep progress or the idle summary."""
        status_label = self.query_one("#hosts-status", Label)
        if scanning:
            pct = int(progress.fraction_completed * 100)
            status_label.update(
                f"{progress.label} [dim]{progress.current}/{progress.total} ({pct}%)[/dim]"
            )
            return

        hosts = self._all_hosts
        online = sum(1 for h in hosts if h.is_online)
        new_count = sum(1 for h in hosts if h.is_new)
        changed = sum(1 for h in hosts if h.has_changed)
        parts = [f"[green]{online} online[/green]", f"{len(hosts)} known"]
        if new_count:
            parts.append(f"[yellow]{new_count} new[/yellow]")
        if changed:
            parts.append(f"[magenta]{changed} changed[/magenta]")
        top = services_summary(hosts)
        if top:
            parts.append(f"Top: {top}")
        parts.append(f"[dim]{subnet}[/dim]")
        status_label.update(" | ".join(parts))

    def update_hosts(self, hosts: list[Host]) -> None:
        """Replace the host list and redraw the table."""
        self._all_hosts = list(hosts)
        self._render_table()

    def _render_table(self) -> None:
        """Redraw rows for the current filter and sort, keeping the cursor where it was."""
        table = self.query_one(DataTable)
        cursor_row = table.cursor_row
        table.clear()

        roles = [self.role_filter] if self.role_filter is not None else []
        self._hosts = sort_hosts(filter_hosts(self._all_hosts, self.filter_text, roles), self.sort_mode)
        self._update_header()
        for host in self._hosts:
            latency = f"{host.latency_ms:.0f} ms" if host.latency_ms is not None else "-"
            table.add_row(
                self._get_status_display(host),
                host.ip_address,
                host.title,
                host.device_type,
                ", ".join(str(p) for p in host.open_ports) or "-",
                latency,
            )

        if self._hosts and cursor_row is not None:
            table.move_cursor(row=min(cursor_row, len(self._hosts) - 1))

    def _update_header(self) -> None:
        header = f"Hosts ({len(self._hosts)}/{len(self._all_hosts)})  [dim]sort:[/dim] {self.sort_mode.value}"
        if self.role_filter is not None:
            header += f"  [dim]type:[/dim] {self.role_filter.label}"
        if self.filter_text:
            header += f"  [dim]filter:[/dim] {self.filter_text}"
        self.query_one("#hosts-header", Label).update(header)

    def action_cycle_sort(self) -> None:
        """Switch to the next sort order."""
        self.sort_mode = self.sort_mode.next()
        self._render_table()

    def action_cycle_role(self) -> None:
        """Show only the next device role, then all roles again."""
        index = self.ROLE_FILTERS.index(self.role_filter)
        self.role_filter = self.ROLE_FILTERS[(index + 1) % len(self.ROLE_FILTERS)]
        self._render_table()

    def action_filter(self) -> None:
        """Show the filter box and focus it."""
        filter_input = self.query_one("#hosts-filter", Input)
        filter_input.add_class("visible")
        filter_input.focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        """Filter as the user types."""
        if event.input.id == "hosts-filter":
            self.filter_text = event.value
            self._render_table()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Hide the filter box; an empty filter shows everything again."""
        if event.input.id != "hosts-filter":
            return
        if not event.value:
            event.input.remove_class("visible")
        self.query_one(DataTable).focus()

    def _get_status_display(self, host: Host) -> str:
        """Get status icon for a host."""
        if host.is_new:
            return "[yellow]● NEW[/yellow]"
        elif host.has_changed:
            return "[magenta]● CHANGED[/magenta]"
        elif host.is_online:
            return "[green]● UP[/green]"
        return "[dim]● SEEN[/dim]"

    def selected_host(self) -> Host | None:
        """Return the host under the cursor."""
        cursor_row = self.query_one(DataTable).cursor_row
        if cursor_row is None or cursor_row >= len(self._hosts):
            return None
        return self._hosts[cursor_row]

    def action_cursor_down(self) -> None:
        """Move cursor down in the table."""
        self.query_one(DataTable).action_cursor_down()

    def action_cursor_up(self) -> None:
        """Move cursor up in the table."""
        self.query_one(DataTable).action_cursor_up()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Handle Enter on a row - re-probe that host."""
        row_index = event.cursor_row
        if row_index is None or row_index >= len(self._hosts):
            return
        self.post_message(self.RefreshHostRequested(self._hosts[row_index]))

    def action_copy_ip(self) -> None:
        """Copy the selected host's IP address to clipboard."""
        host = self.selected_host()
        if host is None:
            return

        if self._copy_to_clipboard(host.ip_address):
            self._show_status(f"[green]Copied IP: {host.ip_address}[/green]")

    def action_open_ip(self) -> None:
        """Open the selected host in the browser."""
        host = self.selected_host()
        if host is None:
            return

        scheme = "https" if 443 in host.open_ports and 80 not in host.open_ports else "http"
        url = f"{scheme}://{host.ip_address}"
        try:
            webbrowser.open(url)
            self._show_status(f"[green]Opening: {url}[/green]")
        except Exception as e:
            logger.error(f"Failed to open URL '{url}': {e}")
            self._show_status(f"[red]Failed to open: {url}[/red]")

    def _show_status(self, message: str) -> None:
        self.query_one("#hosts-copy-status", Label).update(message)
        self.set_timer(2, self._clear_copy_status)

    def _clear_copy_status(self) -> None:
        """Clear the copy status message."""
        self.query_one("#hosts-copy-status", Label).update("")

    def _copy_to_clipboard(self, text: str) -> bool:
        """Copy text to system clipboard."""
        commands = {
            "darwin": [["pbcopy"]],
            "linux": [["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]],
            "win32": [["clip"]],
        }
        for cmd in commands.get(sys.platform, []):
            try:
                subprocess.run(cmd, input=text.encode(), check=True, capture_output=True)
                return True
            except (FileNotFoundError, subprocess.CalledProcessError):
                continue
        return False
