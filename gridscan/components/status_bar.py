"""Status bar component showing scan profile, subnet and keyboard hints."""

from datetime import datetime

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static


class StatusBar(Horizontal):
    """Bottom status bar with time, scan context and keyboard hints."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
        width: 100%;
    }

    StatusBar #status-time {
        width: auto;
    }

    StatusBar #status-profile {
        width: auto;
        padding-left: 2;
    }

    StatusBar #status-subnet {
        width: auto;
        padding-left: 2;
    }

    StatusBar #status-activity {
        width: auto;
        padding-left: 2;
        color: $warning;
    }

    StatusBar #status-spacer {
        width: 1fr;
    }

    StatusBar #status-hints {
        width: auto;
        text-align: right;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="status-time")
        yield Static("", id="status-profile")
        yield Static("", id="status-subnet")
        yield Static("", id="status-activity")
        yield Static("", id="status-spacer")
        yield Static(
            "[dim]r[/dim] Scan  [dim]esc[/dim] Cancel  [dim]p[/dim] Profile  "
            "[dim]f[/dim] Refresh  [dim]l[/dim] Labels  [dim]s[/dim] Sort  [dim]t[/dim] Type  "
            "[dim]/[/dim] Filter  [dim]e/E[/dim] Export  [dim]q[/dim] Quit",
            id="status-hints",
        )

    def on_mount(self) -> None:
        """Start clock update timer."""
        self._update_time()
        self.set_interval(1, self._update_time)

    def _update_time(self) -> None:
        """Update the current time display."""
        now = datetime.now()
        self.query_one("#status-time", Static).update(f"[bold]{now.strftime('%H:%M:%S')}[/bold]")

    def set_context(self, profile: str, port_count: int, subnet: str) -> None:
        """Show the selected profile and active subnet."""
        self.query_one("#status-profile", Static).update(
            f"[dim]Profile:[/dim] {profile} [dim]({port_count} ports)[/dim]"
        )
        self.query_one("#status-subnet", Static).update(f"[dim]{subnet}[/dim]")

    def set_activity(self, activity: str) -> None:
        """Set current activity message (e.g., 'Scanning...')."""
        self.query_one("#status-activity", Static).update(
            f"[yellow]{activity}[/yellow]" if activity else ""
        )

    def clear_activity(self) -> None:
        """Clear activity message."""
        self.set_activity("")
