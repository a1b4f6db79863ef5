"""Modal dialog for editing a host's display name and notes."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from ..models.host import Host


class LabelsScreen(ModalScreen[tuple[str, str] | None]):
    """Edit the user labels of one host.

    Dismisses with (display_name, notes), or None when cancelled. Empty
    values clear the label.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    DEFAULT_CSS = """
    LabelsScreen {
        align: center middle;
    }

    LabelsScreen #labels-dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }

    LabelsScreen #labels-title {
        text-style: bold;
        padding: 0 0 1 0;
    }

    LabelsScreen #labels-buttons {
        height: auto;
        align: right middle;
        padding: 1 0 0 0;
    }

    LabelsScreen Button {
        margin: 0 0 0 1;
    }
    """

    def __init__(self, host: Host) -> None:
        super().__init__()
        self.host = host

    def compose(self) -> ComposeResult:
        with Vertical(id="labels-dialog"):
            yield Label(f"Labels for {self.host.ip_address}", id="labels-title")
            yield Input(self.host.display_name or "", placeholder="Display name", id="labels-name")
            yield Input(self.host.notes or "", placeholder="Notes", id="labels-notes")
            with Horizontal(id="labels-buttons"):
                yield Button("Save", variant="primary", id="labels-save")
                yield Button("Cancel", id="labels-cancel")

    def on_mount(self) -> None:
        self.query_one("#labels-name", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "labels-save":
            self._save()
        else:
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        name = self.query_one("#labels-name", Input).value.strip()
        notes = self.query_one("#labels-notes", Input).value.strip()
        self.dismiss((name, notes))
