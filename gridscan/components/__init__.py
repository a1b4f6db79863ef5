"""UI components for the scanner."""

from .hosts_panel import HostsPanel
from .labels_screen import LabelsScreen
from .status_bar import StatusBar

__all__ = ["HostsPanel", "LabelsScreen", "StatusBar"]
