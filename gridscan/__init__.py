"""Grid Scan - local subnet discovery and device characterization."""

__version__ = "0.3.0"
