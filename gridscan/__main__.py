"""Entry point for running the scanner as a module."""

import argparse
import asyncio
import atexit
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .models.config import Config
from .models.host import Host
from .models.profile import ScanProfile
from .services.exporter import write_export
from .services.scanner import ScanEngine

if TYPE_CHECKING:
    from .app import GridScanApp

# Global reference for signal handlers
_app: "GridScanApp | None" = None
_logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs")) -> None:
    """Configure logging with rotation support.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the rotating log file
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    try:
        log_dir.mkdir(exist_ok=True)
        # Rotate at 10MB, keep 5 backup files
        file_handler = RotatingFileHandler(
            log_dir / "gridscan.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        handlers.append(file_handler)
    except (PermissionError, OSError):
        pass  # Skip file logging if we can't write

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def _signal_handler(signum: int, frame: object) -> None:
    """Handle shutdown signals gracefully.

    Args:
        signum: Signal number received
        frame: Current stack frame (unused)
    """
    signal_name = signal.Signals(signum).name
    _logger.info(f"Received {signal_name}, shutting down gracefully...")

    if _app is not None:
        _app.exit()
    else:
        raise KeyboardInterrupt


def _cleanup() -> None:
    """Cleanup handler called on exit."""
    _logger.info("Grid Scan shutdown complete")


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful shutdown."""
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    atexit.register(_cleanup)


def format_host_line(host: Host) -> str:
    """One summary line per host for headless output."""
    marker = "new" if host.is_new else "changed" if host.has_changed else ""
    latency = f"{host.latency_ms:.0f}ms" if host.latency_ms is not None else "-"
    ports = ",".join(str(p) for p in host.open_ports) or "-"
    return f"{host.ip_address:<15} {host.title:<32} {host.device_type:<30} {latency:>6} {ports} {marker}".rstrip()


async def run_headless(config: Config, profile: ScanProfile | None, export: Path | None) -> int:
    """Run one sweep without the UI and print the results."""
    engine = ScanEngine.from_config(config)
    await engine.scan(profile)
    await engine.wait_until_settled()
    hosts = sorted(engine.hosts, key=lambda h: h.sort_key)

    print(f"{engine.active_subnet_description}: {len(hosts)} hosts ({engine.selected_profile.value} profile)")
    for host in hosts:
        print(format_host_line(host))

    if export is not None:
        try:
            write_export(hosts, export)
        except OSError as e:
            _logger.error(f"Export failed: {e}")
            return 1
    return 0


def main() -> None:
    """Main entry point."""
    global _app

    parser = argparse.ArgumentParser(
        description="Grid Scan - discover and characterize devices on the local subnet"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Path to configuration file (default: config.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )
    parser.add_argument(
        "--profile",
        choices=[p.value for p in ScanProfile],
        help="Port profile to scan with (default: from config)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run a single sweep without the UI and print results",
    )
    parser.add_argument(
        "--export",
        type=Path,
        help="With --headless, write results to this .json or .csv file",
    )

    args = parser.parse_args()

    if args.version:
        from . import __version__

        print(f"Grid Scan v{__version__}")
        sys.exit(0)

    try:
        config = Config.load_or_default(args.config)
    except (ValidationError, ValueError) as e:
        print(f"Invalid config file {args.config}: {e}")
        sys.exit(2)

    log_level = "DEBUG" if args.verbose else config.settings.log_level
    setup_logging(log_level)

    profile = ScanProfile(args.profile) if args.profile else None

    if args.headless:
        try:
            sys.exit(asyncio.run(run_headless(config, profile, args.export)))
        except KeyboardInterrupt:
            _logger.info("Interrupted")
            sys.exit(130)

    setup_signal_handlers()
    _logger.info("Starting Grid Scan")

    from .app import GridScanApp

    if profile is not None:
        config.scanner.default_profile = profile
    _app = GridScanApp(config=config)
    _app.run()


if __name__ == "__main__":
    main()
