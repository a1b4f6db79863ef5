"""JSON and CSV export of scan results."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Literal

from ..models.host import Host

logger = logging.getLogger(__name__)

ExportFormat = Literal["json", "csv"]

CSV_HEADER = "ipAddress,hostname,isOnline,latencyMs,openPorts,displayName,notes,lastSeen"


def export_json(hosts: Iterable[Host]) -> str:
    """Serialize hosts as a JSON array with stable key order."""
    records = [host.model_dump(mode="json", by_alias=True) for host in hosts]
    return json.dumps(records, indent=2, sort_keys=True)


def _quote(value: str | None) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _csv_row(host: Host) -> str:
    latency = f"{host.latency_ms:.1f}" if host.latency_ms is not None else ""
    return ",".join(
        [
            host.ip_address,
            _quote(host.hostname),
            "true" if host.is_online else "false",
            latency,
            "|".join(str(p) for p in host.open_ports),
            _quote(host.display_name),
            _quote(host.notes),
            host.last_seen.isoformat(),
        ]
    )


def export_csv(hosts: Iterable[Host]) -> str:
    """Serialize hosts as CSV; free-text columns are always quoted."""
    lines = [CSV_HEADER]
    lines.extend(_csv_row(host) for host in hosts)
    return "\n".join(lines) + "\n"


def write_export(hosts: Iterable[Host], path: Path | str, fmt: ExportFormat | None = None) -> Path:
    """Write an export file, picking the format from the suffix if not given."""
    path = Path(path)
    if fmt is None:
        fmt = "csv" if path.suffix.lower() == ".csv" else "json"

    content = export_csv(hosts) if fmt == "csv" else export_json(hosts)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    logger.info(f"Exported {fmt.upper()} to {path}")
    return path
