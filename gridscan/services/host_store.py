"""Host persistence for carrying labels and history between scans."""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from ..models.host import Host

logger = logging.getLogger(__name__)

DEFAULT_HOSTS_PATH = "hosts.json"
STORE_VERSION = 1


class HostStore:
    """Persists the host list to a JSON file.

    Writes go to a temporary file that replaces the target in one step, and
    all loads and saves are serialized, so a reader never sees a half-written
    document.
    """

    def __init__(self, path: Path | str = DEFAULT_HOSTS_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load(self) -> list[Host] | None:
        """Load hosts from file, or None if there is nothing readable."""
        with self._lock:
            if not self.path.exists():
                logger.debug(f"No hosts file at {self.path}")
                return None

            try:
                with open(self.path, encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                logger.error(f"Invalid JSON in hosts file: {e}")
                return None
            except OSError as e:
                logger.error(f"Error loading hosts: {e}")
                return None

        if not isinstance(data, dict) or not isinstance(data.get("hosts"), list):
            logger.error(f"Unexpected hosts file layout in {self.path}")
            return None

        hosts = []
        for entry in data["hosts"]:
            try:
                hosts.append(Host.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Invalid host entry: {e}")

        logger.debug(f"Loaded {len(hosts)} hosts")
        return hosts

    def save(self, hosts: Sequence[Host]) -> bool:
        """Save hosts to file. Transient flags are not written."""
        data = {
            "version": STORE_VERSION,
            "hosts": [host.model_dump(mode="json") for host in hosts],
        }

        with self._lock:
            tmp_name = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.path)
                tmp_name = None
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error saving hosts: {e}")
                return False
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

        logger.debug(f"Saved {len(hosts)} hosts")
        return True

    def clear(self) -> None:
        """Forget every stored host."""
        with self._lock:
            self.path.unlink(missing_ok=True)
