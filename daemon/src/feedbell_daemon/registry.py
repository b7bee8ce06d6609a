"""Destination registry: which channel each subscribed server receives posts in."""

import json
import logging
import threading
from pathlib import Path
from typing import Dict

from .watermark import write_json_atomic

logger = logging.getLogger(__name__)


class DestinationRegistry:
    """JSON-backed mapping of server id to delivery channel id.

    At most one channel per server; registering again replaces it.
    """

    def __init__(self, path: Path):
        """Initialize the registry.

        Args:
            path: JSON file holding the mapping (parent directory is created)
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def snapshot(self) -> Dict[str, str]:
        """Return a point-in-time copy of all destinations."""
        with self._lock:
            return dict(self._load())

    def register(self, source_id: str, target_id: str) -> None:
        """Subscribe a server, replacing any previous channel."""
        with self._lock:
            destinations = self._load()
            destinations[source_id] = target_id
            write_json_atomic(self.path, destinations)
        logger.info(f"Registered destination {source_id} -> {target_id}")

    def unregister(self, source_id: str) -> bool:
        """Remove a server's subscription.

        Returns:
            True if a registration existed and was removed
        """
        with self._lock:
            destinations = self._load()
            if source_id not in destinations:
                return False
            del destinations[source_id]
            write_json_atomic(self.path, destinations)
        logger.info(f"Unregistered destination {source_id}")
        return True

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable destination registry {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed destination registry {self.path}")
            return {}
        return {str(key): str(value) for key, value in data.items()}
