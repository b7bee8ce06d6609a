"""Per-source watermark persistence."""

import hashlib
import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from .models import Watermark

logger = logging.getLogger(__name__)


class WatermarkWriteError(Exception):
    """Raised when a watermark record could not be persisted."""


def write_json_atomic(path: Path, data: dict) -> None:
    """Write JSON to a temp file beside ``path`` and rename it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class WatermarkStore:
    """Stores the last seen identifier for each source.

    One JSON record per source key inside ``state_dir``. Records are cached
    in memory after the first read; the cache only changes once a write has
    reached disk.
    """

    def __init__(self, state_dir: Path):
        """Initialize the store.

        Args:
            state_dir: Directory holding one JSON file per source (created if missing)
        """
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self._cache: Dict[str, Optional[Watermark]] = {}

    def path_for(self, source_key: str) -> Path:
        """Return the record path for a source key."""
        slug = re.sub(r"[^A-Za-z0-9._-]+", "_", source_key).strip("_")[:60]
        digest = hashlib.sha256(source_key.encode()).hexdigest()[:12]
        return self.state_dir / f"{slug}-{digest}.json"

    def get(self, source_key: str) -> Optional[Watermark]:
        """Return the full watermark record, or None if there is none."""
        if source_key not in self._cache:
            self._cache[source_key] = self._read(source_key)
        return self._cache[source_key]

    def load(self, source_key: str) -> Optional[str]:
        """Return the last seen identifier for a source, or None."""
        watermark = self.get(source_key)
        return watermark.last_seen_id if watermark else None

    def save(self, source_key: str, last_seen_id: str) -> Watermark:
        """Persist a new watermark for a source.

        Raises:
            WatermarkWriteError: If the record could not be written. The
                cached value is left unchanged.
        """
        watermark = Watermark(
            source=source_key,
            last_seen_id=last_seen_id,
            updated_at=datetime.now(timezone.utc),
        )
        path = self.path_for(source_key)

        try:
            write_json_atomic(path, watermark.to_dict())
        except OSError as e:
            raise WatermarkWriteError(
                f"Failed to write watermark for {source_key} to {path}: {e}"
            ) from e

        self._cache[source_key] = watermark
        logger.debug(f"Saved watermark for {source_key}: {last_seen_id}")
        return watermark

    def _read(self, source_key: str) -> Optional[Watermark]:
        path = self.path_for(source_key)
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return Watermark.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            # Corrupt record counts as no watermark
            logger.warning(f"Ignoring unreadable watermark {path}: {e}")
            return None
