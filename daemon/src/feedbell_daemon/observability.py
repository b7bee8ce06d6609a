"""Observability logging for Feedbell daemon - JSONL event tracking."""

import fcntl
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class EventLog:
    """Process-safe JSONL event log, one file per day."""

    def __init__(self, base_dir: Path | None = None):
        """Initialize the event log.

        Args:
            base_dir: Directory for JSONL files. Defaults to
                $XDG_STATE_HOME/feedbell/events (or ~/.local/state/feedbell/events)
        """
        if base_dir is None:
            state_home = os.environ.get(
                "XDG_STATE_HOME", str(Path.home() / ".local" / "state")
            )
            base_dir = Path(state_home) / "feedbell" / "events"

        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, **metadata: Any) -> None:
        """Append an event to today's JSONL file.

        Never raises: failures are reported on stderr and dropped.

        Args:
            event: Event name (e.g., "feed.poll.complete", "delivery.error")
            **metadata: Additional event metadata
        """
        now = datetime.now(timezone.utc)
        log_file = self.base_dir / f"{now.strftime('%Y-%m-%d')}_events.jsonl"
        entry = {"ts": now.isoformat(), "event": event, **metadata}

        try:
            with open(log_file, "a") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(json.dumps(entry, default=str) + "\n")
                    f.flush()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except Exception as e:
            print(f"[Observability] Error logging event '{event}': {e}", file=sys.stderr)


_event_log: EventLog | None = None


def get_event_log() -> EventLog:
    """Get global event log instance (singleton pattern)."""
    global _event_log
    if _event_log is None:
        _event_log = EventLog()
    return _event_log


def log(event: str, **metadata: Any) -> None:
    """Convenience function to log events using the global event log.

    Usage:
        from feedbell_daemon.observability import log
        log("feed.poll.complete", source="rss:https://example.com/feed", new_items=2)
    """
    try:
        get_event_log().log(event, **metadata)
    except OSError as e:
        # Event directory could not be created
        print(f"[Observability] Event log unavailable: {e}", file=sys.stderr)
