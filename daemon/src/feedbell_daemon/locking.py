"""Daemon single-instance lock."""

import fcntl
import os
import sys
from pathlib import Path
from typing import Optional


class DaemonLock:
    """Prevents multiple daemon instances via fcntl file lock.

    Two daemons would each hold their own watermark cache and post every
    new item twice.
    """

    def __init__(self, pid_file: Optional[Path] = None):
        if pid_file is None:
            state_home = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local/state"))
            pid_file = Path(state_home) / "feedbell" / "daemon.pid"
        self.pid_file = pid_file
        self._handle = None

    def __enter__(self) -> "DaemonLock":
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self.pid_file, "w")
        try:
            fcntl.flock(self._handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            self._handle.close()
            self._handle = None
            sys.exit("Feedbell daemon already running")
        self._handle.write(str(os.getpid()))
        self._handle.flush()
        return self

    def __exit__(self, *_) -> None:
        if self._handle is not None:
            fcntl.flock(self._handle, fcntl.LOCK_UN)
            self._handle.close()
            self._handle = None
