import json
import os
import threading
import fcntl
from datetime import datetime, timezone
from typing import Any, Dict

SERVICE_NAME = "logstats"
SCHEMA_VERSION = 1


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonlLogger:
    """
    Append-only JSON Lines event log. Each event is one line; appends hold
    an exclusive flock so several processes can share a file.
    """

    def __init__(self, filepath: str, service: str = SERVICE_NAME, fsync: bool = False) -> None:
        self.filepath = filepath
        self.service = service
        self.fsync = fsync
        self._lock = threading.Lock()

    def _ensure_directory(self) -> None:
        directory = os.path.dirname(self.filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def log(self, event: Dict[str, Any]) -> None:
        event.setdefault("timestamp", utc_now_iso())
        event.setdefault("service", self.service)
        event.setdefault("schema_version", SCHEMA_VERSION)

        line = (json.dumps(event, ensure_ascii=False, default=str) + "\n").encode("utf-8")

        # the file is created on first write, not at construction
        self._ensure_directory()
        with self._lock, open(self.filepath, "ab") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(line)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def event(self, event_type: str, **fields: Any) -> None:
        self.log({"event_type": event_type, **fields})
