import json
from pathlib import Path

from jobsync.parsers.base import JobRecord


class EventLog:
    """
    Append-only JSON Lines log of every observation.

    Each line is {"observed_at": ..., <record fields>}. The file is only
    ever opened in append mode, so earlier runs are never rewritten.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._file = None

    def __enter__(self) -> "EventLog":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def append(self, record: JobRecord, observed_at: str) -> None:
        if self._file is None:
            raise RuntimeError(f"Event log {self.path} is not open")
        event = {"observed_at": observed_at, **record.to_dict()}
        self._file.write(json.dumps(event, ensure_ascii=False) + "\n")
        self._file.flush()
