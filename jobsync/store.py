import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple

from jobsync.parsers.base import JobRecord


class UpsertResult(NamedTuple):
    is_new: bool
    changed: bool


def utc_now() -> str:
    """Current time as an ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def write_json_atomic(path: Path, obj: Any) -> None:
    """
    Write JSON to path so readers see either the old or the new file.

    The data goes to a temporary file in the same directory, is fsynced,
    then renamed over the target.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class IndexStore:
    """
    Durable id -> entry table.

    An entry is a JobRecord's fields plus created_at and updated_at.
    Entries are created on first observation and merged in place on every
    later one; nothing is ever removed.
    """

    def __init__(self, path: Path, entries: dict[str, dict[str, Any]] | None = None):
        self.path = Path(path)
        self._entries: dict[str, dict[str, Any]] = entries or {}

    @classmethod
    def load(cls, path: Path) -> "IndexStore":
        """Load a persisted index. Missing or unreadable files give an empty index."""
        path = Path(path)
        if not path.exists():
            return cls(path)

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"[WARN] Could not read {path}, starting with an empty index: {e}")
            return cls(path)

        if not raw.strip():
            return cls(path)

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"[WARN] Corrupt index at {path}, starting with an empty index: {e}")
            return cls(path)

        if not isinstance(data, dict):
            print(f"[WARN] Index at {path} is not a JSON object, starting with an empty index")
            return cls(path)

        entries = {k: v for k, v in data.items() if k and isinstance(v, dict)}
        return cls(path, entries)

    def upsert(self, record: JobRecord, observed_at: str) -> UpsertResult:
        """
        Insert or merge one observation.

        Every field except id and created_at takes the new observation's
        value and updated_at becomes observed_at. changed is always True;
        fields are not diffed.
        """
        if not record.id:
            raise ValueError("Cannot index a record with an empty id")

        existing = self._entries.get(record.id)
        if existing is None:
            self._entries[record.id] = {
                **record.to_dict(),
                "created_at": observed_at,
                "updated_at": observed_at,
            }
            return UpsertResult(is_new=True, changed=True)

        self._entries[record.id] = {
            **existing,
            **record.to_dict(),
            "created_at": existing.get("created_at") or observed_at,
            "updated_at": observed_at,
        }
        return UpsertResult(is_new=False, changed=True)

    def save(self) -> None:
        """Commit the full index to disk atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_json_atomic(self.path, self._entries)

    def entries(self) -> list[dict[str, Any]]:
        return list(self._entries.values())

    def get(self, job_id: str) -> dict[str, Any] | None:
        return self._entries.get(job_id)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
