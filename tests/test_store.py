"""
Tests for the index store and event log.

Validates the created/updated lifecycle, tolerant loading and atomic
persistence of index.json.
"""
import json

import pytest

from jobsync import store as store_module
from jobsync.events import EventLog
from jobsync.parsers.base import JobRecord
from jobsync.store import IndexStore, write_json_atomic

T1 = "2026-01-01T00:00:00+00:00"
T2 = "2026-01-02T00:00:00+00:00"


def job(job_id="https://example.com/jobs/1", **fields):
    return JobRecord(id=job_id, job_url=job_id, **fields)


class TestUpsert:
    def test_first_observation_creates_entry(self, tmp_path):
        store = IndexStore(tmp_path / "index.json")
        result = store.upsert(job(company="Acme"), T1)

        assert result.is_new
        assert result.changed
        entry = store.get("https://example.com/jobs/1")
        assert entry["created_at"] == T1
        assert entry["updated_at"] == T1
        assert entry["company"] == "Acme"

    def test_later_observation_merges_in_place(self, tmp_path):
        store = IndexStore(tmp_path / "index.json")
        store.upsert(job(company="Acme", job_title="Engineer", posted_age_days=0), T1)
        result = store.upsert(job(company="Acme Inc", job_title="Senior Engineer", posted_age_days=1), T2)

        assert not result.is_new
        assert result.changed
        assert len(store) == 1
        entry = store.get("https://example.com/jobs/1")
        assert entry["created_at"] == T1
        assert entry["updated_at"] == T2
        assert entry["company"] == "Acme Inc"
        assert entry["job_title"] == "Senior Engineer"
        assert entry["posted_age_days"] == 1

    def test_identical_observation_still_reports_changed(self, tmp_path):
        store = IndexStore(tmp_path / "index.json")
        store.upsert(job(), T1)
        assert store.upsert(job(), T2).changed

    def test_extra_persisted_keys_survive_merge(self, tmp_path):
        store = IndexStore(tmp_path / "index.json", {
            "https://example.com/jobs/1": {"id": "https://example.com/jobs/1", "note": "keep",
                                           "created_at": T1, "updated_at": T1},
        })
        store.upsert(job(), T2)
        assert store.get("https://example.com/jobs/1")["note"] == "keep"

    def test_empty_id_is_rejected(self, tmp_path):
        store = IndexStore(tmp_path / "index.json")
        with pytest.raises(ValueError):
            store.upsert(job(job_id=""), T1)
        assert len(store) == 0


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path):
        assert len(IndexStore.load(tmp_path / "index.json")) == 0

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text("   ", encoding="utf-8")
        assert len(IndexStore.load(path)) == 0

    @pytest.mark.parametrize("content", ['{"truncated": ', "[1, 2, 3]", "not json"])
    def test_corrupt_file_is_empty(self, tmp_path, content):
        path = tmp_path / "index.json"
        path.write_text(content, encoding="utf-8")
        assert len(IndexStore.load(path)) == 0

    def test_invalid_utf8_file_is_empty(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_bytes(b'{"a": "\xff\xfe truncated')
        assert len(IndexStore.load(path)) == 0

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "index.json"
        store = IndexStore(path)
        store.upsert(job(company="Acme", industries=["AI"]), T1)
        store.save()

        loaded = IndexStore.load(path)
        assert len(loaded) == 1
        entry = loaded.get("https://example.com/jobs/1")
        assert entry["company"] == "Acme"
        assert entry["industries"] == ["AI"]
        assert entry["created_at"] == T1

    def test_reload_continues_lifecycle(self, tmp_path):
        """A later run keeps created_at from the committed index."""
        path = tmp_path / "index.json"
        first = IndexStore(path)
        first.upsert(job(), T1)
        first.save()

        second = IndexStore.load(path)
        assert not second.upsert(job(), T2).is_new
        assert second.get("https://example.com/jobs/1")["created_at"] == T1


class TestAtomicWrite:
    def test_failed_rename_keeps_previous_index(self, tmp_path, monkeypatch):
        """A crash between temp write and rename leaves the old file intact."""
        path = tmp_path / "index.json"
        store = IndexStore(path)
        store.upsert(job(), T1)
        store.save()
        before = path.read_text(encoding="utf-8")

        store.upsert(job("https://example.com/jobs/2"), T2)

        def crash(src, dst):
            raise OSError("simulated crash")

        monkeypatch.setattr(store_module.os, "replace", crash)
        with pytest.raises(OSError):
            store.save()

        assert path.read_text(encoding="utf-8") == before
        assert len(json.loads(before)) == 1
        # No temp files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["index.json"]

    def test_write_json_atomic_replaces_content(self, tmp_path):
        path = tmp_path / "data.json"
        write_json_atomic(path, {"a": 1})
        write_json_atomic(path, {"b": "ü"})
        assert json.loads(path.read_text(encoding="utf-8")) == {"b": "ü"}


class TestEventLog:
    def test_appends_every_observation(self, tmp_path):
        path = tmp_path / "jobs.jsonl"
        with EventLog(path) as events:
            events.append(job(company="Acme"), T1)
            events.append(job(company="Acme"), T2)

        with EventLog(path) as events:
            events.append(job(company="Acme Inc"), T2)

        lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert len(lines) == 3
        assert [e["observed_at"] for e in lines] == [T1, T2, T2]
        assert lines[2]["company"] == "Acme Inc"
        assert all(e["id"] == "https://example.com/jobs/1" for e in lines)
        assert list(lines[0])[0] == "observed_at"

    def test_append_requires_open_log(self, tmp_path):
        with pytest.raises(RuntimeError):
            EventLog(tmp_path / "jobs.jsonl").append(job(), T1)
