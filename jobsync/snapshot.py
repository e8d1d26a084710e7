import csv
import io
import json
from pathlib import Path
from typing import Any

from jobsync.config import SNAPSHOT_CSV_FILE, SNAPSHOT_JSON_FILE
from jobsync.store import IndexStore, write_json_atomic

CSV_COLUMNS = [
    "id",
    "company",
    "job_title",
    "job_url",
    "apply_url",
    "company_site",
    "location",
    "experience",
    "posted",
    "posted_age_days",
    "company_size",
    "funding_tags",
    "industries",
    "what_they_do",
    "logo",
    "created_at",
    "updated_at",
    "source",
]

# Multi-valued columns, stored as JSON text inside one cell
LIST_COLUMNS = {"funding_tags", "industries"}


def _cell(entry: dict[str, Any], column: str) -> str:
    value = entry.get(column)
    if column in LIST_COLUMNS:
        return json.dumps(value or [], ensure_ascii=False)
    if value is None:
        return ""
    return str(value)


def build_csv(entries: list[dict[str, Any]]) -> str:
    """Render index entries as CSV text with a fixed column order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for entry in entries:
        writer.writerow([_cell(entry, column) for column in CSV_COLUMNS])
    return buffer.getvalue()


def write_snapshots(store: IndexStore, out_dir: Path) -> tuple[Path, Path]:
    """Write jobs.json and jobs.csv views of the full index."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    entries = store.entries()

    json_path = out_dir / SNAPSHOT_JSON_FILE
    write_json_atomic(json_path, entries)

    csv_path = out_dir / SNAPSHOT_CSV_FILE
    csv_path.write_text(build_csv(entries), encoding="utf-8")

    return json_path, csv_path
