"""
Run Store Service.

Keeps the history of plan runs as one JSON array (newest first) inside a
single named text blob. The blob lives in an injected key-value backend:
an in-memory dict for tests, or the `kv_store` table for the service.

Every mutation is a full load-modify-save cycle, so the persisted blob is
rewritten right after each insert or delete.
"""
import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.database_models import KeyValueEntry

logger = logging.getLogger(__name__)

DEFAULT_RUNS_KEY = "wm_runs"

CSV_COLUMNS = [
    ("Date", "date"),
    ("Crop", "crop"),
    ("Stage", "stage"),
    ("Area_ha", "areaHa"),
    ("ET0_mm_day", "et0"),
    ("Rain_mm", "rain"),
    ("ETc_mm", "etc"),
    ("Net_mm", "net"),
    ("Gross_L", "grossL"),
]


class RunIndexError(IndexError):
    """Raised when a delete targets an index outside the current history."""


class InMemoryKeyValueBackend:
    """Dict-backed text storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class SqlKeyValueBackend:
    """Text storage in the `kv_store` table, one session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            return entry.value if entry else None
        finally:
            db.close()

    def set_item(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                db.add(KeyValueEntry(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


@dataclass
class RunTableRow:
    """One rendered history row; `index` is only valid for this rendering."""
    index: int
    run: Dict[str, Any]
    cells: List[str]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class RunStore:
    """Append/list/delete of persisted runs plus CSV serialization."""

    def __init__(self, backend, key: str = DEFAULT_RUNS_KEY):
        self.backend = backend
        self.key = key

    def load_runs(self) -> List[Dict[str, Any]]:
        """Parse the persisted blob. Missing or corrupt data gives an empty history."""
        raw = self.backend.get_item(self.key)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Corrupt run history under '{self.key}', treating as empty: {e}")
            return []
        if not isinstance(rows, list):
            logger.warning(f"Run history under '{self.key}' is not a list, treating as empty")
            return []
        return rows

    def save_runs(self, rows: List[Dict[str, Any]]) -> None:
        self.backend.set_item(self.key, json.dumps(rows, separators=(",", ":"), ensure_ascii=False))

    def add_run(self, row: Dict[str, Any]) -> List[RunTableRow]:
        """Insert `row` as the newest run, persist, and return the new table view."""
        rows = self.load_runs()
        rows.insert(0, row)
        self.save_runs(rows)
        logger.info(f"Saved run for crop '{row.get('crop')}' ({len(rows)} runs stored)")
        return self.render_runs()

    def delete_run(self, index: int) -> List[RunTableRow]:
        """
        Remove the run at `index` of a freshly loaded history.

        Raises:
            RunIndexError: if index is outside [0, len(history))
        """
        rows = self.load_runs()
        if not 0 <= index < len(rows):
            raise RunIndexError(f"Run index {index} out of range (0..{len(rows) - 1})")
        del rows[index]
        self.save_runs(rows)
        logger.info(f"Deleted run {index} ({len(rows)} runs stored)")
        return self.render_runs()

    def clear_runs(self) -> None:
        self.save_runs([])
        logger.info("Cleared run history")

    def render_runs(self) -> List[RunTableRow]:
        """Rebuild the tabular view from the persisted history."""
        return [
            RunTableRow(
                index=idx,
                run=row if isinstance(row, dict) else {},
                cells=[_cell(row.get(field)) if isinstance(row, dict) else "" for _, field in CSV_COLUMNS],
            )
            for idx, row in enumerate(self.load_runs())
        ]

    def export_csv(self) -> str:
        """All runs as CSV text, header first, newest run first."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow([header for header, _ in CSV_COLUMNS])
        for row in self.load_runs():
            if not isinstance(row, dict):
                continue
            writer.writerow(["" if row.get(field) is None else row.get(field) for _, field in CSV_COLUMNS])
        return buffer.getvalue()
