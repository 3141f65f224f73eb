"""
Local persistence: one JSON document per storage key.

Report entries are partitioned by fiscal year (key ``report_{year}``); the
app identity, the sector registry and the strategic-action registry each
live in their own non-partitioned document.

A document that fails to parse is logged and read as the default value.
The file itself is left on disk as it was, so it can be recovered by hand.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from .config import REPORT_KEY_TEMPLATE
from .models import ReportEntry

logger = logging.getLogger(__name__)


class JsonStore:
    """Key -> JSON value persistence rooted at ``base_dir``."""

    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def read(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if missing or unparsable."""
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError):
            logger.exception("Failed to read stored document '%s', using default", key)
            return default

    def write(self, key: str, value: Any) -> None:
        """Replace the stored value atomically (temp file + rename)."""
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()


def report_key(year: int) -> str:
    return REPORT_KEY_TEMPLATE.format(year=int(year))


def upsert_entry(entries: Iterable[ReportEntry], entry: ReportEntry) -> list[ReportEntry]:
    """Return a new list with any entry for the same (action, sector) replaced by ``entry``.

    The candidate is appended at the end, so applying the same entry twice
    yields the same list as applying it once.
    """
    kept = [e for e in entries if e.key != entry.key]
    kept.append(entry)
    return kept


def parse_entries(raw: Any) -> list[ReportEntry]:
    """Build ReportEntry objects from a stored partition, skipping bad records."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Stored partition is not a list (%s), treating as empty", type(raw).__name__)
        return []

    entries = []
    for idx, record in enumerate(raw):
        try:
            entries.append(ReportEntry.from_dict(record))
        except (KeyError, TypeError, AttributeError):
            logger.warning("Skipping malformed report entry at position %d", idx)
    return entries


class EntryStore:
    """Year-partitioned persistence of report entries."""

    def __init__(self, store: JsonStore):
        self.store = store

    def load(self, year: int) -> list[ReportEntry]:
        entries = parse_entries(self.store.read(report_key(year)))
        logger.info("Loaded %d report entries for %d", len(entries), year)
        return entries

    def save(self, year: int, entries: Iterable[ReportEntry]) -> None:
        """Overwrite the whole partition for ``year``."""
        payload = [e.to_dict() for e in entries]
        self.store.write(report_key(year), payload)
        logger.debug("Saved %d report entries for %d", len(payload), year)

    def upsert(self, year: int, entry: ReportEntry) -> list[ReportEntry]:
        """Replace-or-append ``entry`` in the partition and return the new partition."""
        entries = upsert_entry(self.load(year), entry)
        self.save(year, entries)
        return entries

    def find(self, year: int, action_id: str, sector_id: str) -> ReportEntry | None:
        for entry in self.load(year):
            if entry.key == (action_id, sector_id):
                return entry
        return None
