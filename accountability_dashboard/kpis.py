"""
KPI computation functions — pure functions with no side effects.

Provides the completion rule, the free-text month classifier, per-sector
progress, delivery totals and coverage. Every view that needs "is this
(action, sector) pair done?" goes through ``is_complete``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .config import MONTH_TOKENS
from .models import ReportEntry, SectorConfig, StrategicAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectorProgress:
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class Coverage:
    achieved: int
    possible: int
    percentage: int


def round_half_up(value: float) -> int:
    """Round .5 upwards (12.5 -> 13), unlike the built-in banker's rounding."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    """Integer percentage; 0 when ``whole`` is 0."""
    if whole == 0:
        return 0
    return round_half_up(100 * part / whole)


# ---------------------------------------------------------------------------
# Completion rule
# ---------------------------------------------------------------------------

def is_active_entry(entry: Optional[ReportEntry]) -> bool:
    """True if the entry exists and was not explicitly marked inactive."""
    return entry is not None and entry.has_activities is not False


def is_complete(entry: Optional[ReportEntry]) -> bool:
    """Return whether an (action, sector) pair counts as done.

    Logic
    -----
    - no entry                        -> incomplete
    - has_activities is False         -> complete (declared non-participation)
    - active with >= 1 delivery       -> complete
    - active with no deliveries       -> incomplete
    """
    if entry is None:
        return False
    if entry.has_activities is False:
        return True
    return len(entry.deliveries) > 0


def has_report_content(entry: Optional[ReportEntry]) -> bool:
    """True if the entry belongs in a generated report (active, with deliveries)."""
    return is_active_entry(entry) and len(entry.deliveries) > 0


def find_entry(
    entries: Iterable[ReportEntry],
    action_id: str,
    sector_id: str,
) -> Optional[ReportEntry]:
    for entry in entries:
        if entry.action_id == action_id and entry.sector_id == sector_id:
            return entry
    return None


def entries_for_sector(entries: Iterable[ReportEntry], sector_id: str) -> list[ReportEntry]:
    return [e for e in entries if e.sector_id == sector_id]


# ---------------------------------------------------------------------------
# Month classifier
# ---------------------------------------------------------------------------

def classify_month(label: str) -> Optional[int]:
    """Best-effort month index (0-11) for a free-text date label.

    Substring match against the Portuguese month abbreviations or a
    ``/MM`` token, checked January to December; the first hit wins.
    'Mar/2025' -> 2, '15/03/2025' -> 2, 'unknown' -> None.
    """
    text = (label or "").lower()
    for idx, token in enumerate(MONTH_TOKENS):
        if token in text or f"/{idx + 1:02d}" in text:
            return idx
    return None


def monthly_distribution(entries: Iterable[ReportEntry]) -> list[int]:
    """Count deliveries per calendar month. Unclassifiable dates are dropped."""
    months = [0] * 12
    dropped = 0
    for entry in entries:
        if not is_active_entry(entry):
            continue
        for delivery in entry.deliveries:
            idx = classify_month(delivery.date)
            if idx is None:
                dropped += 1
                continue
            months[idx] += 1

    if dropped:
        logger.debug("%d deliveries with unrecognised dates left out of monthly distribution", dropped)
    return months


# ---------------------------------------------------------------------------
# Progress and totals
# ---------------------------------------------------------------------------

def sector_progress(
    entries: Sequence[ReportEntry],
    sector_id: str,
    actions: Sequence[StrategicAction],
) -> SectorProgress:
    """Completed actions out of ``actions`` for one sector.

    Callers pass the catalog they want counted (normally the active actions).
    """
    completed = sum(
        1 for action in actions
        if is_complete(find_entry(entries, action.id, sector_id))
    )
    total = len(actions)
    return SectorProgress(completed=completed, total=total, percentage=percentage(completed, total))


def delivery_count(entry: ReportEntry) -> int:
    """Deliveries that count towards totals: zero for inactive entries."""
    if not is_active_entry(entry):
        return 0
    return len(entry.deliveries)


def sector_delivery_total(entries: Iterable[ReportEntry], sector_id: str) -> int:
    return sum(delivery_count(e) for e in entries if e.sector_id == sector_id)


def action_delivery_total(entries: Iterable[ReportEntry], action_id: str) -> int:
    return sum(delivery_count(e) for e in entries if e.action_id == action_id)


def total_deliveries(entries: Iterable[ReportEntry]) -> int:
    return sum(delivery_count(e) for e in entries)


def active_entry_count(entries: Iterable[ReportEntry]) -> int:
    """Raw number of entries not marked inactive, regardless of deliveries."""
    return sum(1 for e in entries if is_active_entry(e))


def coverage(
    entries: Sequence[ReportEntry],
    actions: Sequence[StrategicAction],
    sectors: Sequence[SectorConfig],
    sector_id: Optional[str] = None,
) -> Coverage:
    """Completed (action, sector) obligations over possible obligations.

    With ``sector_id`` the denominator is ``len(actions)`` for that sector;
    without it, ``len(actions) * len(sectors)``. Both count a pair as achieved
    only when ``is_complete`` holds, so the sector figures sum to the overall one.
    """
    target_sectors = [sector_id] if sector_id is not None else [s.id for s in sectors]
    achieved = sum(
        sector_progress(entries, sid, actions).completed for sid in target_sectors
    )
    possible = len(actions) * len(target_sectors)
    return Coverage(achieved=achieved, possible=possible, percentage=percentage(achieved, possible))
