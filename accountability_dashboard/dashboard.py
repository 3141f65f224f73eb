"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end and the
report exporters. Each function returns plain dicts or DataFrames suitable
for rendering cards, charts, and tables.
"""

import logging
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from .config import MONTH_LABELS
from .kpis import (
    active_entry_count,
    coverage,
    entries_for_sector,
    find_entry,
    has_report_content,
    is_complete,
    monthly_distribution,
    sector_progress,
    total_deliveries,
)
from .models import (
    Deadlines,
    NavigationTarget,
    ReportEntry,
    SectorConfig,
    SectorView,
    StrategicAction,
)
from .registry import active_actions, active_sectors
from .transforms import build_dim_action, build_dim_sector, build_fact_delivery, build_fact_evidence

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------

def sector_ranking(
    entries: Sequence[ReportEntry],
    sectors: Sequence[SectorConfig],
) -> pd.DataFrame:
    """Active sectors ordered by delivery total, most first.

    Ties keep registry order (stable sort), so the rank shown for equal
    totals is the same on every run.

    Returns
    -------
    DataFrame with columns:
        rank, sector_id, short_name, name, color, deliveries
    """
    dim = build_dim_sector(active_sectors(sectors))
    facts = build_fact_delivery(entries)
    totals = facts.groupby("sector_id").size().rename("deliveries")

    ranking = dim.merge(totals, left_on="sector_id", right_index=True, how="left")
    ranking["deliveries"] = ranking["deliveries"].fillna(0).astype(int)
    ranking = ranking.sort_values(["deliveries"], ascending=False, kind="stable").reset_index(drop=True)
    ranking.insert(0, "rank", range(1, len(ranking) + 1))

    return ranking[["rank", "sector_id", "short_name", "name", "color", "deliveries"]]


def action_ranking(
    entries: Sequence[ReportEntry],
    actions: Sequence[StrategicAction],
) -> pd.DataFrame:
    """Catalog actions ordered by delivery total across all sectors, most first.

    Returns
    -------
    DataFrame with columns:
        rank, action_id, title, deliveries
    """
    dim = build_dim_action(actions)
    facts = build_fact_delivery(entries)
    totals = facts.groupby("action_id").size().rename("deliveries")

    ranking = dim.merge(totals, left_on="action_id", right_index=True, how="left")
    ranking["deliveries"] = ranking["deliveries"].fillna(0).astype(int)
    ranking = ranking.sort_values(["deliveries"], ascending=False, kind="stable").reset_index(drop=True)
    ranking.insert(0, "rank", range(1, len(ranking) + 1))

    return ranking[["rank", "action_id", "title", "deliveries"]]


# ---------------------------------------------------------------------------
# Overview and stats
# ---------------------------------------------------------------------------

def get_overview_table(
    entries: Sequence[ReportEntry],
    sectors: Sequence[SectorConfig],
    actions: Sequence[StrategicAction],
) -> pd.DataFrame:
    """Per-sector fill-in progress and delivery totals, in registry order.

    ``actions`` is the catalog counted for progress (normally the active
    actions of the selected year).

    Returns
    -------
    DataFrame with columns:
        sector_id, short_name, name, completed, total, percentage, deliveries
    """
    columns = ["sector_id", "short_name", "name", "completed", "total", "percentage", "deliveries"]
    ranking = sector_ranking(entries, sectors).set_index("sector_id")

    rows = []
    for sector in active_sectors(sectors):
        progress = sector_progress(entries, sector.id, actions)
        rows.append({
            "sector_id": sector.id,
            "short_name": sector.short_name,
            "name": sector.name,
            "completed": progress.completed,
            "total": progress.total,
            "percentage": progress.percentage,
            "deliveries": int(ranking.loc[sector.id, "deliveries"]),
        })

    return pd.DataFrame(rows, columns=columns)


def get_stats_summary(
    entries: Sequence[ReportEntry],
    sectors: Sequence[SectorConfig],
    actions: Sequence[StrategicAction],
    target: NavigationTarget,
) -> dict:
    """Numbers for the three stats cards (volume, coverage, monthly rhythm).

    For a SectorView only that sector's entries are analysed; any other
    target analyses the whole working set against all active sectors.

    Returns
    -------
    Dict with structure:
    {
        "scope": "sector" | "overview",
        "total_deliveries": 12,
        "active_entries": 7,
        "coverage": {"achieved": 9, "possible": 30, "percentage": 30},
        "months": [0, 1, 4, ...],        # 12 values
        "month_labels": ["Jan", ...],
        "max_monthly": 4,
    }
    """
    active = active_actions(actions)
    if isinstance(target, SectorView):
        scoped = entries_for_sector(entries, target.sector_id)
        cov = coverage(entries, active, sectors, sector_id=target.sector_id)
        scope = "sector"
    else:
        scoped = list(entries)
        cov = coverage(entries, active, active_sectors(sectors))
        scope = "overview"

    months = monthly_distribution(scoped)
    return {
        "scope": scope,
        "total_deliveries": total_deliveries(scoped),
        "active_entries": active_entry_count(scoped),
        "coverage": {
            "achieved": cov.achieved,
            "possible": cov.possible,
            "percentage": cov.percentage,
        },
        "months": months,
        "month_labels": list(MONTH_LABELS),
        "max_monthly": max(months) or 1,
    }


def get_sector_cards(
    entries: Sequence[ReportEntry],
    sector_id: str,
    actions: Sequence[StrategicAction],
) -> list[dict]:
    """One card per action for the sector management grid."""
    cards = []
    for action in actions:
        entry = find_entry(entries, action.id, sector_id)
        cards.append({
            "action": action,
            "entry": entry,
            "has_activities": entry is None or entry.has_activities is not False,
            "delivery_count": len(entry.deliveries) if entry else 0,
            "is_complete": is_complete(entry),
        })
    return cards


# ---------------------------------------------------------------------------
# Report content
# ---------------------------------------------------------------------------

def get_report_sections(
    entries: Sequence[ReportEntry],
    sector_id: str,
    actions: Sequence[StrategicAction],
) -> list[dict]:
    """Actions with reportable content for one sector, in catalog order.

    Inactive or empty entries never appear.

    Returns
    -------
    List of {"action": StrategicAction, "entry": ReportEntry,
             "deliveries": [{"number": "3.1", "item": DeliveryItem}, ...]}
    """
    sections = []
    for action in actions:
        entry = find_entry(entries, action.id, sector_id)
        if not has_report_content(entry):
            continue
        sections.append({
            "action": action,
            "entry": entry,
            "deliveries": [
                {"number": f"{action.id}.{idx}", "item": delivery}
                for idx, delivery in enumerate(entry.deliveries, start=1)
            ],
        })
    return sections


def get_evidence_table(
    entries: Sequence[ReportEntry],
    sector_id: Optional[str],
    actions: Sequence[StrategicAction],
) -> pd.DataFrame:
    """Annex listing every attached file, ordered by the action catalog.

    Returns
    -------
    DataFrame with columns:
        action_id, sector_id, delivery_title, file_name
    """
    scoped = entries_for_sector(entries, sector_id) if sector_id is not None else list(entries)
    evidence = build_fact_evidence(scoped)
    order = {a.id: idx for idx, a in enumerate(actions)}
    evidence = evidence[evidence["action_id"].isin(list(order))].copy()
    evidence["_order"] = evidence["action_id"].map(order)
    evidence = evidence.sort_values("_order", kind="stable").reset_index(drop=True)
    return evidence[["action_id", "sector_id", "delivery_title", "file_name"]]


# ---------------------------------------------------------------------------
# Deadlines
# ---------------------------------------------------------------------------

def _days_until(value: str, today: date) -> Optional[int]:
    if not value:
        return None
    try:
        return (date.fromisoformat(value) - today).days
    except ValueError:
        logger.warning("Could not parse deadline value: %s", value)
        return None


def get_deadline_status(deadlines: Deadlines, today: Optional[date] = None) -> Optional[dict]:
    """Countdown for the banner, or None when the banner is switched off.

    Returns
    -------
    {"sector_days": 12, "final_days": 30, "sector_deadline": "...", "final_deadline": "..."}
    Days are None when the deadline is unset or unparsable; negative once past.
    """
    if not deadlines.show_banner:
        return None
    today = today or date.today()
    return {
        "sector_deadline": deadlines.sector_deadline,
        "final_deadline": deadlines.final_deadline,
        "sector_days": _days_until(deadlines.sector_deadline, today),
        "final_days": _days_until(deadlines.final_deadline, today),
    }
