"""
Data transforms: flatten the report working set into long pandas tables.

fact_entry    : one row per (action, sector) entry
fact_delivery : one row per delivery of an active entry
fact_evidence : one row per attached file of a reportable delivery
"""

import logging
from typing import Iterable, Sequence

import pandas as pd

from .kpis import classify_month, delivery_count, has_report_content, is_complete
from .models import ReportEntry, SectorConfig, StrategicAction

logger = logging.getLogger(__name__)

FACT_ENTRY_COLUMNS = [
    "action_id", "sector_id", "has_activities", "delivery_count",
    "is_complete", "last_updated",
]
FACT_DELIVERY_COLUMNS = [
    "action_id", "sector_id", "position", "delivery_id", "title", "date",
    "month_index", "attachment_count",
]
FACT_EVIDENCE_COLUMNS = ["action_id", "sector_id", "delivery_title", "file_name", "size", "mime_type"]


def build_fact_entry(entries: Iterable[ReportEntry]) -> pd.DataFrame:
    """One row per report entry with its completion state.

    Returns
    -------
    DataFrame with columns:
        action_id, sector_id, has_activities, delivery_count, is_complete,
        last_updated
    """
    rows = [
        {
            "action_id": e.action_id,
            "sector_id": e.sector_id,
            "has_activities": e.has_activities,
            "delivery_count": delivery_count(e),
            "is_complete": is_complete(e),
            "last_updated": e.last_updated,
        }
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=FACT_ENTRY_COLUMNS)
    logger.info("Built fact_entry with %d rows", len(df))
    return df


def build_fact_delivery(entries: Iterable[ReportEntry]) -> pd.DataFrame:
    """One row per delivery, skipping entries marked inactive.

    ``month_index`` is the heuristic month (0-11) or NA when the free-text
    date could not be classified.
    """
    rows = []
    for entry in entries:
        if delivery_count(entry) == 0:
            continue
        for position, delivery in enumerate(entry.deliveries, start=1):
            rows.append({
                "action_id": entry.action_id,
                "sector_id": entry.sector_id,
                "position": position,
                "delivery_id": delivery.id,
                "title": delivery.title,
                "date": delivery.date,
                "month_index": classify_month(delivery.date),
                "attachment_count": len(delivery.attachments),
            })

    df = pd.DataFrame(rows, columns=FACT_DELIVERY_COLUMNS)
    df["month_index"] = df["month_index"].astype("Int64")
    logger.info("Built fact_delivery with %d rows", len(df))
    return df


def build_fact_evidence(entries: Iterable[ReportEntry]) -> pd.DataFrame:
    """One row per file attached to a delivery that would appear in a report."""
    rows = []
    for entry in entries:
        if not has_report_content(entry):
            continue
        for delivery in entry.deliveries:
            for attachment in delivery.attachments:
                rows.append({
                    "action_id": entry.action_id,
                    "sector_id": entry.sector_id,
                    "delivery_title": delivery.title,
                    "file_name": attachment.name,
                    "size": attachment.size,
                    "mime_type": attachment.mime_type,
                })
    return pd.DataFrame(rows, columns=FACT_EVIDENCE_COLUMNS)


def build_dim_sector(sectors: Sequence[SectorConfig]) -> pd.DataFrame:
    """Sector dimension with its registry order preserved in ``order``."""
    return pd.DataFrame(
        [
            {
                "order": idx,
                "sector_id": s.id,
                "short_name": s.short_name,
                "name": s.name,
                "color": s.color,
                "is_active": s.is_active,
            }
            for idx, s in enumerate(sectors)
        ],
        columns=["order", "sector_id", "short_name", "name", "color", "is_active"],
    )


def build_dim_action(actions: Sequence[StrategicAction]) -> pd.DataFrame:
    """Action dimension with catalog order preserved in ``order``."""
    return pd.DataFrame(
        [
            {
                "order": idx,
                "action_id": a.id,
                "title": a.title,
                "start_year": a.start_year,
                "end_year": a.end_year,
                "responsible": a.responsible,
                "is_active": a.is_active,
            }
            for idx, a in enumerate(actions)
        ],
        columns=["order", "action_id", "title", "start_year", "end_year", "responsible", "is_active"],
    )
