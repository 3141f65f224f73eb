"""
Summary workbook export (openpyxl).

Sheets
------
- Visão Geral      per-sector progress and delivery totals
- Ranking Setores  active sectors by delivery total
- Ranking Ações    actions by delivery total
- Entregas         every reportable delivery
- Ritmo Mensal     monthly delivery distribution
"""

import io
import logging
from typing import Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..config import MONTH_LABELS
from ..dashboard import action_ranking, get_overview_table, sector_ranking
from ..kpis import has_report_content, monthly_distribution
from ..models import AppConfig, ReportEntry, SectorConfig, StrategicAction
from ..transforms import build_fact_delivery

logger = logging.getLogger(__name__)

_HEADER_FILL = PatternFill("solid", fgColor="003B71")
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_TITLE_FONT = Font(bold=True, size=14, color="003B71")
_MAX_COL_WIDTH = 60


def _write_sheet(ws, title: str, df: pd.DataFrame, headers: dict[str, str]) -> None:
    """Title row, blank row, then a styled header and the DataFrame rows."""
    ws.append([title])
    ws["A1"].font = _TITLE_FONT
    ws.append([])

    columns = list(headers)
    ws.append([headers[c] for c in columns])
    for cell in ws[3]:
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")

    for record in df[columns].itertuples(index=False):
        ws.append([None if pd.isna(v) else v for v in record])

    for idx, column in enumerate(columns, start=1):
        values = [str(headers[column])] + [str(v) for v in df[column].tolist()]
        width = min(max(len(v) for v in values) + 2, _MAX_COL_WIDTH)
        ws.column_dimensions[get_column_letter(idx)].width = width


def build_summary_workbook(
    entries: Sequence[ReportEntry],
    sectors: Sequence[SectorConfig],
    actions: Sequence[StrategicAction],
    config: AppConfig,
    year: int,
) -> Workbook:
    wb = Workbook()
    heading = f"{config.sub_department_name} — Prestação de Contas {year}"

    ws = wb.active
    ws.title = "Visão Geral"
    _write_sheet(ws, heading, get_overview_table(entries, sectors, actions), {
        "short_name": "Setor",
        "name": "Nome",
        "completed": "Ações Concluídas",
        "total": "Total de Ações",
        "percentage": "Progresso (%)",
        "deliveries": "Entregas",
    })

    _write_sheet(wb.create_sheet("Ranking Setores"), heading, sector_ranking(entries, sectors), {
        "rank": "Posição",
        "short_name": "Setor",
        "deliveries": "Entregas",
    })

    _write_sheet(wb.create_sheet("Ranking Ações"), heading, action_ranking(entries, actions), {
        "rank": "Posição",
        "action_id": "Ação",
        "title": "Título",
        "deliveries": "Entregas",
    })

    reportable = [e for e in entries if has_report_content(e)]
    _write_sheet(wb.create_sheet("Entregas"), heading, build_fact_delivery(reportable), {
        "action_id": "Ação",
        "sector_id": "Setor",
        "position": "Nº",
        "title": "Entrega",
        "date": "Período/Data",
        "attachment_count": "Anexos",
    })

    months = pd.DataFrame({"month": list(MONTH_LABELS), "deliveries": monthly_distribution(entries)})
    _write_sheet(wb.create_sheet("Ritmo Mensal"), heading, months, {
        "month": "Mês",
        "deliveries": "Entregas",
    })

    logger.info("Built summary workbook for %d with %d reportable entries", year, len(reportable))
    return wb


def to_bytes(wb: Workbook) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
