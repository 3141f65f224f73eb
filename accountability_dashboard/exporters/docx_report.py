"""
Printable accountability report as a Word document (python-docx).

Layout
------
- Institutional header (logo when configured, institution / department /
  sub-department names).
- Title "Relatório de Prestação de Contas {year}" and the sector name.
- One section per strategic action with reportable content; deliveries are
  numbered ``{action}.{n}`` with their date, description and results.
- Annex I listing every attached evidence file.
- Signature block.

Only entries that pass ``has_report_content`` are rendered: inactive or
empty (action, sector) pairs never reach the document.
"""

import base64
import binascii
import io
import logging
from datetime import date
from typing import Optional, Sequence

import pandas as pd
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Cm, Pt, RGBColor

from ..dashboard import get_evidence_table, get_report_sections
from ..models import AppConfig, ReportEntry, SectorConfig, StrategicAction
from ..registry import active_sectors

logger = logging.getLogger(__name__)

_GOV_BLUE = RGBColor(0x00, 0x3B, 0x71)
_GREY = RGBColor(0x6B, 0x72, 0x80)


def _decode_logo(logo: Optional[str]) -> Optional[io.BytesIO]:
    """Accept a data URI or bare base64 string; None if it cannot be decoded."""
    if not logo:
        return None
    payload = logo.split(",", 1)[1] if logo.startswith("data:") else logo
    try:
        return io.BytesIO(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError):
        logger.warning("Configured logo is not valid base64, header rendered without it")
        return None


def _add_header(doc, config: AppConfig) -> None:
    logo = _decode_logo(config.logo)
    if logo is not None:
        try:
            doc.add_picture(logo, height=Cm(2.2))
        except Exception:
            logger.exception("Could not embed logo image")

    for text, size, bold in (
        (config.institution_name.upper(), 14, True),
        (config.department_name, 12, True),
        (config.sub_department_name, 11, False),
    ):
        paragraph = doc.add_paragraph()
        run = paragraph.add_run(text)
        run.bold = bold
        run.font.size = Pt(size)
        run.font.color.rgb = _GOV_BLUE
        paragraph.paragraph_format.space_after = Pt(0)

    doc.add_paragraph()


def _add_title(doc, year: int, subtitle: str, generated_on: date) -> None:
    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run(f"RELATÓRIO DE PRESTAÇÃO DE CONTAS {year}")
    run.bold = True
    run.font.size = Pt(16)

    sub = doc.add_paragraph()
    sub.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = sub.add_run(subtitle)
    run.bold = True
    run.font.size = Pt(13)

    stamp = doc.add_paragraph()
    stamp.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = stamp.add_run(f"Gerado em: {generated_on.strftime('%d/%m/%Y')}")
    run.italic = True
    run.font.size = Pt(9)
    run.font.color.rgb = _GREY


def _add_sections(doc, sections: list[dict]) -> None:
    for section in sections:
        action = section["action"]
        doc.add_heading(f"{action.id}. {action.title.upper()}", level=2)

        for numbered in section["deliveries"]:
            item = numbered["item"]
            heading = doc.add_paragraph()
            run = heading.add_run(f"{numbered['number']}  {item.title}")
            run.bold = True
            run.font.color.rgb = _GOV_BLUE
            date_run = heading.add_run(f"   [{item.date.upper()}]")
            date_run.font.size = Pt(9)
            date_run.font.color.rgb = _GREY

            if item.description:
                doc.add_paragraph(item.description)

            if item.results:
                label = doc.add_paragraph()
                label_run = label.add_run("Resultados / Benefícios: ")
                label_run.bold = True
                label_run.font.size = Pt(9)
                results_run = label.add_run(item.results)
                results_run.italic = True


def _add_evidence_annex(doc, evidence: pd.DataFrame, include_sector: bool = False) -> None:
    if evidence.empty:
        return

    doc.add_page_break()
    doc.add_heading("ANEXO I - RELAÇÃO DE EVIDÊNCIAS E DOCUMENTOS", level=2)

    headers = ["Item", "Entrega / Marco", "Arquivo Anexado"]
    if include_sector:
        headers.insert(1, "Setor")

    table = doc.add_table(rows=1, cols=len(headers))
    table.style = "Table Grid"
    for cell, text in zip(table.rows[0].cells, headers):
        cell.text = ""
        cell.paragraphs[0].add_run(text).bold = True

    for _, row in evidence.iterrows():
        values = [f"Ação {row['action_id']}", row["delivery_title"], row["file_name"]]
        if include_sector:
            values.insert(1, row["sector_id"])
        for cell, text in zip(table.add_row().cells, values):
            cell.text = str(text)

    note = doc.add_paragraph()
    run = note.add_run(
        "* Os arquivos digitais citados encontram-se arquivados eletronicamente "
        "no sistema de gestão."
    )
    run.italic = True
    run.font.size = Pt(8)


def _add_signatures(doc, left_caption: str, config: AppConfig) -> None:
    doc.add_paragraph()
    doc.add_paragraph()
    table = doc.add_table(rows=2, cols=2)
    captions = [
        ("Responsável pelo Setor", left_caption),
        ("Superintendente", config.sub_department_name),
    ]
    for col, (role, detail) in enumerate(captions):
        line = table.cell(0, col).paragraphs[0]
        line.alignment = WD_ALIGN_PARAGRAPH.CENTER
        line.add_run("_" * 35)
        cell = table.cell(1, col)
        role_par = cell.paragraphs[0]
        role_par.alignment = WD_ALIGN_PARAGRAPH.CENTER
        role_run = role_par.add_run(role.upper())
        role_run.bold = True
        role_run.font.size = Pt(9)
        detail_par = cell.add_paragraph()
        detail_par.alignment = WD_ALIGN_PARAGRAPH.CENTER
        detail_run = detail_par.add_run(detail)
        detail_run.font.size = Pt(8)


def _add_empty_notice(doc, year: int) -> None:
    paragraph = doc.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = paragraph.add_run(f"Nenhuma atividade registrada e ativa para este setor em {year}.")
    run.italic = True
    run.font.color.rgb = _GREY


def build_sector_report(
    entries: Sequence[ReportEntry],
    sector: SectorConfig,
    actions: Sequence[StrategicAction],
    config: AppConfig,
    year: int,
    generated_on: Optional[date] = None,
):
    """Per-sector report as a python-docx Document."""
    doc = Document()
    _add_header(doc, config)
    _add_title(doc, year, sector.name, generated_on or date.today())

    sections = get_report_sections(entries, sector.id, actions)
    if sections:
        _add_sections(doc, sections)
    else:
        _add_empty_notice(doc, year)

    _add_evidence_annex(doc, get_evidence_table(entries, sector.id, actions))
    _add_signatures(doc, sector.name, config)

    logger.info(
        "Built report for %s (%d): %d action sections", sector.id, year, len(sections)
    )
    return doc


def build_consolidated_report(
    entries: Sequence[ReportEntry],
    sectors: Sequence[SectorConfig],
    actions: Sequence[StrategicAction],
    config: AppConfig,
    year: int,
    generated_on: Optional[date] = None,
):
    """One document covering every active sector, a chapter per sector."""
    doc = Document()
    _add_header(doc, config)
    _add_title(doc, year, "Relatório Consolidado", generated_on or date.today())

    included = 0
    for sector in active_sectors(sectors):
        sections = get_report_sections(entries, sector.id, actions)
        doc.add_heading(f"{sector.short_name} — {sector.name}", level=1)
        if sections:
            _add_sections(doc, sections)
            included += 1
        else:
            _add_empty_notice(doc, year)

    active_ids = {s.id for s in active_sectors(sectors)}
    evidence = get_evidence_table(entries, None, actions)
    evidence = evidence[evidence["sector_id"].isin(list(active_ids))]
    _add_evidence_annex(doc, evidence, include_sector=True)
    _add_signatures(doc, config.department_name, config)

    logger.info("Built consolidated report for %d: %d sectors with content", year, included)
    return doc


def to_bytes(doc) -> bytes:
    """Serialise a Document for download."""
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
