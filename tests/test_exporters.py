import io
from dataclasses import replace
from datetime import date

from docx import Document
from openpyxl import load_workbook

from accountability_dashboard.exporters import docx_report, excel_report
from accountability_dashboard.models import AppConfig, AttachedFile

from conftest import make_entry


def _document_text(doc) -> str:
    return "\n".join(p.text for p in doc.paragraphs)


def _entries():
    reported = make_entry("1", "A", n_deliveries=2, dates=["Mar/2025", "Abr/2025"])
    reported.deliveries[0].attachments.append(AttachedFile(id="f1", name="evidencia.pdf", size=1024))
    hidden = make_entry("2", "A", n_deliveries=1, has_activities=False)
    hidden.deliveries[0].title = "Entrega oculta"
    return [reported, hidden, make_entry("1", "B", n_deliveries=1)]


def test_sector_report_contains_only_reportable_content(sectors, actions):
    doc = docx_report.build_sector_report(
        _entries(), sectors[0], actions, AppConfig.default(), 2025, generated_on=date(2025, 12, 1)
    )
    text = _document_text(doc)

    assert "RELATÓRIO DE PRESTAÇÃO DE CONTAS 2025" in text
    assert "1.1" in text and "1.2" in text
    assert "Entrega oculta" not in text

    cells = [cell.text for table in doc.tables for row in table.rows for cell in row.cells]
    assert "evidencia.pdf" in cells


def test_sector_report_without_content_shows_notice(sectors, actions):
    doc = docx_report.build_sector_report([], sectors[2], actions, AppConfig.default(), 2025)
    assert "Nenhuma atividade registrada" in _document_text(doc)


def test_report_survives_bad_logo(sectors, actions):
    config = replace(AppConfig.default(), logo="data:image/png;base64,@@not-base64@@")
    doc = docx_report.build_sector_report(_entries(), sectors[0], actions, config, 2025)
    assert docx_report.to_bytes(doc)


def test_consolidated_report_skips_inactive_sectors(sectors, actions):
    sectors[1] = replace(sectors[1], is_active=False)
    doc = docx_report.build_consolidated_report(_entries(), sectors, actions, AppConfig.default(), 2025)

    reloaded = Document(io.BytesIO(docx_report.to_bytes(doc)))
    text = _document_text(reloaded)
    assert "Setor A" in text
    assert "Setor B" not in text


def test_summary_workbook(sectors, actions):
    wb = excel_report.build_summary_workbook(_entries(), sectors, actions, AppConfig.default(), 2025)
    reloaded = load_workbook(io.BytesIO(excel_report.to_bytes(wb)))

    assert reloaded.sheetnames == [
        "Visão Geral", "Ranking Setores", "Ranking Ações", "Entregas", "Ritmo Mensal",
    ]

    ranking = reloaded["Ranking Setores"]
    assert [c.value for c in ranking[3]] == ["Posição", "Setor", "Entregas"]
    assert [c.value for c in ranking[4]] == [1, "SA", 2]

    deliveries = reloaded["Entregas"]
    titles = [row[3] for row in deliveries.iter_rows(min_row=4, values_only=True)]
    assert "Entrega oculta" not in titles
    assert len(titles) == 3

    months = reloaded["Ritmo Mensal"]
    counts = [row[1] for row in months.iter_rows(min_row=4, values_only=True)]
    assert counts[2] == 2
    assert counts[3] == 1
