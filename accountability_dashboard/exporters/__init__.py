"""Report exporters: printable Word report and Excel summary workbook."""

from .docx_report import build_consolidated_report, build_sector_report
from .excel_report import build_summary_workbook

__all__ = [
    "build_sector_report",
    "build_consolidated_report",
    "build_summary_workbook",
]
