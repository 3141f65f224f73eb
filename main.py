"""
Accountability Reporting — end-to-end smoke run.

Seeds simulated report entries into a throwaway data directory, runs the
aggregation pipeline and the exporters, and prints summaries plus a few
acceptance checks.

Usage:
    python main.py [output_dir]
"""

import logging
import sys
import tempfile
from pathlib import Path

from accountability_dashboard.config import CURRENT_YEAR, SELECTABLE_YEARS
from accountability_dashboard.dashboard import (
    action_ranking,
    get_overview_table,
    get_stats_summary,
    sector_ranking,
)
from accountability_dashboard.exporters import docx_report, excel_report
from accountability_dashboard.models import Overview, SectorView
from accountability_dashboard.simulator import generate_entries
from accountability_dashboard.state import ReportSession, year_label

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(output_dir: Path) -> None:
    """Run the full pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  PRESTAÇÃO DE CONTAS — Sector Delivery Dashboard")
    print("  Pipeline Smoke Test")
    print("=" * 70)
    print()

    data_dir = output_dir / "data"
    session = ReportSession.open(data_dir)

    # ------------------------------------------------------------------
    # 1. Seed simulated data
    # ------------------------------------------------------------------
    print("[ 1 ] SEEDING SIMULATED DATA")
    print("-" * 40)

    for offset, year in enumerate(sorted(SELECTABLE_YEARS)):
        entries = generate_entries(session.sectors, session.actions, year, seed=42 + offset)
        session.entry_store.save(year, entries)
        print(f"  {year_label(year):28s} {len(entries)} entries")

    session.switch_year(CURRENT_YEAR)
    print(f"\nSelected year: {session.year} ({session.scope.value}), "
          f"{len(session.entries)} entries in working set")

    # ------------------------------------------------------------------
    # 2. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    actions = session.active_actions()
    overview = get_overview_table(session.entries, session.sectors, actions)
    print("\nOverview by sector:")
    print(overview.to_string(index=False))

    print("\nSector ranking:")
    print(sector_ranking(session.entries, session.sectors).to_string(index=False))

    print("\nAction ranking:")
    print(action_ranking(session.entries, actions).to_string(index=False))

    stats = get_stats_summary(session.entries, session.sectors, actions, Overview())
    print(f"\nTotal deliveries: {stats['total_deliveries']}")
    print(f"Coverage: {stats['coverage']['achieved']}/{stats['coverage']['possible']} "
          f"({stats['coverage']['percentage']}%)")
    print("Monthly rhythm: " + ", ".join(
        f"{label}={count}" for label, count in zip(stats["month_labels"], stats["months"])
    ))

    # ------------------------------------------------------------------
    # 3. Exports
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] EXPORTS")
    print("-" * 40)

    first_sector = session.active_sectors()[0]
    sector_doc = docx_report.build_sector_report(
        session.entries, first_sector, actions, session.config, session.year
    )
    sector_path = output_dir / f"relatorio_{first_sector.id}_{session.year}.docx"
    sector_path.write_bytes(docx_report.to_bytes(sector_doc))
    print(f"  Sector report:       {sector_path}")

    consolidated = docx_report.build_consolidated_report(
        session.entries, session.sectors, actions, session.config, session.year
    )
    consolidated_path = output_dir / f"relatorio_consolidado_{session.year}.docx"
    consolidated_path.write_bytes(docx_report.to_bytes(consolidated))
    print(f"  Consolidated report: {consolidated_path}")

    workbook = excel_report.build_summary_workbook(
        session.entries, session.sectors, actions, session.config, session.year
    )
    workbook_path = output_dir / f"resumo_{session.year}.xlsx"
    workbook_path.write_bytes(excel_report.to_bytes(workbook))
    print(f"  Summary workbook:    {workbook_path}")

    # ------------------------------------------------------------------
    # 4. Acceptance checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] ACCEPTANCE CRITERIA CHECKS")
    print("-" * 40)

    check1 = len(overview) == len(session.active_sectors())
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Overview has one row per active sector ({len(overview)})")

    sector_totals = overview["deliveries"].sum()
    check2 = sector_totals <= stats["total_deliveries"]
    print(f"  [{'PASS' if check2 else 'FAIL'}] Sector totals ({sector_totals}) within overall "
          f"total ({stats['total_deliveries']})")

    per_sector = sum(
        get_stats_summary(session.entries, session.sectors, actions, SectorView(s.id))["coverage"]["achieved"]
        for s in session.active_sectors()
    )
    check3 = per_sector == stats["coverage"]["achieved"]
    print(f"  [{'PASS' if check3 else 'FAIL'}] Sector coverage sums to overall coverage "
          f"({per_sector} vs {stats['coverage']['achieved']})")

    historical = min(SELECTABLE_YEARS)
    session.switch_year(historical)
    check4 = session.read_only
    print(f"  [{'PASS' if check4 else 'FAIL'}] {historical} is read-only")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    if len(sys.argv) > 1:
        target = Path(sys.argv[1])
        target.mkdir(parents=True, exist_ok=True)
        main(target)
    else:
        with tempfile.TemporaryDirectory() as tmp:
            main(Path(tmp))
