from dataclasses import replace
from datetime import date

from accountability_dashboard.dashboard import (
    action_ranking,
    get_deadline_status,
    get_evidence_table,
    get_overview_table,
    get_report_sections,
    get_sector_cards,
    get_stats_summary,
    sector_ranking,
)
from accountability_dashboard.kpis import find_entry
from accountability_dashboard.models import AttachedFile, Deadlines, Overview, SectorView

from conftest import make_entry


def test_sector_ranking_is_stable_on_ties(sectors):
    entries = [
        make_entry("1", "A", n_deliveries=5),
        make_entry("1", "B", n_deliveries=5),
        make_entry("1", "C", n_deliveries=2),
    ]
    ranking = sector_ranking(entries, sectors)
    assert ranking["sector_id"].tolist() == ["A", "B", "C"]
    assert ranking["rank"].tolist() == [1, 2, 3]
    assert ranking["deliveries"].tolist() == [5, 5, 2]

    # Registry order decides ties
    reordered = [sectors[1], sectors[0], sectors[2]]
    assert sector_ranking(entries, reordered)["sector_id"].tolist() == ["B", "A", "C"]


def test_deactivated_sector_leaves_ranking_but_keeps_entries(sectors):
    entries = [
        make_entry("1", "A", n_deliveries=1),
        make_entry("1", "B", n_deliveries=4),
    ]
    sectors[1] = replace(sectors[1], is_active=False)

    ranking = sector_ranking(entries, sectors)
    assert "B" not in ranking["sector_id"].tolist()
    assert find_entry(entries, "1", "B").deliveries


def test_sector_ranking_ignores_inactive_entries(sectors):
    entries = [make_entry("1", "A", n_deliveries=3, has_activities=False)]
    ranking = sector_ranking(entries, sectors)
    assert ranking.set_index("sector_id").loc["A", "deliveries"] == 0


def test_action_ranking(actions):
    entries = [
        make_entry("3", "A", n_deliveries=2),
        make_entry("3", "B", n_deliveries=1),
        make_entry("1", "A", n_deliveries=1),
    ]
    ranking = action_ranking(entries, actions)
    assert ranking["action_id"].tolist()[:2] == ["3", "1"]
    assert ranking["deliveries"].tolist()[:2] == [3, 1]
    assert len(ranking) == len(actions)


def test_overview_table(sectors, actions):
    entries = [make_entry(str(i), "A", n_deliveries=1) for i in range(1, 4)]
    overview = get_overview_table(entries, sectors, actions).set_index("sector_id")

    assert overview.loc["A", "completed"] == 3
    assert overview.loc["A", "total"] == 6
    assert overview.loc["A", "percentage"] == 50
    assert overview.loc["A", "deliveries"] == 3
    assert overview.loc["B", "percentage"] == 0


def test_stats_summary_overview_and_sector(sectors, actions):
    entries = [
        make_entry("1", "A", n_deliveries=2, dates=["Jan/2025", "Fev/2025"]),
        make_entry("2", "B", has_activities=False),
    ]
    overall = get_stats_summary(entries, sectors, actions, Overview())
    assert overall["scope"] == "overview"
    assert overall["total_deliveries"] == 2
    assert overall["coverage"] == {"achieved": 2, "possible": 18, "percentage": 11}
    assert overall["months"][:2] == [1, 1]
    assert overall["max_monthly"] == 1

    sector = get_stats_summary(entries, sectors, actions, SectorView("B"))
    assert sector["scope"] == "sector"
    assert sector["total_deliveries"] == 0
    assert sector["coverage"] == {"achieved": 1, "possible": 6, "percentage": 17}
    assert sector["max_monthly"] == 1


def test_sector_cards(actions):
    entries = [make_entry("2", "A", has_activities=False)]
    cards = get_sector_cards(entries, "A", actions)
    assert len(cards) == 6
    assert cards[0]["has_activities"] is True
    assert cards[0]["is_complete"] is False
    assert cards[1]["has_activities"] is False
    assert cards[1]["is_complete"] is True


def test_report_sections_skip_inactive_and_empty(actions):
    entries = [
        make_entry("1", "A", n_deliveries=2),
        make_entry("2", "A", n_deliveries=1, has_activities=False),
        make_entry("3", "A"),
    ]
    sections = get_report_sections(entries, "A", actions)
    assert [s["action"].id for s in sections] == ["1"]
    assert [d["number"] for d in sections[0]["deliveries"]] == ["1.1", "1.2"]


def test_evidence_table_follows_catalog_order(actions):
    second = make_entry("2", "A", n_deliveries=1)
    second.deliveries[0].attachments.append(AttachedFile(id="f2", name="b.pdf"))
    first = make_entry("1", "A", n_deliveries=1)
    first.deliveries[0].attachments.append(AttachedFile(id="f1", name="a.pdf"))
    hidden = make_entry("3", "A", n_deliveries=1, has_activities=False)
    hidden.deliveries[0].attachments.append(AttachedFile(id="f3", name="c.pdf"))

    evidence = get_evidence_table([second, first, hidden], "A", actions)
    assert evidence["file_name"].tolist() == ["a.pdf", "b.pdf"]


def test_deadline_status():
    deadlines = Deadlines(sector_deadline="2025-11-30", final_deadline="2025-10-01", show_banner=True)
    status = get_deadline_status(deadlines, today=date(2025, 11, 20))
    assert status["sector_days"] == 10
    assert status["final_days"] == -50

    assert get_deadline_status(replace(deadlines, show_banner=False)) is None
    assert get_deadline_status(Deadlines(show_banner=True))["sector_days"] is None
