from pathlib import Path

import pytest

from accountability_dashboard.errors import (
    NotFoundError,
    ReadOnlyYearError,
    UnknownYearError,
    ValidationError,
)
from accountability_dashboard.models import (
    AppConfig,
    Deadlines,
    Overview,
    SectorView,
    Settings,
    StrategicAction,
)
from accountability_dashboard.state import ReportSession, YearScope, scope_for_year, year_label
from accountability_dashboard.store import JsonStore

from conftest import make_delivery, make_entry


# ---------------------------------------------------------------------------
# Year scope
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("year,expected", [
    (2024, YearScope.HISTORICAL),
    (2025, YearScope.CURRENT),
    (2026, YearScope.PLANNING),
])
def test_scope_for_year(year, expected):
    assert scope_for_year(year, current_year=2025) is expected


def test_year_label():
    assert year_label(2025, current_year=2025) == "2025 (Em Execução)"
    assert year_label(2024, current_year=2025) == "2024 (Histórico)"
    assert year_label(2026, current_year=2025) == "2026 (Planejamento)"


def test_unknown_year_is_rejected(session):
    with pytest.raises(UnknownYearError):
        session.switch_year(2019)
    assert session.year == 2025


# ---------------------------------------------------------------------------
# Year isolation
# ---------------------------------------------------------------------------

def test_switching_year_reloads_working_set(session):
    session.save_delivery("1", "A", make_delivery("Entrega 2025"))
    session.switch_year(2026)
    assert session.entries == []

    session.save_delivery("2", "B", make_delivery("Entrega 2026"))
    session.switch_year(2025)
    assert [e.key for e in session.entries] == [("1", "A")]


def test_historical_partition_is_untouched_by_later_writes(session):
    session.entry_store.save(2024, [make_entry("1", "A", n_deliveries=1)])
    before = session.store.path_for("report_2024").read_bytes()

    session.switch_year(2024)
    session.switch_year(2025)
    session.save_delivery("1", "A", make_delivery("Nova"))
    session.set_activity("2", "A", False)

    assert session.store.path_for("report_2024").read_bytes() == before


def test_historical_year_is_read_only(session):
    session.switch_year(2024)
    assert session.read_only

    with pytest.raises(ReadOnlyYearError) as exc_info:
        session.save_delivery("1", "A", make_delivery())
    assert exc_info.value.year == 2024

    with pytest.raises(ReadOnlyYearError):
        session.toggle_activity("1", "A")
    with pytest.raises(ReadOnlyYearError):
        session.store_attachment("x.pdf", b"data")
    assert not session.store.exists("report_2024")


def test_planning_year_is_editable(session):
    session.switch_year(2026)
    assert session.scope.provisional
    session.save_delivery("1", "A", make_delivery())
    assert session.entry_for("1", "A") is not None


# ---------------------------------------------------------------------------
# Deliveries and activity
# ---------------------------------------------------------------------------

def test_save_delivery_requires_title_and_date(session):
    with pytest.raises(ValidationError):
        session.save_delivery("1", "A", make_delivery(title="  "))
    with pytest.raises(ValidationError):
        session.save_delivery("1", "A", make_delivery(date=""))
    assert session.entries == []


def test_save_delivery_replaces_by_id(session):
    session.save_delivery("1", "A", make_delivery("Primeira", id="d1"))
    session.save_delivery("1", "A", make_delivery("Segunda", id="d2"))
    session.save_delivery("1", "A", make_delivery("Primeira revisada", id="d1"))

    entry = session.entry_for("1", "A")
    assert [d.title for d in entry.deliveries] == ["Primeira revisada", "Segunda"]
    assert entry.last_updated > 0


def test_saved_delivery_reactivates_entry(session):
    session.set_activity("1", "A", False)
    session.save_delivery("1", "A", make_delivery())
    assert session.entry_for("1", "A").has_activities is True


def test_toggle_activity_keeps_deliveries(session):
    session.save_delivery("1", "A", make_delivery())
    session.toggle_activity("1", "A")
    entry = session.entry_for("1", "A")
    assert entry.has_activities is False
    assert len(entry.deliveries) == 1

    session.toggle_activity("1", "A")
    assert session.entry_for("1", "A").has_activities is True


def test_toggle_on_missing_entry_marks_inactive(session):
    session.toggle_activity("3", "B")
    assert session.entry_for("3", "B").has_activities is False


def test_delete_requires_confirmation(session):
    session.save_delivery("1", "A", make_delivery(id="d1"))

    with pytest.raises(ValidationError):
        session.delete_delivery("1", "A", "d1")
    assert len(session.entry_for("1", "A").deliveries) == 1

    session.delete_delivery("1", "A", "d1", confirmed=True)
    assert session.entry_for("1", "A").deliveries == []


def test_delete_unknown_delivery(session):
    with pytest.raises(NotFoundError):
        session.delete_delivery("1", "A", "missing", confirmed=True)


def test_changes_survive_reopen(session, store, sectors, actions):
    session.save_delivery("1", "A", make_delivery("Persistida"))
    reopened = ReportSession(
        store, 2025, session.config, sectors, actions,
        current_year=2025, selectable_years=(2026, 2025, 2024),
    )
    assert reopened.entry_for("1", "A").deliveries[0].title == "Persistida"


def test_store_attachment(session):
    attached = session.store_attachment("relatório final.pdf", b"%PDF-1.4", "application/pdf")
    assert attached.name == "relatório final.pdf"
    assert attached.size == 8
    assert attached.mime_type == "application/pdf"
    stored = Path(attached.preview_ref)
    assert stored.parent == session.attachments_dir
    assert stored.read_bytes() == b"%PDF-1.4"


def test_save_delivery_with_uploads_attaches_files(session):
    session.save_delivery(
        "1", "A", make_delivery(id="d1"), uploads=[("e.pdf", b"%PDF", "application/pdf")]
    )
    attached = session.entry_for("1", "A").deliveries[0].attachments
    assert [a.name for a in attached] == ["e.pdf"]
    assert Path(attached[0].preview_ref).read_bytes() == b"%PDF"


def test_invalid_delivery_stores_no_uploads(session):
    with pytest.raises(ValidationError):
        session.save_delivery(
            "1", "A", make_delivery(title=""), uploads=[("e.pdf", b"%PDF", "application/pdf")]
        )
    assert session.entries == []
    assert not session.attachments_dir.exists() or not any(session.attachments_dir.iterdir())


def test_failed_write_keeps_memory_and_removes_uploads(session, monkeypatch):
    session.save_delivery("1", "A", make_delivery("Primeira", id="d1"))
    before = session.entries

    def fail(year, entries):
        raise OSError("disk full")

    monkeypatch.setattr(session.entry_store, "save", fail)
    with pytest.raises(OSError):
        session.save_delivery(
            "1", "A", make_delivery("Segunda", id="d2"), uploads=[("e.pdf", b"%PDF", "")]
        )

    assert session.entries == before
    assert [d.id for d in session.entry_for("1", "A").deliveries] == ["d1"]
    assert list(session.attachments_dir.iterdir()) == []


# ---------------------------------------------------------------------------
# Registries, identity, navigation
# ---------------------------------------------------------------------------

def test_open_uses_defaults_then_persisted(tmp_path):
    session = ReportSession.open(tmp_path, year=2025, current_year=2025,
                                 selectable_years=(2026, 2025, 2024))
    assert [s.id for s in session.sectors][:2] == ["STIF", "DGGT"]
    assert len(session.actions) == 6

    session.toggle_sector("DGGT")
    reopened = ReportSession.open(tmp_path, year=2025, current_year=2025,
                                  selectable_years=(2026, 2025, 2024))
    assert [s.id for s in reopened.active_sectors()] == ["STIF", "DISCO", "DINFRA", "DINOV"]


@pytest.mark.parametrize("stored", [
    {"deadlines": "oops"},
    {"deadlines": 42, "institutionName": "Governo"},
    ["not", "a", "dict"],
])
def test_open_survives_malformed_config(tmp_path, stored):
    JsonStore(tmp_path).write("app_config", stored)
    session = ReportSession.open(tmp_path, year=2025, current_year=2025,
                                 selectable_years=(2026, 2025, 2024))
    assert session.config.deadlines == Deadlines()
    assert session.config.department_name == AppConfig.default().department_name


@pytest.mark.parametrize("value,expected", [
    (True, True),
    (False, False),
    ("false", False),
    ("true", False),
    (None, False),
])
def test_show_banner_only_when_stored_true(value, expected):
    assert Deadlines.from_dict({"showBanner": value}).show_banner is expected


def test_active_actions_respect_validity_window(session):
    session.save_action(StrategicAction(
        id="7", title="Nova", description="Desc", start_year=2026, end_year=2027,
    ))
    assert "7" not in [a.id for a in session.active_actions()]
    session.switch_year(2026)
    assert "7" in [a.id for a in session.active_actions()]


def test_next_action_id(session):
    assert session.next_action_id() == "7"


def test_move_sector_persists_order(session):
    session.move_sector_down(0)
    assert [s.id for s in session.sectors] == ["B", "A", "C"]
    assert [s["id"] for s in session.store.read("sectors")] == ["B", "A", "C"]


def test_update_identity_validates(session):
    with pytest.raises(ValidationError):
        session.update_identity("", "Secretaria", "Sub")
    session.update_identity(" Governo ", "Secretaria", "Sub")
    assert session.config.institution_name == "Governo"
    assert session.store.read("app_config")["institutionName"] == "Governo"


def test_update_deadlines(session):
    session.update_deadlines(Deadlines("2025-11-30", "2025-12-15", True))
    assert session.store.read("app_config")["deadlines"] == {
        "sectorDeadline": "2025-11-30",
        "finalDeadline": "2025-12-15",
        "showBanner": True,
    }


def test_navigation(session):
    assert session.navigation == Overview()
    session.navigate(SectorView("B"))
    session.toggle_sector("B")
    assert session.navigation == Overview()

    with pytest.raises(NotFoundError):
        session.navigate(SectorView("B"))
    with pytest.raises(NotFoundError):
        session.navigate(SectorView("ZZ"))

    session.navigate(Settings())
    assert session.navigation == Settings()
