import pytest

from accountability_dashboard.models import (
    AppConfig,
    DeliveryItem,
    ReportEntry,
    SectorConfig,
    StrategicAction,
)
from accountability_dashboard.state import ReportSession
from accountability_dashboard.store import JsonStore


def make_delivery(title="Entrega", date="Mar/2025", **kwargs):
    return DeliveryItem(id=kwargs.pop("id", title.lower()), title=title, date=date, **kwargs)


def make_entry(action_id, sector_id, n_deliveries=0, has_activities=True, dates=None):
    dates = dates or ["Mar/2025"] * n_deliveries
    deliveries = [
        make_delivery(title=f"Entrega {i + 1}", date=dates[i], id=f"{action_id}-{sector_id}-{i}")
        for i in range(n_deliveries)
    ]
    return ReportEntry(
        action_id=action_id,
        sector_id=sector_id,
        deliveries=deliveries,
        has_activities=has_activities,
    )


@pytest.fixture
def sectors():
    return [
        SectorConfig(id="A", name="Setor A", short_name="SA", color="bg-blue-900"),
        SectorConfig(id="B", name="Setor B", short_name="SB", color="bg-green-600"),
        SectorConfig(id="C", name="Setor C", short_name="SC", color="bg-yellow-600"),
    ]


@pytest.fixture
def actions():
    return [
        StrategicAction(id=str(i), title=f"Ação {i}", description=f"Descrição {i}",
                        start_year=2023, end_year=2027)
        for i in range(1, 7)
    ]


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data")


@pytest.fixture
def session(store, sectors, actions):
    return ReportSession(
        store,
        2025,
        AppConfig.default(),
        sectors,
        actions,
        current_year=2025,
        selectable_years=(2026, 2025, 2024),
    )
