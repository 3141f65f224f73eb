from dataclasses import replace

import pytest

from accountability_dashboard import registry
from accountability_dashboard.errors import NotFoundError, ValidationError
from accountability_dashboard.models import DeliveryItem, SectorConfig, StrategicAction


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

def test_move_up_swaps_with_predecessor(sectors):
    moved = registry.move_up(sectors, 2)
    assert [s.id for s in moved] == ["A", "C", "B"]
    assert [s.id for s in sectors] == ["A", "B", "C"]


def test_move_down_swaps_with_successor(sectors):
    assert [s.id for s in registry.move_down(sectors, 0)] == ["B", "A", "C"]


def test_boundary_moves_are_noops(sectors):
    assert [s.id for s in registry.move_up(sectors, 0)] == ["A", "B", "C"]
    assert [s.id for s in registry.move_down(sectors, 2)] == ["A", "B", "C"]


# ---------------------------------------------------------------------------
# Sectors
# ---------------------------------------------------------------------------

def test_save_new_sector_strips_id(sectors):
    new = SectorConfig(id=" D ", name="Setor D", short_name="SD")
    result = registry.save_sector(sectors, new)
    assert result[-1].id == "D"
    assert len(sectors) == 3


@pytest.mark.parametrize("sector", [
    SectorConfig(id="", name="Nome", short_name="X"),
    SectorConfig(id="X", name=" ", short_name="X"),
    SectorConfig(id="X Y", name="Nome", short_name="X"),
    SectorConfig(id="X", name="Nome", short_name="X", color="bg-pink-500"),
])
def test_invalid_sector_is_rejected(sectors, sector):
    with pytest.raises(ValidationError):
        registry.save_sector(sectors, sector)


def test_duplicate_sector_id_is_rejected(sectors):
    with pytest.raises(ValidationError):
        registry.save_sector(sectors, SectorConfig(id="A", name="Outro", short_name="O"))


def test_edit_sector_in_place(sectors):
    edited = replace(sectors[1], name="Setor B renomeado")
    result = registry.save_sector(sectors, edited, editing_id="B")
    assert [s.id for s in result] == ["A", "B", "C"]
    assert result[1].name == "Setor B renomeado"


def test_edit_cannot_change_id(sectors):
    with pytest.raises(ValidationError):
        registry.save_sector(sectors, replace(sectors[1], id="Z"), editing_id="B")


def test_toggle_sector(sectors):
    result = registry.toggle_sector(sectors, "C")
    assert result[2].is_active is False
    assert [s.id for s in registry.active_sectors(result)] == ["A", "B"]
    assert sectors[2].is_active is True


def test_unknown_sector():
    with pytest.raises(NotFoundError):
        registry.get_sector([], "A")


# ---------------------------------------------------------------------------
# Strategic actions
# ---------------------------------------------------------------------------

def test_next_action_id(actions):
    assert registry.next_action_id(actions) == "7"
    assert registry.next_action_id([]) == "1"


def test_next_action_id_ignores_non_numeric():
    actions = [StrategicAction(id="A1", title="x"), StrategicAction(id="3", title="y")]
    assert registry.next_action_id(actions) == "4"


def test_action_requires_fields(actions):
    with pytest.raises(ValidationError):
        registry.save_action(actions, StrategicAction(id="7", title="Título", description=""))


def test_action_window_must_be_ordered(actions):
    inverted = StrategicAction(id="7", title="T", description="D", start_year=2027, end_year=2024)
    with pytest.raises(ValidationError):
        registry.save_action(actions, inverted)


def test_duplicate_action_id_is_rejected(actions):
    with pytest.raises(ValidationError):
        registry.save_action(actions, StrategicAction(id="1", title="T", description="D"))


def test_toggle_and_filter_actions(actions):
    result = registry.toggle_action(actions, "2")
    assert "2" not in [a.id for a in registry.active_actions(result)]
    assert len(result) == len(actions)


def test_active_actions_for_year():
    actions = [
        StrategicAction(id="1", title="a", start_year=2023, end_year=2024),
        StrategicAction(id="2", title="b", start_year=2025, end_year=2027),
        StrategicAction(id="3", title="c"),
    ]
    assert [a.id for a in registry.active_actions(actions, 2025)] == ["2", "3"]
    assert [a.id for a in registry.active_actions(actions)] == ["1", "2", "3"]


# ---------------------------------------------------------------------------
# Deliveries
# ---------------------------------------------------------------------------

def test_delivery_needs_title_and_date():
    with pytest.raises(ValidationError, match="Título e Período/Data"):
        registry.validate_delivery(DeliveryItem(id="d", title="Entrega", date=" "))
    registry.validate_delivery(DeliveryItem(id="d", title="Entrega", date="2025"))
