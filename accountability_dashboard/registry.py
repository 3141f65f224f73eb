"""
Sector and strategic-action registries.

All operations return new lists; the input lists are never mutated. Records
are never removed: deactivation is a flag flip so historical report entries
stay attributable.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence

from .config import SECTOR_COLOR_PALETTE
from .errors import NotFoundError, ValidationError
from .models import DeliveryItem, SectorConfig, StrategicAction

logger = logging.getLogger(__name__)


def _index_of(items: Sequence, item_id: str) -> int:
    for idx, item in enumerate(items):
        if item.id == item_id:
            return idx
    raise NotFoundError(f"Registro '{item_id}' não encontrado.")


def active_sectors(sectors: Sequence[SectorConfig]) -> list[SectorConfig]:
    return [s for s in sectors if s.is_active]


def active_actions(
    actions: Sequence[StrategicAction],
    year: Optional[int] = None,
) -> list[StrategicAction]:
    """Active actions; with ``year``, only those whose validity window contains it."""
    result = [a for a in actions if a.is_active]
    if year is not None:
        result = [a for a in result if a.is_valid_in(year)]
    return result


def get_sector(sectors: Sequence[SectorConfig], sector_id: str) -> SectorConfig:
    return sectors[_index_of(sectors, sector_id)]


def get_action(actions: Sequence[StrategicAction], action_id: str) -> StrategicAction:
    return actions[_index_of(actions, action_id)]


# ---------------------------------------------------------------------------
# Sectors
# ---------------------------------------------------------------------------

def validate_sector(sector: SectorConfig) -> None:
    if not sector.id.strip() or not sector.name.strip() or not sector.short_name.strip():
        raise ValidationError("Preencha os campos obrigatórios (ID, Nome, Sigla)")
    if " " in sector.id.strip():
        raise ValidationError("O ID do setor não pode conter espaços.")
    if sector.color not in SECTOR_COLOR_PALETTE:
        raise ValidationError(f"Cor inválida: {sector.color}")


def save_sector(
    sectors: Sequence[SectorConfig],
    sector: SectorConfig,
    editing_id: Optional[str] = None,
) -> list[SectorConfig]:
    """Create a sector (``editing_id`` None) or replace an existing one in place.

    The id of an existing sector cannot change.
    """
    sector = replace(sector, id=sector.id.strip())
    validate_sector(sector)
    result = list(sectors)

    if editing_id is None:
        if any(s.id == sector.id for s in result):
            raise ValidationError(f"Já existe um setor com o ID '{sector.id}'.")
        result.append(sector)
        logger.info("Created sector %s", sector.id)
        return result

    idx = _index_of(result, editing_id)
    if sector.id != editing_id:
        raise ValidationError("O ID de um setor existente não pode ser alterado.")
    result[idx] = sector
    logger.info("Updated sector %s", sector.id)
    return result


def toggle_sector(sectors: Sequence[SectorConfig], sector_id: str) -> list[SectorConfig]:
    result = list(sectors)
    idx = _index_of(result, sector_id)
    result[idx] = replace(result[idx], is_active=not result[idx].is_active)
    return result


def _swap(items: Sequence, index: int, target: int) -> list:
    result = list(items)
    if 0 <= index < len(result) and 0 <= target < len(result):
        result[index], result[target] = result[target], result[index]
    return result


def move_up(sectors: Sequence[SectorConfig], index: int) -> list[SectorConfig]:
    """Swap the sector at ``index`` with its predecessor. No-op at the top."""
    return _swap(sectors, index, index - 1)


def move_down(sectors: Sequence[SectorConfig], index: int) -> list[SectorConfig]:
    """Swap the sector at ``index`` with its successor. No-op at the bottom."""
    return _swap(sectors, index, index + 1)


# ---------------------------------------------------------------------------
# Strategic actions
# ---------------------------------------------------------------------------

def next_action_id(actions: Sequence[StrategicAction]) -> str:
    """Suggested id for a new action: highest numeric id + 1."""
    numeric = []
    for action in actions:
        try:
            numeric.append(int(action.id))
        except ValueError:
            numeric.append(0)
    return str(max(numeric, default=0) + 1)


def validate_action(action: StrategicAction) -> None:
    if not action.id.strip() or not action.title.strip() or not action.description.strip():
        raise ValidationError("Preencha os campos obrigatórios")
    if action.start_year and action.end_year and action.start_year > action.end_year:
        raise ValidationError("O ano de início não pode ser posterior ao ano de fim.")


def save_action(
    actions: Sequence[StrategicAction],
    action: StrategicAction,
    editing_id: Optional[str] = None,
) -> list[StrategicAction]:
    action = replace(action, id=action.id.strip())
    validate_action(action)
    result = list(actions)

    if editing_id is None:
        if any(a.id == action.id for a in result):
            raise ValidationError(f"Já existe uma ação com o ID '{action.id}'.")
        result.append(action)
        logger.info("Created strategic action %s", action.id)
        return result

    idx = _index_of(result, editing_id)
    if action.id != editing_id and any(a.id == action.id for a in result):
        raise ValidationError(f"Já existe uma ação com o ID '{action.id}'.")
    result[idx] = action
    logger.info("Updated strategic action %s", action.id)
    return result


def toggle_action(actions: Sequence[StrategicAction], action_id: str) -> list[StrategicAction]:
    result = list(actions)
    idx = _index_of(result, action_id)
    result[idx] = replace(result[idx], is_active=not result[idx].is_active)
    return result


# ---------------------------------------------------------------------------
# Deliveries
# ---------------------------------------------------------------------------

def validate_delivery(delivery: DeliveryItem) -> None:
    """Title and date are required; description and results are optional."""
    if not delivery.title.strip() or not delivery.date.strip():
        raise ValidationError(
            "Por favor, preencha os campos obrigatórios (Título e Período/Data)."
        )
