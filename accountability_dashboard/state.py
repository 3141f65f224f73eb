"""
Application state for one operator session.

ReportSession replaces module-level globals: it owns the JSON store, the
selected fiscal year and its working set of report entries, the sector and
action registries, the institutional identity and the navigation target.

Year scope
----------
- year <  current operating year -> HISTORICAL (read-only)
- year == current operating year -> CURRENT (editable)
- year >  current operating year -> PLANNING (editable, provisional)

Switching years always reloads the working set from that year's partition
before anything else can read or write it, and every write goes to the
year selected at the time of the write.
"""

import logging
import re
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from . import registry
from .config import (
    APP_CONFIG_KEY,
    ATTACHMENTS_DIRNAME,
    CURRENT_YEAR,
    DATA_DIR,
    DEFAULT_SECTORS,
    DEFAULT_STRATEGIC_ACTIONS,
    SECTORS_KEY,
    SELECTABLE_YEARS,
    STRATEGIC_ACTIONS_KEY,
    YEAR_LABELS,
)
from .errors import NotFoundError, ReadOnlyYearError, UnknownYearError, ValidationError
from .kpis import find_entry
from .models import (
    AppConfig,
    AttachedFile,
    Deadlines,
    DeliveryItem,
    NavigationTarget,
    Overview,
    ReportEntry,
    SectorConfig,
    SectorView,
    StrategicAction,
    new_id,
    now_ms,
)
from .store import EntryStore, JsonStore, upsert_entry

logger = logging.getLogger(__name__)


class YearScope(str, Enum):
    HISTORICAL = "historical"
    CURRENT = "current"
    PLANNING = "planning"

    @property
    def read_only(self) -> bool:
        return self is YearScope.HISTORICAL

    @property
    def provisional(self) -> bool:
        return self is YearScope.PLANNING


def scope_for_year(year: int, current_year: int = CURRENT_YEAR) -> YearScope:
    if year < current_year:
        return YearScope.HISTORICAL
    if year > current_year:
        return YearScope.PLANNING
    return YearScope.CURRENT


def year_label(year: int, current_year: int = CURRENT_YEAR) -> str:
    """Selector label, e.g. '2025 (Em Execução)'."""
    return f"{year} ({YEAR_LABELS[scope_for_year(year, current_year).value]})"


def _load_records(store: JsonStore, key: str, defaults: list[dict], factory: Callable) -> list:
    raw = store.read(key)
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Stored registry '%s' is not a list, using defaults", key)
        raw = defaults

    records = []
    for idx, item in enumerate(raw):
        try:
            records.append(factory(item))
        except (KeyError, TypeError, AttributeError):
            logger.warning("Skipping malformed record %d in '%s'", idx, key)
    return records


def _safe_filename(name: str) -> str:
    cleaned = re.sub(r"[^\w.\-]+", "_", name).strip("._")
    return cleaned or "arquivo"


class ReportSession:
    """Mutable state for a single operator; every change is persisted immediately."""

    def __init__(
        self,
        store: JsonStore,
        year: int,
        config: AppConfig,
        sectors: Sequence[SectorConfig],
        actions: Sequence[StrategicAction],
        current_year: int = CURRENT_YEAR,
        selectable_years: Sequence[int] = SELECTABLE_YEARS,
    ):
        self.store = store
        self.entry_store = EntryStore(store)
        self.current_year = current_year
        self.selectable_years = tuple(selectable_years)
        self.config = config
        self.sectors: list[SectorConfig] = list(sectors)
        self.actions: list[StrategicAction] = list(actions)
        self.navigation: NavigationTarget = Overview()
        self._year = year
        self._entries: list[ReportEntry] = []
        self.switch_year(year)

    @classmethod
    def open(
        cls,
        data_dir: Optional[Path | str] = None,
        year: Optional[int] = None,
        current_year: int = CURRENT_YEAR,
        selectable_years: Sequence[int] = SELECTABLE_YEARS,
    ) -> "ReportSession":
        """Load persisted state, falling back to the built-in defaults."""
        store = JsonStore(data_dir or DATA_DIR)

        raw_config = store.read(APP_CONFIG_KEY)
        config = AppConfig.from_dict(raw_config) if isinstance(raw_config, dict) else AppConfig.default()
        sectors = _load_records(store, SECTORS_KEY, DEFAULT_SECTORS, SectorConfig.from_dict)
        actions = _load_records(
            store, STRATEGIC_ACTIONS_KEY, DEFAULT_STRATEGIC_ACTIONS, StrategicAction.from_dict
        )

        logger.info(
            "Opened session at %s: %d sectors, %d strategic actions",
            store.base_dir, len(sectors), len(actions),
        )
        return cls(
            store,
            year if year is not None else current_year,
            config,
            sectors,
            actions,
            current_year=current_year,
            selectable_years=selectable_years,
        )

    # ------------------------------------------------------------------
    # Year scope
    # ------------------------------------------------------------------
    @property
    def year(self) -> int:
        return self._year

    @property
    def scope(self) -> YearScope:
        return scope_for_year(self._year, self.current_year)

    @property
    def read_only(self) -> bool:
        return self.scope.read_only

    @property
    def entries(self) -> list[ReportEntry]:
        """Copy of the working set for the selected year."""
        return list(self._entries)

    def switch_year(self, year: int) -> None:
        if year not in self.selectable_years:
            raise UnknownYearError(year)
        # Replace the working set before the new year becomes visible
        entries = self.entry_store.load(year)
        self._year = year
        self._entries = entries
        logger.info("Selected year %d (%s)", year, self.scope.value)

    def reload(self) -> None:
        self.switch_year(self._year)

    def _require_editable(self) -> None:
        if self.read_only:
            raise ReadOnlyYearError(self._year)

    def _commit(self, entry: ReportEntry) -> ReportEntry:
        entries = upsert_entry(self._entries, entry)
        # Memory only follows a successful write
        self.entry_store.save(self._year, entries)
        self._entries = entries
        return entry

    # ------------------------------------------------------------------
    # Report entries
    # ------------------------------------------------------------------
    def entry_for(self, action_id: str, sector_id: str) -> Optional[ReportEntry]:
        return find_entry(self._entries, action_id, sector_id)

    def sector_entries(self, sector_id: str) -> list[ReportEntry]:
        return [e for e in self._entries if e.sector_id == sector_id]

    def save_entry(self, entry: ReportEntry) -> ReportEntry:
        """Upsert a whole entry into the selected year's partition."""
        self._require_editable()
        return self._commit(replace(entry, last_updated=now_ms()))

    def set_activity(self, action_id: str, sector_id: str, has_activities: bool) -> ReportEntry:
        self._require_editable()
        current = self.entry_for(action_id, sector_id)
        deliveries = list(current.deliveries) if current else []
        return self._commit(ReportEntry(
            action_id=action_id,
            sector_id=sector_id,
            deliveries=deliveries,
            has_activities=has_activities,
            last_updated=now_ms(),
        ))

    def toggle_activity(self, action_id: str, sector_id: str) -> ReportEntry:
        """Flip the activity flag; a missing entry counts as active."""
        current = self.entry_for(action_id, sector_id)
        active = current is None or current.has_activities is not False
        return self.set_activity(action_id, sector_id, not active)

    def save_delivery(
        self,
        action_id: str,
        sector_id: str,
        delivery: DeliveryItem,
        uploads: Sequence[tuple[str, bytes, str]] = (),
    ) -> ReportEntry:
        """Add a delivery, or replace the one with the same id. Marks the entry active.

        ``uploads`` are (name, content, mime_type) evidence files. They are
        written only after the delivery validates, and removed again if the
        partition cannot be saved.
        """
        self._require_editable()
        registry.validate_delivery(delivery)

        stored: list[AttachedFile] = []
        try:
            for name, content, mime_type in uploads:
                stored.append(self.store_attachment(name, content, mime_type))
            if stored:
                delivery = replace(delivery, attachments=list(delivery.attachments) + stored)
            return self._save_delivery(action_id, sector_id, delivery)
        except OSError:
            for attached in stored:
                Path(attached.preview_ref).unlink(missing_ok=True)
            raise

    def _save_delivery(self, action_id: str, sector_id: str, delivery: DeliveryItem) -> ReportEntry:
        current = self.entry_for(action_id, sector_id)
        deliveries = list(current.deliveries) if current else []
        for idx, existing in enumerate(deliveries):
            if existing.id == delivery.id:
                deliveries[idx] = delivery
                break
        else:
            deliveries.append(delivery)

        return self._commit(ReportEntry(
            action_id=action_id,
            sector_id=sector_id,
            deliveries=deliveries,
            has_activities=True,
            last_updated=now_ms(),
        ))

    def delete_delivery(
        self,
        action_id: str,
        sector_id: str,
        delivery_id: str,
        confirmed: bool = False,
    ) -> ReportEntry:
        """Remove a delivery. Requires explicit confirmation; there is no undo."""
        self._require_editable()
        if not confirmed:
            raise ValidationError("Confirme a exclusão da entrega antes de prosseguir.")

        current = self.entry_for(action_id, sector_id)
        if current is None or not any(d.id == delivery_id for d in current.deliveries):
            raise NotFoundError(f"Entrega '{delivery_id}' não encontrada.")

        return self._commit(ReportEntry(
            action_id=action_id,
            sector_id=sector_id,
            deliveries=[d for d in current.deliveries if d.id != delivery_id],
            has_activities=True,
            last_updated=now_ms(),
        ))

    @property
    def attachments_dir(self) -> Path:
        return self.store.base_dir / ATTACHMENTS_DIRNAME / str(self._year)

    def store_attachment(self, name: str, content: bytes, mime_type: str = "") -> AttachedFile:
        """Keep a copy of an uploaded evidence file and return its descriptor."""
        self._require_editable()
        file_id = new_id()
        target_dir = self.attachments_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / f"{file_id}_{_safe_filename(name)}"
        path.write_bytes(content)
        return AttachedFile(
            id=file_id,
            name=name,
            size=len(content),
            mime_type=mime_type,
            preview_ref=str(path),
        )

    # ------------------------------------------------------------------
    # Registries and identity
    # ------------------------------------------------------------------
    def active_sectors(self) -> list[SectorConfig]:
        return registry.active_sectors(self.sectors)

    def active_actions(self) -> list[StrategicAction]:
        """Active actions valid in the selected year."""
        return registry.active_actions(self.actions, self._year)

    def _persist_sectors(self, sectors: list[SectorConfig]) -> None:
        self.sectors = sectors
        self.store.write(SECTORS_KEY, [s.to_dict() for s in sectors])

    def _persist_actions(self, actions: list[StrategicAction]) -> None:
        self.actions = actions
        self.store.write(STRATEGIC_ACTIONS_KEY, [a.to_dict() for a in actions])

    def update_config(self, config: AppConfig) -> None:
        self.config = config
        self.store.write(APP_CONFIG_KEY, config.to_dict())
        logger.info("Saved institutional identity")

    def update_identity(
        self,
        institution_name: str,
        department_name: str,
        sub_department_name: str,
        logo: Optional[str] = None,
    ) -> None:
        if not institution_name.strip() or not department_name.strip():
            raise ValidationError("Preencha os nomes da instituição e do departamento.")
        self.update_config(replace(
            self.config,
            institution_name=institution_name.strip(),
            department_name=department_name.strip(),
            sub_department_name=sub_department_name.strip(),
            logo=logo if logo is not None else self.config.logo,
        ))

    def update_deadlines(self, deadlines: Deadlines) -> None:
        self.update_config(replace(self.config, deadlines=deadlines))

    def save_sector(self, sector: SectorConfig, editing_id: Optional[str] = None) -> None:
        self._persist_sectors(registry.save_sector(self.sectors, sector, editing_id))

    def toggle_sector(self, sector_id: str) -> None:
        self._persist_sectors(registry.toggle_sector(self.sectors, sector_id))
        if self.navigation == SectorView(sector_id) and not registry.get_sector(self.sectors, sector_id).is_active:
            self.navigation = Overview()

    def move_sector_up(self, index: int) -> None:
        self._persist_sectors(registry.move_up(self.sectors, index))

    def move_sector_down(self, index: int) -> None:
        self._persist_sectors(registry.move_down(self.sectors, index))

    def save_action(self, action: StrategicAction, editing_id: Optional[str] = None) -> None:
        self._persist_actions(registry.save_action(self.actions, action, editing_id))

    def toggle_action(self, action_id: str) -> None:
        self._persist_actions(registry.toggle_action(self.actions, action_id))

    def next_action_id(self) -> str:
        return registry.next_action_id(self.actions)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def navigate(self, target: NavigationTarget) -> None:
        if isinstance(target, SectorView):
            sector = registry.get_sector(self.sectors, target.sector_id)
            if not sector.is_active:
                raise NotFoundError(f"Setor '{sector.id}' está desativado.")
        self.navigation = target
