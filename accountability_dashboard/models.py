"""
Data model: registry records, report entries, deliveries, app identity.

Every record round-trips through plain JSON dicts. The dict keys are the
camelCase names the persisted documents have always used, so data written
by earlier versions of the tool loads unchanged.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .config import DEFAULT_APP_CONFIG, DEFAULT_SECTOR_COLOR


def new_id() -> str:
    """Short random identifier for deliveries and attachments."""
    return uuid.uuid4().hex[:9]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Registry records
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class StrategicAction:
    """Catalog goal every sector reports against."""

    id: str
    title: str
    description: str = ""
    start_year: int = 0
    end_year: int = 0
    responsible: str = ""
    is_active: bool = True

    def is_valid_in(self, year: int) -> bool:
        """True if ``year`` falls inside the validity window.

        An unset window (zeros) is treated as always valid.
        """
        if not self.start_year and not self.end_year:
            return True
        start = self.start_year or year
        end = self.end_year or year
        return start <= year <= end

    @classmethod
    def from_dict(cls, data: dict) -> "StrategicAction":
        return cls(
            id=str(data["id"]),
            title=str(data.get("action") or data.get("title") or ""),
            description=str(data.get("description") or ""),
            start_year=_as_int(data.get("startYear"), 0),
            end_year=_as_int(data.get("endYear"), 0),
            responsible=str(data.get("responsible") or ""),
            is_active=data.get("isActive") is not False,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.title,
            "description": self.description,
            "startYear": self.start_year,
            "endYear": self.end_year,
            "responsible": self.responsible,
            "isActive": self.is_active,
        }


@dataclass(slots=True)
class SectorConfig:
    """Organizational unit. Display order is its position in the registry list."""

    id: str
    name: str
    short_name: str
    color: str = DEFAULT_SECTOR_COLOR
    sub_departments: list[str] = field(default_factory=list)
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "SectorConfig":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            short_name=str(data.get("shortName") or data.get("id")),
            color=str(data.get("color") or DEFAULT_SECTOR_COLOR),
            sub_departments=[str(s) for s in data.get("subDepartments") or []],
            is_active=data.get("isActive") is not False,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "shortName": self.short_name,
            "color": self.color,
            "subDepartments": list(self.sub_departments),
            "isActive": self.is_active,
        }


# ---------------------------------------------------------------------------
# Report records
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class AttachedFile:
    """Descriptor of a file attached as evidence to a delivery."""

    id: str
    name: str
    size: int = 0
    mime_type: str = ""
    preview_ref: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AttachedFile":
        return cls(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name") or ""),
            size=_as_int(data.get("size"), 0),
            mime_type=str(data.get("type") or ""),
            preview_ref=data.get("previewUrl"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "type": self.mime_type,
            "previewUrl": self.preview_ref,
        }


@dataclass(slots=True)
class DeliveryItem:
    """One concrete accomplishment. ``date`` is a free-text label such as 'Março/2025'."""

    id: str
    title: str
    date: str
    description: str = ""
    results: str = ""
    attachments: list[AttachedFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryItem":
        return cls(
            id=str(data.get("id") or new_id()),
            title=str(data.get("title") or ""),
            date=str(data.get("date") or ""),
            description=str(data.get("description") or ""),
            results=str(data.get("results") or ""),
            attachments=[AttachedFile.from_dict(a) for a in data.get("attachments") or []],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "description": self.description,
            "results": self.results,
            "attachments": [a.to_dict() for a in self.attachments],
        }


@dataclass(slots=True)
class ReportEntry:
    """The record for one (action, sector) pair in one fiscal year.

    ``has_activities`` False means the sector explicitly declared no activity
    for the action that year.
    """

    action_id: str
    sector_id: str
    deliveries: list[DeliveryItem] = field(default_factory=list)
    has_activities: bool = True
    last_updated: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.action_id, self.sector_id)

    @classmethod
    def from_dict(cls, data: dict) -> "ReportEntry":
        return cls(
            action_id=str(data["actionId"]),
            sector_id=str(data["sectorId"]),
            deliveries=[DeliveryItem.from_dict(d) for d in data.get("deliveries") or []],
            # Absent or null counts as active
            has_activities=data.get("hasActivities") is not False,
            last_updated=_as_int(data.get("lastUpdated"), 0),
        )

    def to_dict(self) -> dict:
        return {
            "actionId": self.action_id,
            "sectorId": self.sector_id,
            "deliveries": [d.to_dict() for d in self.deliveries],
            "hasActivities": self.has_activities,
            "lastUpdated": self.last_updated,
        }


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Deadlines:
    sector_deadline: str = ""
    final_deadline: str = ""
    show_banner: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Deadlines":
        if not isinstance(data, dict):
            data = DEFAULT_APP_CONFIG["deadlines"]
        return cls(
            sector_deadline=str(data.get("sectorDeadline") or ""),
            final_deadline=str(data.get("finalDeadline") or ""),
            show_banner=data.get("showBanner") is True,
        )

    def to_dict(self) -> dict:
        return {
            "sectorDeadline": self.sector_deadline,
            "finalDeadline": self.final_deadline,
            "showBanner": self.show_banner,
        }


@dataclass(slots=True)
class AppConfig:
    """Institution branding shown in the header and on generated reports."""

    institution_name: str
    department_name: str
    sub_department_name: str
    logo: Optional[str] = None
    deadlines: Deadlines = field(default_factory=Deadlines)

    @classmethod
    def default(cls) -> "AppConfig":
        return cls.from_dict(DEFAULT_APP_CONFIG)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        defaults = DEFAULT_APP_CONFIG
        if not isinstance(data, dict):
            data = defaults
        return cls(
            institution_name=str(data.get("institutionName") or defaults["institutionName"]),
            department_name=str(data.get("departmentName") or defaults["departmentName"]),
            sub_department_name=str(
                data.get("subDepartmentName") or defaults["subDepartmentName"]
            ),
            logo=data.get("logoUrl"),
            deadlines=Deadlines.from_dict(data.get("deadlines")),
        )

    def to_dict(self) -> dict:
        return {
            "institutionName": self.institution_name,
            "departmentName": self.department_name,
            "subDepartmentName": self.sub_department_name,
            "logoUrl": self.logo,
            "deadlines": self.deadlines.to_dict(),
        }


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Overview:
    """Consolidated view across all active sectors."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Administration screens."""


@dataclass(frozen=True, slots=True)
class SectorView:
    sector_id: str


NavigationTarget = Union[Overview, Settings, SectorView]


__all__ = [
    "StrategicAction",
    "SectorConfig",
    "AttachedFile",
    "DeliveryItem",
    "ReportEntry",
    "Deadlines",
    "AppConfig",
    "Overview",
    "Settings",
    "SectorView",
    "NavigationTarget",
    "new_id",
    "now_ms",
]
