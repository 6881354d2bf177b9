"""Datenmodell für eine Klasse oder einen Privatschüler (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from models.calendar import normalize_weekday


class OwnerType(str, Enum):
    CLASS = "class"
    PRIVATE = "private"


class Owner(BaseModel):
    """Klasse oder Privatschüler, für den ein Lehrplan erzeugt wird."""

    id: str
    name: str
    owner_type: OwnerType = OwnerType.CLASS
    weekdays: list[str] = []            # "Mon".."Sun"
    year: int = 2026                    # Kalenderjahr des ersten Plan-Monats
    start_month: int = 2                # 0-basiert (2 = März)
    duration: int = 3                   # Anzahl Plan-Monate
    start_date: Optional[str] = None    # nur Privatschüler: erster möglicher Termin
    slots_per_day: Optional[int] = None # None = aus Konfiguration

    @field_validator("weekdays")
    @classmethod
    def _normalize_weekdays(cls, v: list[str]) -> list[str]:
        normalized: list[str] = []
        for day in v:
            name = normalize_weekday(day)
            if name not in normalized:
                normalized.append(name)
        return normalized

    @field_validator("start_month")
    @classmethod
    def _check_month(cls, v: int) -> int:
        if not 0 <= v <= 11:
            raise ValueError(f"start_month muss 0-11 sein (0=Januar), nicht {v}")
        return v

    @property
    def is_private(self) -> bool:
        return self.owner_type == OwnerType.PRIVATE
