"""Datenmodell für ein Lehrbuch (Pydantic v2)."""

import re
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel


class ProgressionScheme(str, Enum):
    UNIT_DAY = "unit-day"
    VOLUME_DAY = "volume-day"


class UnitType(str, Enum):
    UNIT = "unit"
    DAY = "day"
    LESSON = "lesson"
    EVENT = "event"       # Platzhalter ohne Inhalt (z.B. Projekttag)


class BookRole(str, Enum):
    MAIN = "main"
    HOMEWORK = "homework"  # SCP-Bücher: eigene Einheit hinter den regulären


# "Trophy 9", "Tropy9 3A", ... → Volume/Day-Schema, Gruppe 1 = Level-Kürzel
_VOLUME_SERIES_RE = re.compile(r"trop\w+\s*9(?:\s*([0-9A-Za-z]+))?", re.IGNORECASE)
_VOLUME_SERIES = "Trophy 9"
_HOMEWORK_PREFIX = "SCP"


class Book(BaseModel):
    """Repräsentiert ein Lehrbuch mit seiner Unit/Day-Struktur.

    Alle Fallbacks (Schema-Erkennung, Level-Kürzel, Rolle) werden einmalig
    beim Anlegen aufgelöst; Aufrufer lesen nur noch die normalisierten Felder.
    """

    id: str
    name: str
    progression: ProgressionScheme = ProgressionScheme.UNIT_DAY
    unit_type: UnitType = UnitType.UNIT
    role: BookRole = BookRole.MAIN
    total_units: int = 0
    days_per_unit: Optional[int] = None
    days_per_volume: Optional[int] = None
    volume_count: Optional[int] = None
    review_units: Optional[int] = None    # Wiederholung alle N Units
    total_sessions: Optional[int] = None
    series: Optional[str] = None
    series_level: Optional[str] = None
    level: Optional[str] = None
    level_tag: Optional[str] = None       # z.B. "3A" → "3A-2 Day 4"
    category: Optional[str] = None

    def model_post_init(self, __context) -> None:
        match = _VOLUME_SERIES_RE.search(self.name)
        if self.series == _VOLUME_SERIES or match:
            object.__setattr__(self, "progression", ProgressionScheme.VOLUME_DAY)
        if self.progression == ProgressionScheme.VOLUME_DAY and not self.level_tag:
            tag = self.series_level or (match.group(1) if match else None) or self.level
            object.__setattr__(self, "level_tag", tag)
        if self.name.startswith(_HOMEWORK_PREFIX):
            object.__setattr__(self, "role", BookRole.HOMEWORK)

    @property
    def is_volume_based(self) -> bool:
        return self.progression == ProgressionScheme.VOLUME_DAY

    @property
    def is_event(self) -> bool:
        """True für Platzhalter-Bücher (kein Inhalt, kein Fortschritt)."""
        return self.unit_type == UnitType.EVENT

    @property
    def is_homework(self) -> bool:
        return self.role == BookRole.HOMEWORK


class BookItem(BaseModel):
    """Ein Eintrag in der Abfolge eines Buches (Lektionstag oder Wiederholung)."""

    id: str
    book_id: str
    sequence: int                 # 1-basiert, lückenlos
    item_type: Literal["lesson", "review"] = "lesson"
    unit_no: Optional[int] = None
    day_no: Optional[int] = None
    title: str = ""
    has_video: bool = False
