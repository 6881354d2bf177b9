"""Datenmodelle für Fortschritt und erzeugte Unterrichtseinheiten (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProgressCursor(BaseModel):
    """Fortschrittszeiger eines Buches: (Unit, Tag), beide 1-basiert.

    Immutable (frozen=True); Fortschreiben erzeugt einen neuen Cursor.
    """

    model_config = ConfigDict(frozen=True)

    unit: int = Field(1, ge=1)
    day: int = Field(1, ge=1)

    def __str__(self) -> str:
        return f"U{self.unit}/D{self.day}"


START_CURSOR = ProgressCursor(unit=1, day=1)


class LessonKind(str, Enum):
    LESSON = "lesson"
    REVIEW = "review"
    EVENT = "event"
    HOMEWORK = "homework"      # eigene Einheit hinter den regulären Perioden


class ItemState(str, Enum):
    PLANNED = "planned"        # gerade erzeugt
    SAVED = "saved"            # gespeichert
    REORDERED = "reordered"    # gespeichert und verschoben
    DELETED = "deleted"        # entfernt, nicht wiederherstellbar


class LessonRecord(BaseModel):
    """Eine geplante Unterrichtseinheit."""

    id: str
    owner_id: str
    owner_type: str = "class"           # "class" | "private"
    date: str                           # "YYYY-MM-DD"
    period: int                         # 1-basiert innerhalb des Termins
    display_order: int                  # globale Reihenfolge, 1-basiert
    book_id: Optional[str] = None
    book_name: str = ""
    content: str = ""                   # "Unit 3 Day 2" / "3A-2 Day 4" / "Review"
    unit_no: Optional[int] = None
    day_no: Optional[int] = None
    kind: LessonKind = LessonKind.LESSON
    state: ItemState = ItemState.PLANNED
    is_makeup: bool = False

    @property
    def cursor(self) -> Optional[ProgressCursor]:
        """Der beim Rendern verwendete Cursor (None für Reviews/Events)."""
        if self.unit_no is None or self.day_no is None:
            return None
        return ProgressCursor(unit=self.unit_no, day=self.day_no)

    @property
    def is_homework(self) -> bool:
        return self.kind == LessonKind.HOMEWORK

    @property
    def sort_key(self) -> tuple[str, int, int]:
        return (self.date, self.period, self.display_order)

    @property
    def month_key(self) -> str:
        """'YYYY-MM' des Termins."""
        return self.date[:7]
