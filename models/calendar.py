"""Kalender-Datenmodelle: Feiertage, Sondertermine, Kalender-Einträge (Pydantic v2)."""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


# Wochentage in Kalender-Reihenfolge (Woche beginnt am Sonntag)
WEEKDAYS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def normalize_weekday(value: str) -> str:
    """Normalisiert Wochentagsnamen: 'monday', 'MON', 'Mo.' → 'Mon'."""
    s = str(value).strip().lower()
    for name in WEEKDAYS:
        if s.startswith(name.lower()):
            return name
    raise ValueError(f"Unbekannter Wochentag: {value!r}")


def _check_iso_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Ungültiges Datum (erwartet YYYY-MM-DD): {value!r}") from e
    return value


class OverrideKind(str, Enum):
    NO_CLASS = "no_class"
    MAKEUP = "makeup"
    SCHOOL_EVENT = "school_event"


class CalendarOverride(BaseModel):
    """Sondertermin für ein einzelnes Datum.

    - no_class:     Termin fällt aus, auch an einem Unterrichtstag
    - makeup:       Nachholtermin, auch an einem sonst freien Tag
    - school_event: Veranstaltung belegt `sessions` Einheiten des Termins
    """

    date: str                      # "YYYY-MM-DD"
    kind: OverrideKind
    name: str = ""
    sessions: int = 1              # nur für school_event relevant
    scope: list[str] = []          # Owner-IDs; leer = alle

    @field_validator("date")
    @classmethod
    def _valid_date(cls, v: str) -> str:
        return _check_iso_date(v)

    @field_validator("sessions")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("sessions darf nicht negativ sein.")
        return v

    @property
    def is_global(self) -> bool:
        return not self.scope

    def applies_to(self, scope_id: Optional[str]) -> bool:
        """True wenn der Sondertermin für den Owner gilt (globale immer)."""
        return self.is_global or (scope_id is not None and scope_id in self.scope)


class Holiday(BaseModel):
    """Feiertag oder Ferienzeitraum (einzelner Tag: end = None)."""

    start: str                     # "YYYY-MM-DD"
    end: Optional[str] = None      # inklusive; None = nur start
    name: str = ""
    scope: list[str] = []          # Owner-IDs; leer = alle

    @field_validator("start", "end")
    @classmethod
    def _valid_date(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_iso_date(v)

    @model_validator(mode='after')
    def _check_range(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(
                f"Feiertag '{self.name}': Ende ({self.end}) liegt vor Beginn ({self.start})"
            )
        return self

    @property
    def last_day(self) -> str:
        return self.end or self.start

    def covers(self, day: str, scope_id: Optional[str] = None) -> bool:
        """True wenn der Tag im Zeitraum liegt und der Feiertag für den Owner gilt."""
        if self.scope and (scope_id is None or scope_id not in self.scope):
            return False
        # ISO-Strings sind lexikografisch sortierbar
        return self.start <= day <= self.last_day

    def days(self) -> list[str]:
        """Alle Tage des Zeitraums als ISO-Strings."""
        first = date.fromisoformat(self.start)
        last = date.fromisoformat(self.last_day)
        return [
            (first + timedelta(days=i)).isoformat()
            for i in range((last - first).days + 1)
        ]


class EventType(str, Enum):
    HOLIDAY = "holiday"
    VACATION = "vacation"
    SCHOOL_EVENT = "school_event"


class CalendarEvent(BaseModel):
    """Roh-Eintrag aus dem Akademie-Kalender.

    Feiertage und Ferien werden zu Holiday + no_class-Sonderterminen,
    Veranstaltungen zu school_event-Sonderterminen (je Tag des Zeitraums).
    """

    start: str
    end: Optional[str] = None
    type: EventType
    name: str = ""
    scope: list[str] = []
    sessions: int = 1

    @field_validator("start", "end")
    @classmethod
    def _valid_date(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_iso_date(v)

    @model_validator(mode='after')
    def _check_range(self):
        if self.end is not None and self.end < self.start:
            raise ValueError(
                f"Kalender-Eintrag '{self.name}': Ende ({self.end}) liegt vor Beginn ({self.start})"
            )
        return self

    def expand(self) -> tuple[list[Holiday], list[CalendarOverride]]:
        """Zerlegt den Eintrag in Feiertage und Sondertermine."""
        span = Holiday(start=self.start, end=self.end, name=self.name, scope=self.scope)
        if self.type == EventType.SCHOOL_EVENT:
            overrides = [
                CalendarOverride(date=d, kind=OverrideKind.SCHOOL_EVENT,
                                 name=self.name, sessions=self.sessions,
                                 scope=self.scope)
                for d in span.days()
            ]
            return [], overrides
        overrides = [
            CalendarOverride(date=d, kind=OverrideKind.NO_CLASS,
                             name=self.name, sessions=0, scope=self.scope)
            for d in span.days()
        ]
        return [span], overrides
