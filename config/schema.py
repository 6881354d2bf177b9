from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum


class TieBreak(str, Enum):
    """Reihenfolge bei gleicher Priorität im Deck."""
    INSERTION = "insertion"
    BOOK_ID = "book_id"


class ExhaustionPolicy(str, Enum):
    """Verhalten, wenn ein Buch über seine nominale Länge hinaus geplant wird."""
    # Weiterzählen und Warnung ausgeben
    FLAG = "flag"
    # Angefragte Einheiten auf den Rest des Buches kürzen
    STOP = "stop"


# ─── KALENDER ───

class CalendarConfig(BaseModel):
    """Kalender-Einstellungen für die Terminberechnung."""
    # Standard-Unterrichtstage für neue Klassen
    default_weekdays: list[str] = Field(
        default=["Mon", "Wed"],
        description="Standard-Unterrichtstage (Mon..Sun)")
    # Erster Monat des Schuljahres (1=Januar, 3=März)
    academic_year_start_month: int = Field(3, ge=1, le=12,
        description="Erster Monat des Schuljahres (1-12)")
    # Ersten Monat eines Laufs bis zum vorherigen Sonntag erweitern
    extend_first_month: bool = Field(True,
        description="Ersten Monat bis zum Wochenbeginn (Sonntag) erweitern")
    # Obergrenze für die Suche nach Unterrichtstagen (Schutz gegen leere Pläne)
    max_search_days: int = Field(365, ge=7, le=3650,
        description="Max. Tage bei der Suche nach Unterrichtstagen")
    # Zusätzliche Monate im Datumsstrom für den Übertrag (Rollover)
    rollover_buffer_months: int = Field(2, ge=0, le=12,
        description="Puffermonate für übertragene Termine")

    @field_validator("default_weekdays")
    @classmethod
    def _normalize_weekdays(cls, v: list[str]) -> list[str]:
        from models.calendar import normalize_weekday
        return [normalize_weekday(d) for d in v]


# ─── EINHEITEN PRO TAG / MONAT ───

class SessionConfig(BaseModel):
    """Anzahl der Unterrichtseinheiten pro Termin und Monat.

    Die Tabellen sind nach Anzahl der Unterrichtstage pro Woche geschlüsselt.
    Für alle nicht aufgeführten Anzahlen gilt der jeweilige Default.
    """
    # Unterrichtstage/Woche → Einheiten pro Termin
    slots_per_day_by_weekdays: dict[int, int] = Field(
        default={1: 4, 2: 3},
        description="Einheiten pro Termin je nach Unterrichtstagen/Woche")
    # Einheiten pro Termin für alle anderen Fälle
    default_slots_per_day: int = Field(2, ge=1, le=10,
        description="Einheiten pro Termin (Default)")
    # Unterrichtstage/Woche → Soll-Einheiten pro Monat
    monthly_target_by_weekdays: dict[int, int] = Field(
        default={2: 8, 3: 12},
        description="Soll-Einheiten pro Monat je nach Unterrichtstagen/Woche")
    # Sonst: Unterrichtstage × Wochen pro Monat
    weeks_per_month: int = Field(4, ge=1, le=5,
        description="Wochen pro Monat für die Soll-Berechnung")
    # Hausaufgaben-Bücher (SCP) liegen hinter den regulären Einheiten
    homework_period_offset: int = Field(1, ge=1,
        description="Abstand der Hausaufgaben-Einheit zur letzten regulären Einheit")

    @model_validator(mode='after')
    def validate_tables(self):
        """Alle Tabellenwerte müssen positiv sein."""
        for days, slots in self.slots_per_day_by_weekdays.items():
            if days < 1 or slots < 1:
                raise ValueError(
                    f"Ungültiger Eintrag slots_per_day_by_weekdays[{days}] = {slots}")
        for days, target in self.monthly_target_by_weekdays.items():
            if days < 1 or target < 1:
                raise ValueError(
                    f"Ungültiger Eintrag monthly_target_by_weekdays[{days}] = {target}")
        return self


# ─── FORTSCHRITT ───

class ProgressionConfig(BaseModel):
    """Defaults für die Unit/Day-Fortschreibung der Bücher."""
    # Tage pro Unit, wenn das Buch keinen Wert hat
    default_days_per_unit: int = Field(3, ge=1,
        description="Tage pro Unit (Default)")
    # Tage pro Volume für Volume/Day-Bücher ohne eigenen Wert
    default_days_per_volume: int = Field(4, ge=1,
        description="Tage pro Volume (Default)")
    # Anzahl Volumes, wenn das Buch keinen Wert hat
    default_volume_count: int = Field(4, ge=1,
        description="Volumes pro Buch (Default)")
    # Kürzel für Volume/Day-Bücher ohne eigenes Level
    default_level_tag: str = Field("T9",
        description="Level-Kürzel für Volume/Day-Bücher (Default)")
    # Verhalten bei überzogenem Buch
    exhaustion_policy: ExhaustionPolicy = Field(ExhaustionPolicy.FLAG,
        description="flag = weiterzählen + Warnung, stop = kürzen")


# ─── GENERATOR ───

class GeneratorConfig(BaseModel):
    """Einstellungen des Lehrplan-Generators."""
    # Reihenfolge bei gleicher Priorität
    tie_break: TieBreak = Field(TieBreak.INSERTION,
        description="Reihenfolge bei gleicher Priorität")
    # Anzeigetext für Wiederholungen
    review_label: str = Field("Review",
        description="Anzeigetext für Wiederholungen")
    # Anzeigetext für Veranstaltungs-Platzhalter
    event_label: str = Field("Event",
        description="Anzeigetext für Veranstaltungen")


# ─── GESAMT-CONFIG ───

class PlannerConfig(BaseModel):
    """Gesamtkonfiguration des Unterrichtsplaners."""
    # Name der Akademie
    academy_name: str = Field("Muster-Akademie",
        description="Name der Akademie")
    # Kalender-Einstellungen
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    # Einheiten pro Termin/Monat
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    # Unit/Day-Defaults
    progression: ProgressionConfig = Field(default_factory=ProgressionConfig)
    # Generator-Einstellungen
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
