from config.schema import (
    CalendarConfig,
    GeneratorConfig,
    PlannerConfig,
    ProgressionConfig,
    SessionConfig,
)


def default_calendar() -> CalendarConfig:
    """Standard-Kalender einer Nachmittags-Akademie.

    Schuljahr beginnt im März, Unterricht standardmäßig Mo + Mi.
    Der erste Monat eines Laufs wird bis zum Sonntag der ersten Woche
    erweitert, damit das Kalenderraster keine leeren Anfangszellen hat.
    """
    return CalendarConfig(
        default_weekdays=["Mon", "Wed"],
        academic_year_start_month=3,
        extend_first_month=True,
        max_search_days=365,
        rollover_buffer_months=2,
    )


def default_sessions() -> SessionConfig:
    """Einheiten pro Termin und Monat.

    Unterrichtstage/Woche → Einheiten pro Termin:
      1 Tag   → 4 Einheiten
      2 Tage  → 3 Einheiten
      sonst   → 2 Einheiten

    Unterrichtstage/Woche → Soll-Einheiten pro Monat:
      2 Tage  → 8
      3 Tage  → 12
      sonst   → Tage × 4
    """
    return SessionConfig(
        slots_per_day_by_weekdays={1: 4, 2: 3},
        default_slots_per_day=2,
        monthly_target_by_weekdays={2: 8, 3: 12},
        weeks_per_month=4,
        homework_period_offset=1,
    )


def default_planner_config() -> PlannerConfig:
    """Komplette Default-Konfiguration."""
    return PlannerConfig(
        academy_name="Muster-Akademie",
        calendar=default_calendar(),
        sessions=default_sessions(),
        progression=ProgressionConfig(),
        generator=GeneratorConfig(),
    )


# ─── BUCH-KATALOG ───
# Beispielbücher für Testdaten. Pro Buch: Fortschrittsschema, Units,
# Tage pro Unit/Volume, Wiederholungs-Takt und Rolle.

SAMPLE_BOOK_CATALOG: dict[str, dict] = {
    "Reading Explorer 1": {
        "progression":  "unit-day",
        "unit_type":    "unit",
        "total_units":  12,
        "days_per_unit": 3,
        "review_units": 3,
        "level":        "R1",
        "category":     "Reading",
    },
    "Grammar Inside 2": {
        "progression":  "unit-day",
        "unit_type":    "unit",
        "total_units":  10,
        "days_per_unit": 2,
        "review_units": 5,
        "level":        "R1",
        "category":     "Grammar",
    },
    "Trophy 9 3A": {
        "progression":  "volume-day",
        "unit_type":    "unit",
        "total_units":  4,
        "volume_count": 4,
        "days_per_volume": 4,
        "review_units": 2,
        "level":        "M2",
        "category":     "Reading",
    },
    "Phonics Day by Day": {
        "progression":  "unit-day",
        "unit_type":    "day",
        "total_units":  40,
        "days_per_unit": None,
        "review_units": None,
        "level":        "M2",
        "category":     "Phonics",
    },
    "SCP Vocabulary 1": {
        "progression":  "unit-day",
        "unit_type":    "unit",
        "total_units":  20,
        "days_per_unit": 1,
        "review_units": None,
        "level":        "R1",
        "category":     "Homework",
    },
    "PBL Projekttag": {
        "progression":  "unit-day",
        "unit_type":    "event",
        "total_units":  0,
        "days_per_unit": None,
        "review_units": None,
        "level":        None,
        "category":     "Event",
    },
}


# ─── FEIERTAGE ───
# Monat/Tag → Bezeichnung. Bewegliche Feiertage sind nicht enthalten.

FIXED_HOLIDAYS: dict[str, str] = {
    "01-01": "Neujahr",
    "05-01": "Tag der Arbeit",
    "10-03": "Tag der Deutschen Einheit",
    "12-25": "1. Weihnachtstag",
    "12-26": "2. Weihnachtstag",
}
