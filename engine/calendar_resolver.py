"""Kalender-Resolver: gültige Unterrichtstermine eines Monats.

Alle Termine sind lokale Datums-Strings "YYYY-MM-DD", erzeugt aus
datetime.date (ohne Zeitzonen-Umrechnung).

Regeln pro Kalendertag:
  1. no_class-Sondertermin  → Termin entfällt (auch an Unterrichtstagen)
  2. makeup-Sondertermin    → Termin findet statt (auch an freien Tagen)
  3. sonst: Wochentag erlaubt UND kein Feiertag (global oder für den Owner)
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from config.schema import SessionConfig
from engine.errors import PlanConfigurationError
from models.allocation import MonthPlan
from models.calendar import (
    WEEKDAYS,
    CalendarOverride,
    Holiday,
    OverrideKind,
    normalize_weekday,
)

logger = logging.getLogger(__name__)


# ─── Datums-Hilfsfunktionen ───────────────────────────────────────────────────

def parse_local_date(value: str) -> date:
    """'YYYY-MM-DD' → date (ohne Uhrzeit, ohne Zeitzone)."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise PlanConfigurationError(f"Ungültiges Datum: {value!r}") from e


def format_date_key(d: date) -> str:
    return d.isoformat()


def weekday_name(d: date) -> str:
    """date → 'Sun'..'Sat'."""
    # date.weekday(): Montag = 0
    return WEEKDAYS[(d.weekday() + 1) % 7]


def week_start(d: date) -> date:
    """Sonntag der Kalenderwoche, in der d liegt."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Erster und letzter Tag eines Monats (month 0-basiert)."""
    if not 0 <= month <= 11:
        raise PlanConfigurationError(f"Ungültiger Monat: {month} (erwartet 0-11)")
    last = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, 1), date(year, month + 1, last)


def next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 0) if month == 11 else (year, month + 1)


def _allowed_set(allowed_weekdays: Iterable[str]) -> set[str]:
    allowed = {normalize_weekday(w) for w in allowed_weekdays}
    if not allowed:
        raise PlanConfigurationError(
            "Keine Unterrichtstage definiert – es können keine Termine berechnet werden."
        )
    return allowed


# ─── Sondertermine ────────────────────────────────────────────────────────────

def overrides_by_date(
    overrides: Iterable[CalendarOverride], scope_id: Optional[str] = None
) -> dict[str, CalendarOverride]:
    """Datum → gültiger Sondertermin für den Owner.

    Ein Owner-spezifischer Sondertermin hat Vorrang vor einem globalen.
    """
    result: dict[str, CalendarOverride] = {}
    for o in overrides:
        if not o.applies_to(scope_id):
            continue
        current = result.get(o.date)
        if current is None or (current.is_global and not o.is_global):
            result[o.date] = o
    return result


def is_holiday(day: str, holidays: Iterable[Holiday], scope_id: Optional[str] = None) -> bool:
    return any(h.covers(day, scope_id) for h in holidays)


def is_class_day(
    d: date,
    allowed: set[str],
    holidays: Sequence[Holiday],
    override_map: dict[str, CalendarOverride],
    scope_id: Optional[str] = None,
) -> bool:
    key = format_date_key(d)
    special = override_map.get(key)
    if special is not None and special.kind == OverrideKind.NO_CLASS:
        return False
    if special is not None and special.kind == OverrideKind.MAKEUP:
        return True
    if weekday_name(d) not in allowed:
        return False
    return not is_holiday(key, holidays, scope_id)


# ─── Öffentliche API ──────────────────────────────────────────────────────────

def resolve_dates(
    year: int,
    month: int,
    allowed_weekdays: Iterable[str],
    holidays: Sequence[Holiday] = (),
    overrides: Iterable[CalendarOverride] = (),
    scope_id: Optional[str] = None,
    extend_to_week_start: bool = False,
) -> list[str]:
    """Gibt alle gültigen Termine eines Monats aufsteigend zurück.

    Args:
        year: Kalenderjahr.
        month: Monat, 0-basiert (0 = Januar).
        allowed_weekdays: Unterrichtstage ("Mon".."Sun").
        holidays: Feiertage/Ferien (global oder mit Owner-Scope).
        overrides: Sondertermine (no_class, makeup, school_event).
        scope_id: Owner-ID für Owner-spezifische Feiertage/Sondertermine.
        extend_to_week_start: Bereich bis zum Sonntag vor dem 1. erweitern
            (nur für den ersten Monat eines Laufs).

    Raises:
        PlanConfigurationError: keine Unterrichtstage oder ungültiger Monat.
    """
    allowed = _allowed_set(allowed_weekdays)
    first, last = month_bounds(year, month)
    start = week_start(first) if extend_to_week_start else first
    override_map = overrides_by_date(overrides, scope_id)
    holidays = list(holidays)

    dates: list[str] = []
    d = start
    while d <= last:
        if is_class_day(d, allowed, holidays, override_map, scope_id):
            dates.append(format_date_key(d))
        d += timedelta(days=1)
    return dates


def resolve_run_dates(
    month_plans: Sequence[MonthPlan],
    allowed_weekdays: Iterable[str],
    holidays: Sequence[Holiday] = (),
    overrides: Iterable[CalendarOverride] = (),
    scope_id: Optional[str] = None,
    extend_first_month: bool = True,
) -> dict[str, list[str]]:
    """Termine für alle Monate eines Laufs (Schlüssel: MonthPlan.key).

    Nur der chronologisch erste Monat wird bis zum Wochenbeginn erweitert.
    Ein Datum wird höchstens einem Monat zugeordnet.
    """
    allowed = sorted(_allowed_set(allowed_weekdays))
    overrides = list(overrides)
    ordered = sorted(month_plans, key=lambda p: (p.year, p.month))

    seen: set[str] = set()
    result: dict[str, list[str]] = {}
    for idx, plan in enumerate(ordered):
        dates = resolve_dates(
            plan.year, plan.month, allowed, holidays, overrides, scope_id,
            extend_to_week_start=extend_first_month and idx == 0,
        )
        fresh = [d for d in dates if d not in seen]
        seen.update(fresh)
        result[plan.key] = fresh
    return result


def rollover_dates(
    month_plans: Sequence[MonthPlan],
    allowed_weekdays: Iterable[str],
    sessions_per_month: int,
    holidays: Sequence[Holiday] = (),
    overrides: Iterable[CalendarOverride] = (),
    scope_id: Optional[str] = None,
    buffer_months: int = 2,
) -> dict[str, list[str]]:
    """Fester Terminblock pro Monat aus einem durchgehenden Datumsstrom.

    Jeder Monat erhält genau `sessions_per_month` Termine (solange der Strom
    reicht). Überzählige Termine eines Monats rutschen in den Folgemonat,
    fehlende werden aus dem Folgemonat geliehen.
    """
    if sessions_per_month < 1:
        raise PlanConfigurationError(
            f"sessions_per_month muss positiv sein, nicht {sessions_per_month}"
        )
    allowed = sorted(_allowed_set(allowed_weekdays))
    ordered = sorted(month_plans, key=lambda p: (p.year, p.month))
    if not ordered:
        return {}
    overrides = list(overrides)

    stream: list[str] = []
    year, month = ordered[0].year, ordered[0].month
    for _ in range(len(ordered) + buffer_months):
        stream.extend(resolve_dates(year, month, allowed, holidays, overrides, scope_id))
        year, month = next_month(year, month)

    result: dict[str, list[str]] = {}
    cursor = 0
    for plan in ordered:
        result[plan.key] = stream[cursor:cursor + sessions_per_month]
        cursor += sessions_per_month
    return result


def next_class_dates(
    start: date,
    allowed_weekdays: Iterable[str],
    limit: int,
    holidays: Sequence[Holiday] = (),
    overrides: Iterable[CalendarOverride] = (),
    scope_id: Optional[str] = None,
    max_days: int = 365,
) -> list[str]:
    """Die nächsten `limit` Unterrichtstage ab `start` (inklusive).

    Die Suche endet spätestens nach `max_days` Kalendertagen.
    """
    if limit < 1:
        raise PlanConfigurationError(f"limit muss positiv sein, nicht {limit}")
    allowed = _allowed_set(allowed_weekdays)
    override_map = overrides_by_date(overrides, scope_id)
    holidays = list(holidays)

    dates: list[str] = []
    d = start
    for _ in range(max_days):
        if len(dates) >= limit:
            break
        if is_class_day(d, allowed, holidays, override_map, scope_id):
            dates.append(format_date_key(d))
        d += timedelta(days=1)

    if len(dates) < limit:
        logger.warning(
            f"Nur {len(dates)} von {limit} Terminen innerhalb von {max_days} Tagen "
            f"ab {start.isoformat()} gefunden"
        )
    return dates


def event_slots(
    dates: Iterable[str],
    overrides: Iterable[CalendarOverride],
    scope_id: Optional[str] = None,
) -> dict[str, CalendarOverride]:
    """Veranstaltungen (school_event) auf den angegebenen Terminen."""
    override_map = overrides_by_date(overrides, scope_id)
    result: dict[str, CalendarOverride] = {}
    for d in dates:
        special = override_map.get(d)
        if special is not None and special.kind == OverrideKind.SCHOOL_EVENT and special.sessions > 0:
            result[d] = special
    return result


# ─── Einheiten pro Termin / Monat ─────────────────────────────────────────────

def slots_per_day(weekdays: Sequence[str], config: Optional[SessionConfig] = None) -> int:
    """Einheiten pro Termin abhängig von der Anzahl Unterrichtstage/Woche."""
    cfg = config or SessionConfig()
    return cfg.slots_per_day_by_weekdays.get(len(weekdays), cfg.default_slots_per_day)


def monthly_target(weekdays: Sequence[str], config: Optional[SessionConfig] = None) -> int:
    """Soll-Einheiten pro Monat abhängig von der Anzahl Unterrichtstage/Woche."""
    cfg = config or SessionConfig()
    count = len(weekdays)
    return cfg.monthly_target_by_weekdays.get(count, count * cfg.weeks_per_month)
