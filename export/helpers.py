"""Gemeinsame Hilfsfunktionen für Excel-Export und Konsolen-Ausgabe."""

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from engine.calendar_resolver import format_date_key, month_bounds, week_start
from models.book import Book
from models.calendar import CalendarOverride, OverrideKind
from models.lesson import LessonKind, LessonRecord

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "book_1":    "B3D4FF",
    "book_2":    "FFF2B3",
    "book_3":    "B3FFB3",
    "book_4":    "FFB3E6",
    "book_5":    "FFD4B3",
    "book_6":    "D4B3FF",
    "homework":  "E0E0E0",
    "review":    "FFFFB3",
    "event":     "FFD9B3",
    "no_class":  "FF9999",
    "makeup":    "B3FFE0",
    "free":      "F5F5F5",
    "outside":   "DDDDDD",
    "header":    "4472C4",
}

_BOOK_COLORS = [k for k in COLORS if k.startswith("book_")]

DAY_HEADERS = ["So", "Mo", "Di", "Mi", "Do", "Fr", "Sa"]


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def format_german_date(day: str) -> str:
    """'2026-03-05' → '05.03.2026'."""
    return date.fromisoformat(day).strftime("%d.%m.%Y")


# ─── Kalenderraster ───────────────────────────────────────────────────────────

def build_month_grid(year: int, month: int) -> list[list[Optional[str]]]:
    """Wochenzeilen eines Monats (Sonntag bis Samstag), month 0-basiert.

    Tage außerhalb des Monats sind None.
    """
    first, last = month_bounds(year, month)
    start = week_start(first)
    weeks: list[list[Optional[str]]] = []
    d = start
    while d <= last:
        week: list[Optional[str]] = []
        for _ in range(7):
            week.append(format_date_key(d) if first <= d <= last else None)
            d += timedelta(days=1)
        weeks.append(week)
    return weeks


# ─── Farben ───────────────────────────────────────────────────────────────────

def book_color(book_id: Optional[str], books: list[Book]) -> str:
    """Gibt die Hex-Farbe für ein Buch zurück (stabil nach Position in der Liste)."""
    for idx, b in enumerate(books):
        if b.id == book_id:
            if b.is_homework:
                return COLORS["homework"]
            if b.is_event:
                return COLORS["event"]
            return COLORS[_BOOK_COLORS[idx % len(_BOOK_COLORS)]]
    return COLORS["free"]


def lesson_color(lesson: LessonRecord, books: list[Book]) -> str:
    if lesson.kind == LessonKind.REVIEW:
        return COLORS["review"]
    if lesson.kind == LessonKind.EVENT and lesson.book_id is None:
        return COLORS["event"]
    return book_color(lesson.book_id, books)


def special_color(override: Optional[CalendarOverride]) -> Optional[str]:
    """Hintergrund für Sondertermine (None = keine Hervorhebung)."""
    if override is None:
        return None
    if override.kind == OverrideKind.NO_CLASS:
        return COLORS["no_class"]
    if override.kind == OverrideKind.MAKEUP:
        return COLORS["makeup"]
    return COLORS["event"]


# ─── Gruppierung ──────────────────────────────────────────────────────────────

def group_by_date(lessons: Iterable[LessonRecord]) -> dict[str, list[LessonRecord]]:
    """Datum → Einheiten des Termins (nach Periode sortiert)."""
    grouped: dict[str, list[LessonRecord]] = defaultdict(list)
    for l in sorted(lessons, key=lambda l: l.sort_key):
        grouped[l.date].append(l)
    return dict(grouped)


def group_by_month(lessons: Iterable[LessonRecord]) -> dict[str, list[LessonRecord]]:
    """'YYYY-MM' → Einheiten des Monats."""
    grouped: dict[str, list[LessonRecord]] = defaultdict(list)
    for l in sorted(lessons, key=lambda l: l.sort_key):
        grouped[l.month_key].append(l)
    return dict(grouped)


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_lesson(lesson: LessonRecord, short: bool = False) -> str:
    """Formatiert eine Einheit als Zelleninhalt.

    short=False: "3. Reading Explorer 1: Unit 2 Day 1"
    short=True:  "3. Unit 2 Day 1"
    """
    if short or not lesson.book_name:
        return f"{lesson.period}. {lesson.content}"
    return f"{lesson.period}. {lesson.book_name}: {lesson.content}"


def format_lessons(lessons: list[LessonRecord], short: bool = False) -> str:
    """Mehrere Einheiten eines Termins, eine pro Zeile."""
    return "\n".join(format_lesson(l, short) for l in lessons)
