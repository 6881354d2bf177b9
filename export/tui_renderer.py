"""Gemeinsamer Renderer für die Terminal-Anzeige eines Lehrplans.

Wird von cmd_plan, cmd_private und cmd_show (Rich) verwendet.
"""

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from models.lesson import LessonRecord
    from models.calendar import CalendarOverride


def render_plan_rows(lessons: Iterable["LessonRecord"]) -> list[list[str]]:
    """Gibt Tabellenzeilen für die Listenansicht zurück.

    Jede Zeile: [Nr., Datum, Wochentag, Periode, Buch, Inhalt, Status]
    Ein neuer Termin beginnt mit Datum und Wochentag, Folgezeilen lassen
    beide leer.
    """
    from export.helpers import DAY_HEADERS
    from datetime import date

    rows: list[list[str]] = []
    previous: Optional[str] = None
    for l in sorted(lessons, key=lambda l: l.sort_key):
        if l.date != previous:
            d = date.fromisoformat(l.date)
            day_cells = [d.strftime("%d.%m.%Y"), DAY_HEADERS[(d.weekday() + 1) % 7]]
            previous = l.date
        else:
            day_cells = ["", ""]
        content = l.content
        if l.kind.value == "review":
            content = f"↺ {content}"
        elif l.kind.value == "event":
            content = f"★ {content}"
        rows.append([
            str(l.display_order),
            *day_cells,
            str(l.period),
            l.book_name or "—",
            content,
            l.state.value,
        ])
    return rows


def render_month_calendar(
    year: int,
    month: int,
    lessons: Iterable["LessonRecord"],
    overrides: Optional[dict[str, "CalendarOverride"]] = None,
) -> list[list[str]]:
    """Gibt Wochenzeilen (So..Sa) für die Kalenderansicht eines Monats zurück.

    Zellen: Tag des Monats plus kompakte Einheiten ("1. Unit 2 Day 1"),
    Sondertermine mit Namen. Tage außerhalb des Monats bleiben leer.
    """
    from export.helpers import build_month_grid, format_lessons, group_by_date

    by_date = group_by_date(lessons)
    special = overrides or {}
    rows: list[list[str]] = []
    for week in build_month_grid(year, month):
        cells = []
        for day in week:
            if day is None:
                cells.append("")
                continue
            lines = [f"[bold]{int(day[8:10])}[/bold]"]
            o = special.get(day)
            if o is not None:
                lines.append(f"[italic]{o.name or o.kind.value}[/italic]")
            if day in by_date:
                lines.append(format_lessons(by_date[day], short=True))
            cells.append("\n".join(lines))
        rows.append(cells)
    return rows
