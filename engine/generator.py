"""Lehrplan-Generator.

Ablauf pro Monat (chronologisch):
  1. Monate ohne Zuweisungen oder ohne Termine überspringen
  2. Deck aus den regulären Zuweisungen bauen (Round Robin nach Priorität)
  3. Pro Termin: Veranstaltungen → reguläre Perioden 1..N → Hausaufgaben
  4. Inhalt aus dem aktuellen Cursor rendern, danach Cursor fortschreiben

Der Generator ist rein: keine I/O, kein globaler Zustand. Der Fortschritt
wird über `initial_progress` / `GenerationResult.final_progress` explizit
zwischen Aufrufen weitergereicht.
"""

import itertools
import logging
from datetime import date, timedelta
from typing import Iterator, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from analysis.capacity import CapacityReport, check_capacity
from config.schema import ExhaustionPolicy, PlannerConfig
from engine.calendar_resolver import next_class_dates, parse_local_date
from engine.deck import build_deck, order_allocations, split_homework
from engine.errors import PlanConfigurationError
from engine.progression import (
    advance,
    is_beyond_book,
    remaining_sessions,
    render_content,
    resume_cursor,
)
from models.allocation import MonthAllocation, MonthPlan
from models.book import Book
from models.calendar import CalendarOverride, Holiday
from models.lesson import START_CURSOR, LessonKind, LessonRecord, ProgressCursor
from models.owner import Owner

logger = logging.getLogger(__name__)

ProgressInput = Mapping[str, Union[ProgressCursor, dict]]


# ─── Ergebnis-Modell ──────────────────────────────────────────────────────────

class GenerationResult(BaseModel):
    """Ergebnis eines Generator-Laufs."""

    owner_id: str
    lessons: list[LessonRecord] = []
    final_progress: dict[str, ProgressCursor] = {}
    capacity: list[CapacityReport] = []
    warnings: list[str] = []
    exhausted_books: list[str] = []

    def lessons_for_month(self, month_key: str) -> list[LessonRecord]:
        """Alle Einheiten eines Kalendermonats ('YYYY-MM')."""
        return [l for l in self.lessons if l.month_key == month_key]

    def lessons_for_book(self, book_id: str) -> list[LessonRecord]:
        return [l for l in self.lessons if l.book_id == book_id]


# ─── Generator ────────────────────────────────────────────────────────────────

class LessonPlanGenerator:
    """Erzeugt die Einheiten-Abfolge eines Owners über mehrere Monate."""

    def __init__(
        self,
        books: Union[Sequence[Book], Mapping[str, Book]],
        config: Optional[PlannerConfig] = None,
    ) -> None:
        if isinstance(books, Mapping):
            self.books: dict[str, Book] = dict(books)
        else:
            self.books = {b.id: b for b in books}
        self.config = config or PlannerConfig()

    # ─── Öffentliche API ──────────────────────────────────────────────────

    def generate(
        self,
        owner_id: str,
        month_plans: Sequence[MonthPlan],
        plan_dates: Mapping[str, Sequence[str]],
        slots_per_day: int,
        initial_progress: Optional[ProgressInput] = None,
        owner_type: str = "class",
        initial_slots_used: Optional[Mapping[str, int]] = None,
        events: Optional[Mapping[str, CalendarOverride]] = None,
        display_order_start: int = 1,
    ) -> GenerationResult:
        """Erzeugt den Lehrplan.

        Args:
            owner_id: Klasse oder Privatschüler.
            month_plans: Monatspläne (Reihenfolge egal, wird sortiert).
            plan_dates: MonthPlan.key → aufgelöste Termine des Monats.
            slots_per_day: reguläre Einheiten pro Termin.
            initial_progress: book_id → Cursor, an dem fortgesetzt wird.
            owner_type: "class" oder "private".
            initial_slots_used: Datum → bereits belegte Perioden.
            events: Datum → Veranstaltung (belegt die ersten Perioden).
            display_order_start: erste vergebene display_order.

        Raises:
            PlanConfigurationError: ungültige Eingaben (vor der Erzeugung).
        """
        self._validate(month_plans, plan_dates, slots_per_day)

        result = GenerationResult(owner_id=owner_id)
        progress: dict[str, ProgressCursor] = {
            book_id: self._as_cursor(book_id, value)
            for book_id, value in (initial_progress or {}).items()
        }
        slots_used: dict[str, int] = dict(initial_slots_used or {})
        events = events or {}
        warned_missing: set[str] = set()
        orders = itertools.count(display_order_start)

        for plan in sorted(month_plans, key=lambda p: (p.year, p.month)):
            dates = list(plan_dates.get(plan.key, []))
            if not plan.allocations or not dates:
                logger.debug(f"{plan.label}: keine Zuweisungen oder Termine – übersprungen")
                continue

            active = self._active_allocations(plan, progress, result, warned_missing)
            regular, homework = split_homework(active, self.books)
            tie_break = self.config.generator.tie_break
            deck = build_deck(regular, tie_break) if regular else []
            hw_queue = {
                a.book_id: a.sessions for a in order_allocations(homework, tie_break)
            }

            occupied: dict[str, int] = {}
            for d in dates:
                base = slots_used.get(d, 0)
                event = events.get(d)
                taken = min(event.sessions, max(0, slots_per_day - base)) if event else 0
                occupied[d] = base + taken

            report = check_capacity(
                plan.key, len(deck), dates, slots_per_day, occupied, label=plan.label
            )
            result.capacity.append(report)
            if report.unplaced:
                logger.warning(f"{plan.label}: {report.message}")

            deck_pos = 0
            month_count = 0
            for d in dates:
                base = slots_used.get(d, 0)
                for period in range(base + 1, occupied[d] + 1):
                    result.lessons.append(
                        self._event_record(owner_id, owner_type, d, period, events[d], orders)
                    )
                    month_count += 1

                for period in range(occupied[d] + 1, slots_per_day + 1):
                    if deck_pos >= len(deck):
                        break
                    book_id = deck[deck_pos]
                    deck_pos += 1
                    result.lessons.append(self._emit(
                        owner_id, owner_type, d, period, book_id, progress, result, orders,
                    ))
                    month_count += 1

                hw_period = slots_per_day + self.config.sessions.homework_period_offset
                for book_id, left in hw_queue.items():
                    if left <= 0:
                        continue
                    hw_queue[book_id] = left - 1
                    result.lessons.append(self._emit(
                        owner_id, owner_type, d, hw_period, book_id, progress, result, orders,
                        kind=LessonKind.HOMEWORK,
                    ))
                    hw_period += 1
                    month_count += 1

                slots_used[d] = max(slots_used.get(d, 0), slots_per_day)

            logger.info(
                f"{plan.label}: {month_count} Einheiten auf {len(dates)} Terminen "
                f"({len(deck)} im Deck, {sum(a.sessions for a in homework)} Hausaufgaben)"
            )

        result.final_progress = progress
        return result

    # ─── Validierung ──────────────────────────────────────────────────────

    def _validate(
        self,
        month_plans: Sequence[MonthPlan],
        plan_dates: Mapping[str, Sequence[str]],
        slots_per_day: int,
    ) -> None:
        if slots_per_day < 1:
            raise PlanConfigurationError(
                f"slots_per_day muss mindestens 1 sein, nicht {slots_per_day}"
            )
        for plan in month_plans:
            if not 0 <= plan.month <= 11:
                raise PlanConfigurationError(
                    f"Ungültiger Monat {plan.month} in Plan {plan.key} (erwartet 0-11)"
                )
            for alloc in plan.allocations:
                if alloc.sessions <= 0:
                    raise PlanConfigurationError(
                        f"{plan.label}: Buch '{alloc.book_id}' hat nicht-positive "
                        f"Einheitenzahl {alloc.sessions}"
                    )
        for dates in plan_dates.values():
            for d in dates:
                parse_local_date(d)

    def _as_cursor(self, book_id: str, value: Union[ProgressCursor, dict]) -> ProgressCursor:
        if isinstance(value, ProgressCursor):
            return value
        try:
            return ProgressCursor.model_validate(value)
        except ValueError as e:
            raise PlanConfigurationError(
                f"Ungültiger Startfortschritt für Buch '{book_id}': {value!r}"
            ) from e

    # ─── Zuweisungen ──────────────────────────────────────────────────────

    def _active_allocations(
        self,
        plan: MonthPlan,
        progress: dict[str, ProgressCursor],
        result: GenerationResult,
        warned_missing: set[str],
    ) -> list[MonthAllocation]:
        """Zuweisungen mit bekanntem Buch, ggf. auf den Buchrest gekürzt."""
        active: list[MonthAllocation] = []
        policy = self.config.progression.exhaustion_policy
        for alloc in plan.allocations:
            book = self.books.get(alloc.book_id)
            if book is None:
                if alloc.book_id not in warned_missing:
                    warned_missing.add(alloc.book_id)
                    msg = f"Buch '{alloc.book_id}' nicht gefunden – Zuweisung übersprungen"
                    logger.warning(msg)
                    result.warnings.append(msg)
                continue

            if policy == ExhaustionPolicy.STOP and not book.is_event:
                cursor = progress.get(book.id, START_CURSOR)
                left = remaining_sessions(book, cursor, self.config.progression)
                if left < alloc.sessions:
                    msg = (f"{plan.label}: '{book.name}' auf {left} von "
                           f"{alloc.sessions} Einheiten gekürzt (Buchende)")
                    logger.warning(msg)
                    result.warnings.append(msg)
                    self._mark_exhausted(book, result)
                    if left == 0:
                        continue
                    alloc = alloc.model_copy(update={"sessions": left})
            active.append(alloc)
        return active

    def _mark_exhausted(self, book: Book, result: GenerationResult) -> None:
        if book.id not in result.exhausted_books:
            result.exhausted_books.append(book.id)

    # ─── Datensätze ───────────────────────────────────────────────────────

    def _emit(
        self,
        owner_id: str,
        owner_type: str,
        day: str,
        period: int,
        book_id: str,
        progress: dict[str, ProgressCursor],
        result: GenerationResult,
        orders: Iterator[int],
        kind: LessonKind = LessonKind.LESSON,
    ) -> LessonRecord:
        """Rendert eine Einheit aus dem aktuellen Cursor und schreibt ihn fort."""
        book = self.books[book_id]
        order = next(orders)
        record_id = f"{day}_{book_id}_{period}_{order}"
        prog_cfg = self.config.progression

        if book.is_event:
            return LessonRecord(
                id=record_id, owner_id=owner_id, owner_type=owner_type,
                date=day, period=period, display_order=order,
                book_id=book_id, book_name=book.name,
                content=render_content(book, None, prog_cfg, self.config.generator),
                kind=LessonKind.EVENT,
            )

        cursor = progress.get(book_id, START_CURSOR)
        if is_beyond_book(book, cursor, prog_cfg) and book.id not in result.exhausted_books:
            msg = f"'{book.name}' über das Buchende hinaus geplant (ab {cursor})"
            logger.warning(msg)
            result.warnings.append(msg)
            self._mark_exhausted(book, result)

        record = LessonRecord(
            id=record_id, owner_id=owner_id, owner_type=owner_type,
            date=day, period=period, display_order=order,
            book_id=book_id, book_name=book.name,
            content=render_content(book, cursor, prog_cfg, self.config.generator),
            unit_no=cursor.unit, day_no=cursor.day,
            kind=kind,
        )
        progress[book_id] = advance(cursor, book, prog_cfg)
        return record

    def _event_record(
        self,
        owner_id: str,
        owner_type: str,
        day: str,
        period: int,
        event: CalendarOverride,
        orders: Iterator[int],
    ) -> LessonRecord:
        order = next(orders)
        return LessonRecord(
            id=f"{day}_event_{period}_{order}",
            owner_id=owner_id, owner_type=owner_type,
            date=day, period=period, display_order=order,
            content=event.name or self.config.generator.event_label,
            kind=LessonKind.EVENT,
        )


# ─── Komfort-Funktionen ───────────────────────────────────────────────────────

def generate_lessons(
    owner_id: str,
    month_plans: Sequence[MonthPlan],
    plan_dates: Mapping[str, Sequence[str]],
    slots_per_day: int,
    books: Union[Sequence[Book], Mapping[str, Book]],
    initial_progress: Optional[ProgressInput] = None,
    config: Optional[PlannerConfig] = None,
) -> list[LessonRecord]:
    """Nur die Einheiten-Liste (ohne Berichte)."""
    generator = LessonPlanGenerator(books, config)
    return generator.generate(
        owner_id, month_plans, plan_dates, slots_per_day, initial_progress
    ).lessons


def generate_private_chunk(
    owner: Owner,
    book: Book,
    limit: int,
    holidays: Sequence[Holiday] = (),
    overrides: Sequence[CalendarOverride] = (),
    last_lesson: Optional[LessonRecord] = None,
    last_book_lesson: Optional[LessonRecord] = None,
    config: Optional[PlannerConfig] = None,
    today: Optional[date] = None,
) -> GenerationResult:
    """Die nächsten `limit` Einheiten eines Buches für einen Privatschüler.

    Termine beginnen am Tag nach der letzten Einheit des Owners (sonst am
    Startdatum, sonst heute). Der Fortschritt setzt hinter der letzten
    gespeicherten Einheit dieses Buches fort.
    """
    cfg = config or PlannerConfig()
    if limit < 1:
        raise PlanConfigurationError(f"limit muss positiv sein, nicht {limit}")

    if last_lesson is not None:
        start = parse_local_date(last_lesson.date) + timedelta(days=1)
    elif owner.start_date:
        start = parse_local_date(owner.start_date)
    else:
        start = today or date.today()

    dates = next_class_dates(
        start, owner.weekdays, limit, holidays, overrides,
        scope_id=owner.id, max_days=cfg.calendar.max_search_days,
    )
    if not dates:
        msg = f"Keine Termine für '{owner.name}' ab {start.isoformat()} gefunden"
        logger.warning(msg)
        return GenerationResult(owner_id=owner.id, warnings=[msg])

    if last_book_lesson is not None:
        cursor = resume_cursor(
            book, last_book_lesson.unit_no, last_book_lesson.day_no, cfg.progression
        )
    else:
        cursor = START_CURSOR

    first = parse_local_date(dates[0])
    plan = MonthPlan(
        year=first.year,
        month=first.month - 1,
        allocations=[MonthAllocation(book_id=book.id, sessions=limit)],
    )
    generator = LessonPlanGenerator([book], cfg)
    return generator.generate(
        owner.id,
        [plan],
        {plan.key: dates},
        owner.slots_per_day or 1,
        initial_progress={book.id: cursor},
        owner_type="private",
        display_order_start=(last_lesson.display_order + 1) if last_lesson else 1,
    )
