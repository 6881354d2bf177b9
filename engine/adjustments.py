"""Manuelle Anpassungen an einem erzeugten bzw. gespeicherten Lehrplan.

Alle Operationen sind rein: sie liefern neue Listen und nummerieren
Perioden und display_order vollständig neu (nie inkrementell), so dass
pro Termin stets die Perioden 1..K belegt sind.

Zustände einer Einheit:
  planned → saved → reordered → deleted
"""

import logging
from collections import defaultdict
from typing import Iterable, Optional, Sequence

from engine.errors import (
    AdjustmentError,
    InvalidTransitionError,
    SequenceConflictError,
)
from models.book import BookItem
from models.lesson import ItemState, LessonKind, LessonRecord

logger = logging.getLogger(__name__)

# Zwischen-Offset beim Umsortieren von Buch-Einträgen
SEQUENCE_OFFSET = 100000

ALLOWED_TRANSITIONS: dict[ItemState, set[ItemState]] = {
    ItemState.PLANNED: {ItemState.SAVED},
    ItemState.SAVED: {ItemState.REORDERED, ItemState.DELETED},
    ItemState.REORDERED: {ItemState.REORDERED, ItemState.DELETED},
    ItemState.DELETED: set(),
}


# ─── Zustandsautomat ──────────────────────────────────────────────────────────

def transition(record: LessonRecord, target: ItemState) -> LessonRecord:
    """Neuer Datensatz im Zielzustand.

    Raises:
        InvalidTransitionError: Übergang nicht erlaubt.
    """
    if target not in ALLOWED_TRANSITIONS[record.state]:
        raise InvalidTransitionError(
            f"Einheit '{record.id}': Übergang {record.state.value} → "
            f"{target.value} nicht erlaubt"
        )
    return record.model_copy(update={"state": target})


def mark_saved(lessons: Iterable[LessonRecord]) -> list[LessonRecord]:
    """Setzt alle geplanten Einheiten auf 'saved' (andere bleiben unverändert)."""
    return [
        transition(l, ItemState.SAVED) if l.state == ItemState.PLANNED else l
        for l in lessons
    ]


def _touch(record: LessonRecord, **changes) -> LessonRecord:
    """Ändert Datum/Periode; gespeicherte Einheiten werden 'reordered'."""
    changed = {k: v for k, v in changes.items() if getattr(record, k) != v}
    if not changed:
        return record
    if record.state in (ItemState.SAVED, ItemState.REORDERED):
        changed["state"] = ItemState.REORDERED
    elif record.state == ItemState.DELETED:
        raise InvalidTransitionError(f"Einheit '{record.id}' ist gelöscht")
    return record.model_copy(update=changed)


# ─── Neunummerierung ──────────────────────────────────────────────────────────

def resequence(lessons: Iterable[LessonRecord], start: int = 1) -> list[LessonRecord]:
    """Sortiert nach (Datum, Periode, display_order) und vergibt display_order neu."""
    ordered = sorted(lessons, key=lambda l: l.sort_key)
    result: list[LessonRecord] = []
    for offset, record in enumerate(ordered):
        order = start + offset
        if record.display_order != order:
            record = record.model_copy(update={"display_order": order})
        result.append(record)
    return result


def _renumber_day(day_items: Sequence[LessonRecord]) -> list[LessonRecord]:
    """Perioden eines Termins in gegebener Reihenfolge auf 1..K setzen.

    Hausaufgaben-Einheiten bleiben hinter den regulären Perioden.
    """
    regular = [l for l in day_items if not l.is_homework]
    homework = sorted((l for l in day_items if l.is_homework), key=lambda l: l.period)
    result = [_touch(l, period=idx) for idx, l in enumerate(regular, start=1)]
    if homework:
        hw_start = max(homework[0].period, len(regular) + 1)
        result.extend(
            _touch(l, period=hw_start + idx) for idx, l in enumerate(homework)
        )
    return result


def _day_order(lessons: Iterable[LessonRecord], day: str) -> list[LessonRecord]:
    return sorted((l for l in lessons if l.date == day), key=lambda l: (l.period, l.display_order))


def _find(lessons: Sequence[LessonRecord], lesson_id: str) -> LessonRecord:
    for l in lessons:
        if l.id == lesson_id:
            if l.state == ItemState.DELETED:
                raise AdjustmentError(f"Einheit '{lesson_id}' ist gelöscht")
            return l
    raise AdjustmentError(f"Einheit '{lesson_id}' nicht gefunden")


def check_contiguity(lessons: Iterable[LessonRecord]) -> list[str]:
    """Prüft Perioden (1..K pro Termin) und display_order (eindeutig).

    Returns:
        Liste der Verstöße (leer = in Ordnung).
    """
    lessons = list(lessons)
    violations: list[str] = []
    by_date: dict[str, list[LessonRecord]] = defaultdict(list)
    for l in lessons:
        by_date[l.date].append(l)

    for day in sorted(by_date):
        regular = sorted(l.period for l in by_date[day] if not l.is_homework)
        if regular != list(range(1, len(regular) + 1)):
            violations.append(f"{day}: Perioden {regular} nicht lückenlos 1..{len(regular)}")
        homework = [l.period for l in by_date[day] if l.is_homework]
        if len(set(homework)) != len(homework):
            violations.append(f"{day}: doppelte Hausaufgaben-Perioden {sorted(homework)}")
        if homework and regular and min(homework) <= regular[-1]:
            violations.append(f"{day}: Hausaufgaben-Periode vor regulärer Periode")

    seen: dict[int, str] = {}
    for l in lessons:
        if l.display_order in seen:
            violations.append(
                f"display_order {l.display_order} doppelt ({seen[l.display_order]}, {l.id})"
            )
        else:
            seen[l.display_order] = l.id
    return violations


# ─── Einheiten: Review, Verschieben, Löschen ──────────────────────────────────

def insert_review(
    lessons: Sequence[LessonRecord],
    after_order: int,
    book_id: Optional[str] = None,
    label: str = "Review",
) -> list[LessonRecord]:
    """Fügt eine Wiederholung hinter der Einheit mit display_order = after_order ein.

    Die Wiederholung landet am selben Termin eine Periode später; spätere
    Perioden dieses Termins rücken auf. after_order = 0 fügt vor der ersten
    Einheit ein. Wiederholungen haben keinen Unit/Day-Stand.
    """
    ordered = resequence(lessons)
    if not ordered:
        raise AdjustmentError("Leerer Plan – kein Einfügepunkt")
    if not 0 <= after_order <= len(ordered):
        raise AdjustmentError(
            f"Einfügeposition {after_order} außerhalb von 0..{len(ordered)}"
        )

    if after_order == 0:
        anchor_date, anchor_period = ordered[0].date, 0
        owner = ordered[0]
    else:
        owner = ordered[after_order - 1]
        anchor_date, anchor_period = owner.date, owner.period

    shifted: list[LessonRecord] = []
    for l in ordered:
        if l.date == anchor_date and l.period > anchor_period:
            l = _touch(l, period=l.period + 1)
        if l.display_order > after_order:
            l = l.model_copy(update={"display_order": l.display_order + 1})
        shifted.append(l)

    period = anchor_period + 1
    order = after_order + 1
    review = LessonRecord(
        id=f"{anchor_date}_review_{period}_{order}",
        owner_id=owner.owner_id,
        owner_type=owner.owner_type,
        date=anchor_date,
        period=period,
        display_order=order,
        book_id=book_id,
        content=label,
        kind=LessonKind.REVIEW,
    )
    shifted.append(review)
    others = [l for l in shifted if l.date != anchor_date]
    logger.info(f"Review an Position {order} ({anchor_date}, Periode {period}) eingefügt")
    return resequence(others + _renumber_day(_day_order(shifted, anchor_date)))


def move_lesson(
    lessons: Sequence[LessonRecord],
    lesson_id: str,
    target_date: str,
    position: Optional[int] = None,
) -> list[LessonRecord]:
    """Verschiebt eine Einheit auf einen anderen (oder denselben) Termin.

    position ist die 1-basierte Ziel-Periode unter den regulären Einheiten
    des Zieltermins (None = ans Ende). Nur Quell- und Zieltermin werden neu
    nummeriert.
    """
    lessons = list(lessons)
    moving = _find(lessons, lesson_id)
    if position is not None and position < 1:
        raise AdjustmentError(f"Ungültige Position {position} (mindestens 1)")

    source_date = moving.date
    untouched = [l for l in lessons if l.date not in (source_date, target_date)]

    source_items = [l for l in _day_order(lessons, source_date) if l.id != lesson_id]
    if source_date == target_date:
        target_items = source_items
    else:
        target_items = _day_order(lessons, target_date)

    regular = [l for l in target_items if not l.is_homework]
    homework = [l for l in target_items if l.is_homework]
    moved = _touch(moving, date=target_date)
    if moved.is_homework:
        homework.append(moved)
    else:
        idx = len(regular) if position is None else min(position - 1, len(regular))
        regular.insert(idx, moved)

    result = untouched + _renumber_day(regular + homework)
    if source_date != target_date:
        result += _renumber_day(source_items)
    logger.info(f"Einheit {lesson_id}: {source_date} → {target_date}")
    return resequence(result)


def reorder_within_day(
    lessons: Sequence[LessonRecord], source_id: str, target_id: str
) -> list[LessonRecord]:
    """Zieht eine Einheit auf die Position einer anderen Einheit desselben Termins."""
    source = _find(lessons, source_id)
    target = _find(lessons, target_id)
    if source.date != target.date:
        raise AdjustmentError(
            f"Einheiten liegen an verschiedenen Terminen ({source.date}, {target.date})"
        )
    if source_id == target_id:
        return resequence(lessons)
    regular = [l for l in _day_order(lessons, source.date) if not l.is_homework]
    position = next(i for i, l in enumerate(regular, start=1) if l.id == target_id)
    return move_lesson(lessons, source_id, source.date, position)


def delete_lesson(lessons: Sequence[LessonRecord], lesson_id: str) -> list[LessonRecord]:
    """Löscht eine gespeicherte Einheit und schließt die Lücke.

    Raises:
        InvalidTransitionError: Einheit ist noch nicht gespeichert.
    """
    lessons = list(lessons)
    target = _find(lessons, lesson_id)
    transition(target, ItemState.DELETED)

    day_items = [l for l in _day_order(lessons, target.date) if l.id != lesson_id]
    others = [l for l in lessons if l.date != target.date]
    logger.info(f"Einheit {lesson_id} ({target.date}, Periode {target.period}) gelöscht")
    return resequence(others + _renumber_day(day_items))


# ─── Buch-Einträge ────────────────────────────────────────────────────────────

def _renumber_items(items: Iterable[BookItem]) -> list[BookItem]:
    ordered = sorted(items, key=lambda i: i.sequence)
    return [
        i if i.sequence == seq else i.model_copy(update={"sequence": seq})
        for seq, i in enumerate(ordered, start=1)
    ]


def insert_book_review(
    items: Sequence[BookItem],
    after_sequence: int,
    book_id: str,
    title: str = "Review",
    has_video: bool = False,
) -> list[BookItem]:
    """Fügt einen Review-Eintrag hinter Sequenz P ein (alle > P rücken auf)."""
    if not 0 <= after_sequence <= len(items):
        raise AdjustmentError(
            f"Einfügeposition {after_sequence} außerhalb von 0..{len(items)}"
        )
    ordered = _renumber_items(items)
    shifted = [
        i.model_copy(update={"sequence": i.sequence + 1}) if i.sequence > after_sequence else i
        for i in ordered
    ]
    review_count = sum(1 for i in ordered if i.item_type == "review")
    shifted.append(BookItem(
        id=f"{book_id}_review_{review_count + 1}",
        book_id=book_id,
        sequence=after_sequence + 1,
        item_type="review",
        title=title,
        has_video=has_video,
    ))
    return _renumber_items(shifted)


def delete_book_item(items: Sequence[BookItem], item_id: str) -> list[BookItem]:
    """Entfernt einen Eintrag; spätere Sequenzen rücken nach."""
    if not any(i.id == item_id for i in items):
        raise AdjustmentError(f"Eintrag '{item_id}' nicht gefunden")
    return _renumber_items(i for i in items if i.id != item_id)


def reorder_sequence(
    items: Sequence[BookItem],
    new_order: Sequence[tuple[str, int]],
    book_id: Optional[str] = None,
) -> list[BookItem]:
    """Setzt explizite Sequenznummern für eine Auswahl von Einträgen.

    Zweiphasig: zuerst alle betroffenen Einträge um SEQUENCE_OFFSET
    verschieben, dann die Zielwerte setzen. Abschließend lückenlos 1..N.

    Raises:
        SequenceConflictError: doppelte Ziel-Sequenzen oder Kollision.
        AdjustmentError: unbekannte Einträge oder fremdes Buch.
    """
    if not new_order:
        raise AdjustmentError("Keine Einträge zum Umsortieren")
    sequences = [seq for _, seq in new_order]
    if len(set(sequences)) != len(sequences):
        raise SequenceConflictError(f"Doppelte Sequenzwerte: {sorted(sequences)}")
    ids = [item_id for item_id, _ in new_order]
    if len(set(ids)) != len(ids):
        raise SequenceConflictError("Eintrag mehrfach in der neuen Reihenfolge")

    by_id = {i.id: i for i in items}
    for item_id in ids:
        item = by_id.get(item_id)
        if item is None:
            raise AdjustmentError(f"Eintrag '{item_id}' nicht gefunden")
        if book_id is not None and item.book_id != book_id:
            raise AdjustmentError(f"Eintrag '{item_id}' gehört nicht zu Buch '{book_id}'")

    # Phase 1: Zwischenwerte außerhalb des belegten Bereichs
    staged = dict(by_id)
    for item_id, seq in new_order:
        staged[item_id] = staged[item_id].model_copy(update={"sequence": seq + SEQUENCE_OFFSET})
    # Phase 2: Zielwerte
    for item_id, seq in new_order:
        staged[item_id] = staged[item_id].model_copy(update={"sequence": seq})

    final = [staged[i.id] for i in items]
    used = [i.sequence for i in final]
    if len(set(used)) != len(used):
        raise SequenceConflictError(
            "Neue Sequenzen kollidieren mit nicht verschobenen Einträgen"
        )
    return _renumber_items(final)
