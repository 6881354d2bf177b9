"""Fortschreibung des Unit/Day-Cursors pro Buch.

Zwei Schemata mit identischer Arithmetik, unterschiedlichem Vokabular:
  unit-day:   "Unit 3 Day 2"
  volume-day: "3A-2 Day 4" (Volume statt Unit, Level-Kürzel vorangestellt)
"""

import logging
from typing import Optional

from config.schema import GeneratorConfig, ProgressionConfig
from models.book import Book, BookItem, UnitType
from models.lesson import START_CURSOR, ProgressCursor

logger = logging.getLogger(__name__)


def days_per_unit(book: Book, config: Optional[ProgressionConfig] = None) -> int:
    """Tage pro Unit (bzw. Volume); immer ≥ 1."""
    cfg = config or ProgressionConfig()
    if book.is_volume_based:
        if book.days_per_volume and book.days_per_volume > 0:
            return book.days_per_volume
        return cfg.default_days_per_volume
    if book.days_per_unit and book.days_per_unit > 0:
        return book.days_per_unit
    if book.unit_type == UnitType.DAY:
        return 1
    return cfg.default_days_per_unit


def unit_count(book: Book, config: Optional[ProgressionConfig] = None) -> int:
    """Nominale Anzahl Units (Volume-Bücher: Anzahl Volumes)."""
    cfg = config or ProgressionConfig()
    if book.is_volume_based:
        return book.volume_count or book.total_units or cfg.default_volume_count
    return book.total_units


def advance(
    cursor: ProgressCursor, book: Book, config: Optional[ProgressionConfig] = None
) -> ProgressCursor:
    """Cursor nach genau einer Einheit."""
    if cursor.day < days_per_unit(book, config):
        return ProgressCursor(unit=cursor.unit, day=cursor.day + 1)
    return ProgressCursor(unit=cursor.unit + 1, day=1)


def render_content(
    book: Book,
    cursor: Optional[ProgressCursor],
    config: Optional[ProgressionConfig] = None,
    labels: Optional[GeneratorConfig] = None,
) -> str:
    """Anzeigetext einer Einheit.

    Platzhalter-Bücher (Veranstaltungen) liefern ihren Namen, ohne Cursor
    wird ein Review-Text erzeugt.
    """
    cfg = config or ProgressionConfig()
    lbl = labels or GeneratorConfig()
    if book.is_event:
        return book.name or lbl.event_label
    if cursor is None:
        return lbl.review_label
    if book.is_volume_based:
        tag = book.level_tag or cfg.default_level_tag
        return f"{tag}-{cursor.unit} Day {cursor.day}"
    return f"Unit {cursor.unit} Day {cursor.day}"


def resume_cursor(
    book: Book,
    last_unit: Optional[int],
    last_day: Optional[int],
    config: Optional[ProgressionConfig] = None,
) -> ProgressCursor:
    """Cursor für die Einheit nach der zuletzt gespeicherten (unit, day).

    Ohne gespeicherte Werte beginnt das Buch bei (1, 1).
    """
    if last_unit is None or last_day is None:
        return START_CURSOR
    return advance(ProgressCursor(unit=last_unit, day=last_day), book, config)


def total_sessions(book: Book, config: Optional[ProgressionConfig] = None) -> int:
    """Nominale Anzahl Inhalts-Einheiten eines Buches (0 für Platzhalter)."""
    if book.is_event:
        return 0
    if book.total_sessions:
        return book.total_sessions
    return unit_count(book, config) * days_per_unit(book, config)


def sessions_completed(
    book: Book, cursor: ProgressCursor, config: Optional[ProgressionConfig] = None
) -> int:
    """Anzahl bereits unterrichteter Einheiten vor dem Cursor."""
    return (cursor.unit - 1) * days_per_unit(book, config) + (cursor.day - 1)


def remaining_sessions(
    book: Book, cursor: ProgressCursor, config: Optional[ProgressionConfig] = None
) -> int:
    """Einheiten bis zum nominalen Ende des Buches (nie negativ)."""
    return max(0, total_sessions(book, config) - sessions_completed(book, cursor, config))


def is_beyond_book(
    book: Book, cursor: ProgressCursor, config: Optional[ProgressionConfig] = None
) -> bool:
    """True wenn der Cursor hinter der letzten nominalen Unit steht.

    Bücher ohne Unit-Angabe gelten nie als überzogen.
    """
    if book.is_event:
        return False
    units = unit_count(book, config)
    return units > 0 and cursor.unit > units


def expand_book_units(
    book: Book,
    config: Optional[ProgressionConfig] = None,
    labels: Optional[GeneratorConfig] = None,
) -> list[BookItem]:
    """Vollständige Abfolge eines Buches: Lektionstage plus Wiederholungen.

    Nach jeweils `review_units` Units (bzw. Volumes) folgt ein Review-Eintrag.
    Sequenznummern sind lückenlos 1..N.
    """
    cfg = config or ProgressionConfig()
    lbl = labels or GeneratorConfig()
    if book.is_event:
        return []

    dpu = days_per_unit(book, cfg)
    units = unit_count(book, cfg)
    items: list[BookItem] = []
    review_no = 0

    def _add(item_type: str, unit_no=None, day_no=None, title: str = "") -> None:
        seq = len(items) + 1
        items.append(BookItem(
            id=f"{book.id}_{seq:04d}",
            book_id=book.id,
            sequence=seq,
            item_type=item_type,
            unit_no=unit_no,
            day_no=day_no,
            title=title,
        ))

    for unit in range(1, units + 1):
        for day in range(1, dpu + 1):
            if book.unit_type == UnitType.DAY and not book.is_volume_based:
                title = f"Day {unit}"
            else:
                title = render_content(book, ProgressCursor(unit=unit, day=day), cfg, lbl)
            _add("lesson", unit, day, title)
        if book.review_units and unit % book.review_units == 0:
            review_no += 1
            _add("review", title=f"{lbl.review_label} {review_no}")

    logger.debug(f"{book.name}: {len(items)} Einträge ({review_no} Reviews)")
    return items
