"""JSON-Ablage der gespeicherten Lehrpläne pro Owner.

Speichern eines Monats löscht zuerst alle Einheiten des Owners im
Datumsbereich und fügt dann die neuen ein (last writer wins). Gleichzeitige
Läufe für denselben Owner/Monat muss der Aufrufer serialisieren.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel

from config.schema import ProgressionConfig
from engine.adjustments import check_contiguity, mark_saved, resequence
from engine.calendar_resolver import format_date_key, month_bounds
from engine.errors import SequenceConflictError
from engine.progression import resume_cursor
from models.book import Book
from models.lesson import LessonRecord, ProgressCursor

logger = logging.getLogger(__name__)

DEFAULT_STORE = Path("output") / "lesson_store.json"


class StoredPlans(BaseModel):
    """Dateiformat der Ablage."""

    lessons: dict[str, list[LessonRecord]] = {}
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"


class LessonStore:
    """Gespeicherte Einheiten aller Owner in einer JSON-Datei."""

    def __init__(self, path: Path = DEFAULT_STORE) -> None:
        self.path = Path(path)
        self._data = self._load()

    # ─── Lesen ────────────────────────────────────────────────────────────

    def _load(self) -> StoredPlans:
        if not self.path.exists():
            return StoredPlans()
        with open(self.path, "r", encoding="utf-8") as f:
            return StoredPlans.model_validate_json(f.read())

    def owners(self) -> list[str]:
        return sorted(self._data.lessons)

    def lessons(self, owner_id: str) -> list[LessonRecord]:
        """Alle Einheiten eines Owners in kanonischer Reihenfolge."""
        return sorted(self._data.lessons.get(owner_id, []), key=lambda l: l.sort_key)

    def lessons_between(self, owner_id: str, start: str, end: str) -> list[LessonRecord]:
        return [l for l in self.lessons(owner_id) if start <= l.date <= end]

    def last_lesson(self, owner_id: str, book_id: Optional[str] = None) -> Optional[LessonRecord]:
        """Letzte Einheit des Owners (optional nur eines Buches)."""
        candidates = [
            l for l in self.lessons(owner_id)
            if book_id is None or l.book_id == book_id
        ]
        return candidates[-1] if candidates else None

    def progress_before(
        self,
        owner_id: str,
        before_date: str,
        books: dict[str, Book],
        config: Optional[ProgressionConfig] = None,
    ) -> dict[str, ProgressCursor]:
        """Cursor pro Buch für eine Erzeugung ab `before_date`.

        Grundlage sind die strukturierten Felder (unit_no, day_no) der
        letzten gespeicherten Einheit vor dem Datum.
        """
        last: dict[str, LessonRecord] = {}
        for l in self.lessons(owner_id):
            if l.date >= before_date:
                break
            if l.book_id in books and l.cursor is not None:
                last[l.book_id] = l
        return {
            book_id: resume_cursor(books[book_id], rec.unit_no, rec.day_no, config)
            for book_id, rec in last.items()
        }

    # ─── Schreiben ────────────────────────────────────────────────────────

    def _check(self, lessons: Iterable[LessonRecord]) -> None:
        violations = check_contiguity(lessons)
        if violations:
            raise SequenceConflictError(
                "Plan wird nicht gespeichert: " + "; ".join(violations[:5])
            )

    def _store(self, owner_id: str, lessons: list[LessonRecord]) -> None:
        self._data.lessons[owner_id] = resequence(lessons)
        self.save()

    def save_range(
        self, owner_id: str, start: str, end: str, lessons: list[LessonRecord]
    ) -> int:
        """Ersetzt alle Einheiten des Owners zwischen start und end (inklusive).

        Returns:
            Anzahl gelöschter Einheiten.
        """
        self._check(lessons)
        outside = [l for l in self.lessons(owner_id) if not start <= l.date <= end]
        removed = len(self._data.lessons.get(owner_id, [])) - len(outside)
        self._store(owner_id, outside + mark_saved(lessons))
        logger.info(
            f"{owner_id}: {start}..{end} – {removed} Einheiten ersetzt durch {len(lessons)}"
        )
        return removed

    def save_month(
        self, owner_id: str, year: int, month: int, lessons: list[LessonRecord]
    ) -> int:
        """Speichert einen Monat (month 0-basiert).

        Der Bereich beginnt am Monatsersten oder, bei erweitertem erstem
        Monat, an der frühesten Einheit.
        """
        first, last = month_bounds(year, month)
        start = format_date_key(first)
        if lessons:
            start = min(start, min(l.date for l in lessons))
        return self.save_range(owner_id, start, format_date_key(last), lessons)

    def append(self, owner_id: str, lessons: list[LessonRecord]) -> None:
        """Hängt Einheiten an (Privatschüler-Blöcke), ohne Bestehendes zu löschen."""
        combined = resequence(self.lessons(owner_id) + mark_saved(lessons))
        self._check(combined)
        self._store(owner_id, combined)

    def replace(self, owner_id: str, lessons: list[LessonRecord]) -> None:
        """Ersetzt den kompletten Plan (nach manuellen Anpassungen).

        Neu eingefügte Einheiten (z.B. Reviews) gelten danach als gespeichert.
        """
        self._check(lessons)
        self._store(owner_id, mark_saved(lessons))

    def save(self) -> None:
        """Schreibt die Ablage als JSON-Datei."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data.modified_at = datetime.now(timezone.utc)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(self._data.model_dump_json(indent=2))
