"""Validierung eines fertigen Lehrplans.

Prüft den erzeugten bzw. gespeicherten Plan als Sicherheitsnetz unabhängig
vom Generator.
"""

from collections import defaultdict
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from config.schema import ProgressionConfig
from engine.adjustments import check_contiguity
from engine.calendar_resolver import overrides_by_date
from engine.progression import advance, days_per_unit
from models.book import Book
from models.calendar import CalendarOverride, Holiday, OverrideKind
from models.lesson import LessonRecord


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    rule: str            # z.B. "progress_monotonic"
    description: str
    entity: str          # book_id / Datum / lesson_id


class ValidationReport(BaseModel):
    """Ergebnis der Plan-Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Plan-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=22)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.rule,
                v.entity,
                v.description,
            )
        console.print(table)


class PlanValidator:
    """Prüft eine Einheiten-Liste auf Regelverletzungen."""

    def __init__(self, config: Optional[ProgressionConfig] = None) -> None:
        self.config = config or ProgressionConfig()

    def validate(
        self,
        lessons: Sequence[LessonRecord],
        books: Sequence[Book],
        overrides: Sequence[CalendarOverride] = (),
        holidays: Sequence[Holiday] = (),
        owner_id: Optional[str] = None,
    ) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []
        book_map = {b.id: b for b in books}

        violations.extend(self._check_progress(lessons, book_map))
        violations.extend(self._check_calendar(lessons, overrides, holidays, owner_id))
        violations.extend(self._check_periods(lessons))
        violations.extend(self._check_unique_ids(lessons))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_progress(
        self, lessons: Sequence[LessonRecord], books: dict[str, Book]
    ) -> list[ValidationViolation]:
        """Unit fällt nie, Day bleibt ≤ Tage pro Unit, Abfolge ohne Sprünge."""
        violations: list[ValidationViolation] = []
        by_book: dict[str, list[LessonRecord]] = defaultdict(list)
        for l in sorted(lessons, key=lambda l: l.sort_key):
            if l.book_id and l.cursor is not None:
                by_book[l.book_id].append(l)

        for book_id, records in by_book.items():
            book = books.get(book_id)
            if book is None:
                violations.append(ValidationViolation(
                    severity="warning",
                    rule="unknown_book",
                    entity=book_id,
                    description=f"{len(records)} Einheiten verweisen auf ein unbekanntes Buch.",
                ))
                continue

            dpu = days_per_unit(book, self.config)
            prev = None
            for rec in records:
                cur = rec.cursor
                if cur.day > dpu:
                    violations.append(ValidationViolation(
                        severity="error",
                        rule="day_out_of_range",
                        entity=book_id,
                        description=f"{rec.date}: Day {cur.day} > {dpu} Tage pro Unit.",
                    ))
                if prev is not None:
                    if cur.unit < prev.unit or (cur.unit == prev.unit and cur.day <= prev.day):
                        violations.append(ValidationViolation(
                            severity="error",
                            rule="progress_monotonic",
                            entity=book_id,
                            description=f"{rec.date}: {cur} folgt auf {prev} (Rückschritt).",
                        ))
                    elif cur != advance(prev, book, self.config):
                        violations.append(ValidationViolation(
                            severity="warning",
                            rule="progress_gap",
                            entity=book_id,
                            description=f"{rec.date}: Sprung von {prev} auf {cur}.",
                        ))
                prev = cur
        return violations

    def _check_calendar(
        self,
        lessons: Sequence[LessonRecord],
        overrides: Sequence[CalendarOverride],
        holidays: Sequence[Holiday],
        owner_id: Optional[str],
    ) -> list[ValidationViolation]:
        """Keine Einheiten an no_class-Terminen; Feiertage nur mit Nachholtermin."""
        violations: list[ValidationViolation] = []
        special = overrides_by_date(overrides, owner_id)
        dates = sorted({l.date for l in lessons})

        for d in dates:
            o = special.get(d)
            if o is not None and o.kind == OverrideKind.NO_CLASS:
                violations.append(ValidationViolation(
                    severity="error",
                    rule="no_class_date",
                    entity=d,
                    description=f"Einheiten an unterrichtsfreiem Termin ({o.name or 'no_class'}).",
                ))
            elif (o is None or o.kind != OverrideKind.MAKEUP) and any(
                h.covers(d, owner_id) for h in holidays
            ):
                violations.append(ValidationViolation(
                    severity="warning",
                    rule="holiday_date",
                    entity=d,
                    description="Einheiten an einem Feiertag ohne Nachholtermin.",
                ))
        return violations

    def _check_periods(self, lessons: Sequence[LessonRecord]) -> list[ValidationViolation]:
        """Perioden pro Termin lückenlos 1..K, display_order eindeutig."""
        return [
            ValidationViolation(
                severity="error",
                rule="period_contiguity",
                entity=msg.split(":")[0],
                description=msg,
            )
            for msg in check_contiguity(lessons)
        ]

    def _check_unique_ids(self, lessons: Sequence[LessonRecord]) -> list[ValidationViolation]:
        seen: set[str] = set()
        violations: list[ValidationViolation] = []
        for l in lessons:
            if l.id in seen:
                violations.append(ValidationViolation(
                    severity="error",
                    rule="duplicate_id",
                    entity=l.id,
                    description="Einheit mehrfach vorhanden.",
                ))
            seen.add(l.id)
        return violations
