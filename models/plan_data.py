"""PlanData: Vollständiger Planungsdatensatz + Machbarkeits-Check (Pydantic v2)."""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from config.schema import PlannerConfig
from models.allocation import BookAllocation
from models.book import Book, BookItem
from models.calendar import CalendarEvent, CalendarOverride, Holiday
from models.owner import Owner


class FeasibilityReport(BaseModel):
    """Ergebnis des Machbarkeits-Checks."""

    is_feasible: bool
    errors: list[str]      # Kritische Probleme (Plan nicht erzeugbar)
    warnings: list[str]    # Hinweise (Plan erzeugbar, aber auffällig)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_feasible:
            status = "[bold green]✓ PLANBAR[/bold green]"
        else:
            status = "[bold red]✗ NICHT PLANBAR[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Machbarkeits-Check", border_style="cyan"))


class PlanData(BaseModel):
    """Vollständiger Datensatz: Owner, Bücher, Zuweisungen, Kalender."""

    owners: list[Owner]
    books: list[Book]
    allocations: list[BookAllocation]
    config: PlannerConfig
    holidays: list[Holiday] = []
    overrides: list[CalendarOverride] = []
    events: list[CalendarEvent] = []
    book_items: dict[str, list[BookItem]] = {}   # Buch-ID → bearbeitete Abfolge
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        num_private = sum(1 for o in self.owners if o.is_private)
        num_homework = sum(1 for b in self.books if b.is_homework)
        total_sessions = sum(a.planned_total for a in self.allocations)
        lines = [
            f"Akademie: {self.config.academy_name}",
            f"Owner: {len(self.owners)} "
            f"({len(self.owners) - num_private} Klassen, {num_private} Privatschüler)",
            f"Bücher: {len(self.books)} ({num_homework} Hausaufgaben)",
            f"Zuweisungen: {len(self.allocations)} ({total_sessions} Einheiten geplant)",
            f"Feiertage/Ferien: {len(self.holidays)}",
            f"Sondertermine: {len(self.overrides)}",
            f"Kalender-Einträge: {len(self.events)}" if self.events else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Zugriff ───

    def get_owner(self, owner_id: str) -> Optional[Owner]:
        return next((o for o in self.owners if o.id == owner_id), None)

    def get_book(self, book_id: str) -> Optional[Book]:
        return next((b for b in self.books if b.id == book_id), None)

    def books_by_id(self) -> dict[str, Book]:
        return {b.id: b for b in self.books}

    def allocations_for(self, owner_id: str) -> list[BookAllocation]:
        """Zuweisungen eines Owners in Prioritätsreihenfolge (stabil)."""
        return sorted(
            (a for a in self.allocations if a.owner_id == owner_id),
            key=lambda a: a.priority,
        )

    def all_holidays(self) -> list[Holiday]:
        """Feiertage inklusive der aus Kalender-Einträgen erzeugten."""
        result = list(self.holidays)
        for event in self.events:
            result.extend(event.expand()[0])
        return result

    def all_overrides(self) -> list[CalendarOverride]:
        """Sondertermine inklusive der aus Kalender-Einträgen erzeugten."""
        result = list(self.overrides)
        for event in self.events:
            result.extend(event.expand()[1])
        return result

    # ─── Machbarkeits-Check ───

    def validate_feasibility(self) -> FeasibilityReport:
        """Prüft ob der Datensatz grundsätzlich planbar ist.

        Prüfungen:
        1. Jeder Owner hat mindestens einen Unterrichtstag
        2. Höchstens ein Sondertermin pro Datum und Scope
        3. Zuweisungen verweisen auf bekannte Owner und Bücher
        4. Monatssumme je Klasse entspricht dem Soll
        5. Geplante Einheiten passen in das Buch-Budget
        """
        from engine.calendar_resolver import monthly_target
        from engine.distribution import academic_month_index
        from engine.progression import total_sessions

        errors: list[str] = []
        warnings: list[str] = []
        books = self.books_by_id()
        owner_ids = {o.id for o in self.owners}

        # ── 1. Unterrichtstage ───────────────────────────────────────────
        for owner in self.owners:
            if not owner.weekdays:
                errors.append(
                    f"Owner {owner.id} ({owner.name}): Keine Unterrichtstage definiert – "
                    f"es können keine Termine berechnet werden."
                )

        # ── 2. Sondertermine eindeutig ───────────────────────────────────
        keys = Counter(
            (o.date, tuple(sorted(o.scope)) or ("all",)) for o in self.all_overrides()
        )
        for (day, scope), count in sorted(keys.items()):
            if count > 1:
                errors.append(
                    f"Sondertermin {day}: {count} Einträge für Scope {', '.join(scope)} "
                    f"(höchstens einer erlaubt)."
                )

        # ── 3. Referenzen ────────────────────────────────────────────────
        for alloc in self.allocations:
            if alloc.owner_id not in owner_ids:
                warnings.append(f"Zuweisung {alloc.id}: Owner '{alloc.owner_id}' unbekannt.")
            if alloc.book_id not in books:
                warnings.append(
                    f"Zuweisung {alloc.id}: Buch '{alloc.book_id}' unbekannt – wird übersprungen."
                )

        # ── 4. Monats-Soll ───────────────────────────────────────────────
        academic_start = self.config.calendar.academic_year_start_month
        for owner in self.owners:
            if owner.is_private or not owner.weekdays:
                continue
            target = monthly_target(owner.weekdays, self.config.sessions)
            allocs = [
                a for a in self.allocations_for(owner.id)
                if a.book_id in books and not books[a.book_id].is_homework
            ]
            for offset in range(owner.duration):
                month = (owner.start_month + offset) % 12
                idx = academic_month_index(month, academic_start)
                planned = sum(a.sessions_for(idx) for a in allocs)
                if planned and planned != target:
                    warnings.append(
                        f"Owner {owner.id}, Monat {month + 1:02d}: {planned} Einheiten geplant, "
                        f"Soll {target}."
                    )

        # ── 5. Buch-Budgets ──────────────────────────────────────────────
        for alloc in self.allocations:
            book = books.get(alloc.book_id)
            if book is None or book.is_event:
                continue
            if alloc.total_sessions is not None and alloc.planned_total > alloc.total_sessions:
                warnings.append(
                    f"Zuweisung {alloc.id}: {alloc.planned_total} Einheiten geplant, "
                    f"Budget {alloc.total_sessions}."
                )
            nominal = total_sessions(book, self.config.progression)
            if nominal and alloc.planned_total > nominal:
                warnings.append(
                    f"Buch '{book.name}' ({alloc.owner_id}): {alloc.planned_total} Einheiten "
                    f"geplant, Buch hat nur {nominal} – Planung läuft über das Buchende."
                )

        return FeasibilityReport(
            is_feasible=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "PlanData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
