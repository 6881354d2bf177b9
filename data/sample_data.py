"""Beispieldaten-Generator für den Unterrichtsplaner.

Erzeugt einen reproduzierbaren Datensatz (Seed) mit typischen Sonderfällen:
  1. Volume/Day-Buch (Trophy 9) neben Unit/Day-Büchern
  2. Hausaufgaben-Buch (SCP) hinter den regulären Einheiten
  3. Nachholtermin an einem Samstag, ausfallender Mittwoch
  4. Sportfest (school_event) und Sommerferien als Kalender-Einträge
  5. Ein Privatschüler mit eigenem Startdatum
"""

import random
from typing import Optional

from config.defaults import FIXED_HOLIDAYS, SAMPLE_BOOK_CATALOG
from config.schema import PlannerConfig
from engine.calendar_resolver import monthly_target
from engine.distribution import academic_month_index, distribute_sessions
from models.allocation import BookAllocation
from models.book import Book
from models.calendar import CalendarEvent, CalendarOverride, EventType, Holiday, OverrideKind
from models.owner import Owner, OwnerType
from models.plan_data import PlanData

# ─── Klassen-Vorlagen ─────────────────────────────────────────────────────────

_CLASS_TEMPLATES: list[tuple[str, list[str]]] = [
    ("Starter A", ["Mon", "Wed"]),
    ("Starter B", ["Tue", "Thu"]),
    ("Junior A", ["Mon", "Wed", "Fri"]),
    ("Samstagskurs", ["Sat"]),
]

_PRIVATE_NAMES = ["Lena", "Jonas", "Mia", "Paul", "Emma", "Noah"]

_SAMPLE_YEAR = 2026


class SampleDataGenerator:
    """Generiert einen vollständigen Beispiel-Datensatz auf Basis der PlannerConfig."""

    def __init__(self, config: PlannerConfig, seed: Optional[int] = 42) -> None:
        self.config = config
        self.rng = random.Random(seed)

    # ─── Bücher ───────────────────────────────────────────────────────────────

    def _generate_books(self) -> list[Book]:
        """Erzeugt alle Bücher aus dem SAMPLE_BOOK_CATALOG."""
        books = []
        for idx, (name, meta) in enumerate(SAMPLE_BOOK_CATALOG.items(), start=1):
            books.append(Book(id=f"B{idx:02d}", name=name, **meta))
        return books

    # ─── Owner ────────────────────────────────────────────────────────────────

    def _generate_owners(self, num_classes: int) -> list[Owner]:
        owners = []
        for idx, (name, weekdays) in enumerate(_CLASS_TEMPLATES[:num_classes], start=1):
            owners.append(Owner(
                id=f"K{idx:02d}",
                name=name,
                weekdays=weekdays,
                year=_SAMPLE_YEAR,
                start_month=2,
                duration=3,
            ))
        owners.append(Owner(
            id="P01",
            name=f"Privat {self.rng.choice(_PRIVATE_NAMES)}",
            owner_type=OwnerType.PRIVATE,
            weekdays=self.rng.choice([["Tue"], ["Thu"], ["Tue", "Fri"]]),
            year=_SAMPLE_YEAR,
            start_date=f"{_SAMPLE_YEAR}-03-03",
        ))
        return owners

    # ─── Zuweisungen ──────────────────────────────────────────────────────────

    def _generate_allocations(self, owners: list[Owner], books: list[Book]) -> list[BookAllocation]:
        """Pro Klasse 2-3 Hauptbücher (Monats-Soll verteilt) plus Hausaufgabenbuch."""
        main_books = [b for b in books if not b.is_homework and not b.is_event]
        homework = [b for b in books if b.is_homework]
        academic_start = self.config.calendar.academic_year_start_month
        allocations: list[BookAllocation] = []

        for owner in owners:
            if owner.is_private:
                continue
            chosen = self.rng.sample(main_books, k=self.rng.randint(2, min(3, len(main_books))))
            owner_allocs = [
                BookAllocation(
                    id=f"{owner.id}-A{prio}",
                    owner_id=owner.id,
                    book_id=book.id,
                    priority=prio,
                    sessions_per_week=self.rng.choice([1, 1, 2]),
                )
                for prio, book in enumerate(chosen, start=1)
            ]

            target = monthly_target(owner.weekdays, self.config.sessions)
            by_month: dict[str, dict[int, int]] = {a.id: {} for a in owner_allocs}
            for offset in range(owner.duration):
                idx = academic_month_index((owner.start_month + offset) % 12, academic_start)
                for alloc_id, count in distribute_sessions(owner_allocs, target).items():
                    if count > 0:
                        by_month[alloc_id][idx] = count

            for alloc in owner_allocs:
                allocations.append(alloc.model_copy(update={
                    "sessions_by_month": by_month[alloc.id],
                    "total_sessions": sum(by_month[alloc.id].values()),
                }))

            if homework:
                hw_sessions = len(owner.weekdays) * self.config.sessions.weeks_per_month
                allocations.append(BookAllocation(
                    id=f"{owner.id}-HW",
                    owner_id=owner.id,
                    book_id=homework[0].id,
                    priority=len(owner_allocs) + 1,
                    sessions_by_month={
                        academic_month_index((owner.start_month + o) % 12, academic_start): hw_sessions
                        for o in range(owner.duration)
                    },
                ))
        return allocations

    # ─── Kalender ─────────────────────────────────────────────────────────────

    def _generate_holidays(self) -> list[Holiday]:
        return [
            Holiday(start=f"{_SAMPLE_YEAR}-{md}", name=name)
            for md, name in FIXED_HOLIDAYS.items()
        ]

    def _generate_overrides(self) -> list[CalendarOverride]:
        return [
            CalendarOverride(date=f"{_SAMPLE_YEAR}-03-14", kind=OverrideKind.MAKEUP,
                             name="Nachholtermin"),
            CalendarOverride(date=f"{_SAMPLE_YEAR}-04-15", kind=OverrideKind.NO_CLASS,
                             name="Konferenz", sessions=0),
        ]

    def _generate_events(self) -> list[CalendarEvent]:
        return [
            CalendarEvent(start=f"{_SAMPLE_YEAR}-05-20", type=EventType.SCHOOL_EVENT,
                          name="Sportfest", sessions=2),
            CalendarEvent(start=f"{_SAMPLE_YEAR}-07-27", end=f"{_SAMPLE_YEAR}-08-07",
                          type=EventType.VACATION, name="Sommerferien"),
        ]

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self, num_classes: int = 3) -> PlanData:
        """Erzeugt den vollständigen Datensatz als PlanData-Objekt."""
        books = self._generate_books()
        owners = self._generate_owners(num_classes)
        allocations = self._generate_allocations(owners, books)
        return PlanData(
            owners=owners,
            books=books,
            allocations=allocations,
            holidays=self._generate_holidays(),
            overrides=self._generate_overrides(),
            events=self._generate_events(),
            config=self.config,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: PlanData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Beispieldaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        num_private = sum(1 for o in data.owners if o.is_private)
        table.add_row("Owner", str(len(data.owners)),
                      f"{len(data.owners) - num_private} Klassen, {num_private} Privat")
        table.add_row("Bücher", str(len(data.books)),
                      ", ".join(b.name for b in data.books[:3]) + " …")
        table.add_row("Zuweisungen", str(len(data.allocations)),
                      f"{sum(a.planned_total for a in data.allocations)} Einheiten")
        table.add_row("Feiertage", str(len(data.holidays)), "")
        table.add_row("Sondertermine", str(len(data.overrides)), "")
        table.add_row("Kalender-Einträge", str(len(data.events)), "")

        console.print(table)
