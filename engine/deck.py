"""Deck-Aufbau: priorisierte (Buch, Anzahl)-Paare → Round-Robin-Reihenfolge."""

from typing import Iterable, Sequence

from config.schema import TieBreak
from engine.errors import PlanConfigurationError
from models.allocation import MonthAllocation
from models.book import Book


def order_allocations(
    allocations: Sequence[MonthAllocation], tie_break: TieBreak = TieBreak.INSERTION
) -> list[MonthAllocation]:
    """Sortiert nach Priorität (aufsteigend); bei Gleichstand stabil.

    tie_break=book_id ordnet gleich priorisierte Bücher nach ihrer ID.
    """
    if tie_break == TieBreak.BOOK_ID:
        return sorted(allocations, key=lambda a: (a.priority, a.book_id))
    # sorted() ist stabil → Einfügereihenfolge bleibt erhalten
    return sorted(allocations, key=lambda a: a.priority)


def build_deck(
    allocations: Sequence[MonthAllocation], tie_break: TieBreak = TieBreak.INSERTION
) -> list[str]:
    """Erzeugt das Deck eines Monats.

    Pro Runde erhält jede Zuweisung mit Restbestand genau einen Platz,
    in Prioritätsreihenfolge. Beispiel: [(A, 4), (B, 2)] → A B A B A A.

    Raises:
        PlanConfigurationError: bei nicht-positiver Einheitenzahl.
    """
    for alloc in allocations:
        if alloc.sessions <= 0:
            raise PlanConfigurationError(
                f"Buch '{alloc.book_id}': Einheitenzahl muss positiv sein, "
                f"nicht {alloc.sessions}"
            )

    ordered = order_allocations(allocations, tie_break)
    remaining = [a.sessions for a in ordered]
    deck: list[str] = []
    while True:
        added = 0
        for idx, alloc in enumerate(ordered):
            if remaining[idx] > 0:
                deck.append(alloc.book_id)
                remaining[idx] -= 1
                added += 1
        if added == 0:
            break
    return deck


def split_homework(
    allocations: Iterable[MonthAllocation], books: dict[str, Book]
) -> tuple[list[MonthAllocation], list[MonthAllocation]]:
    """Trennt reguläre Zuweisungen von Hausaufgaben-Büchern.

    Unbekannte Bücher landen bei den regulären Zuweisungen; der Generator
    überspringt sie dort mit Warnung.
    """
    regular: list[MonthAllocation] = []
    homework: list[MonthAllocation] = []
    for alloc in allocations:
        book = books.get(alloc.book_id)
        if book is not None and book.is_homework:
            homework.append(alloc)
        else:
            regular.append(alloc)
    return regular, homework
