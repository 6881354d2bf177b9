"""Kapazitätsprüfung: angefragte Einheiten vs. verfügbare Termin-Plätze."""

from typing import Literal, Optional, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table
from rich import box


class CapacityReport(BaseModel):
    """Vergleich Deck-Länge mit Termine × Einheiten pro Termin für einen Monat."""

    month_key: str                  # MonthPlan.key
    label: str = ""                 # "2026-03"
    requested: int
    dates: int
    slots_per_day: int
    capacity: int

    @property
    def empty_slots(self) -> int:
        return max(0, self.capacity - self.requested)

    @property
    def unplaced(self) -> int:
        return max(0, self.requested - self.capacity)

    @property
    def status(self) -> Literal["ok", "underfilled", "overflow"]:
        if self.unplaced:
            return "overflow"
        if self.empty_slots:
            return "underfilled"
        return "ok"

    @property
    def message(self) -> str:
        if self.unplaced:
            return f"{self.unplaced} Einheiten passen nicht in den Monat"
        if self.empty_slots:
            return f"{self.empty_slots} Plätze bleiben leer"
        return "Passt genau"


def check_capacity(
    month_key: str,
    requested: int,
    dates: Sequence[str],
    slots_per_day: int,
    slots_used: Optional[dict[str, int]] = None,
    label: str = "",
) -> CapacityReport:
    """Kapazität eines Monats.

    Bereits belegte Plätze (slots_used, z.B. Veranstaltungen) werden
    pro Termin abgezogen. Hausaufgaben-Einheiten zählen nicht mit.
    """
    used = slots_used or {}
    capacity = sum(max(0, slots_per_day - used.get(d, 0)) for d in dates)
    return CapacityReport(
        month_key=month_key,
        label=label,
        requested=requested,
        dates=len(dates),
        slots_per_day=slots_per_day,
        capacity=capacity,
    )


def print_capacity_reports(
    reports: Sequence[CapacityReport], console: Optional[Console] = None
) -> None:
    """Gibt die Kapazitätsberichte als Rich-Tabelle aus."""
    console = console or Console()
    table = Table(title="Kapazität", box=box.SIMPLE_HEAD)
    table.add_column("Monat", style="bold")
    table.add_column("Termine", justify="right")
    table.add_column("Plätze", justify="right")
    table.add_column("Angefragt", justify="right")
    table.add_column("Status")

    colors = {"ok": "green", "underfilled": "yellow", "overflow": "red"}
    for r in reports:
        color = colors[r.status]
        table.add_row(
            r.label or r.month_key,
            str(r.dates),
            str(r.capacity),
            str(r.requested),
            f"[{color}]{r.message}[/{color}]",
        )
    console.print(table)
