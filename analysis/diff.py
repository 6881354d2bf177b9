"""Vergleich eines neu erzeugten Plans mit dem gespeicherten Stand (Diff).

Gibt strukturierte Unterschiede zurück, die als Rich-Tabelle oder JSON
ausgegeben werden können. Einheiten werden über (Datum, Periode) zugeordnet.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from models.lesson import LessonRecord


@dataclass
class SlotChange:
    """Eine geänderte Belegung eines Termin-Platzes."""

    date: str
    period: int
    old_content: str
    new_content: str
    old_book: str = ""
    new_book: str = ""


@dataclass
class PlanDiff:
    """Vollständiger Diff zwischen gespeichertem und neuem Plan."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[SlotChange] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn kein Unterschied gefunden wurde."""
        return not self.added and not self.removed and not self.changed

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        return {
            "added": self.added,
            "removed": self.removed,
            "changed": [
                {
                    "date": c.date,
                    "period": c.period,
                    "old_content": c.old_content,
                    "new_content": c.new_content,
                    "old_book": c.old_book,
                    "new_book": c.new_book,
                }
                for c in self.changed
            ],
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def print_rich(self) -> None:
        """Gibt den Diff als Rich-Tabelle aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        if self.is_empty():
            console.print("[green]Keine Änderungen gegenüber dem gespeicherten Plan.[/green]")
            return

        table = Table(title="Änderungen", box=box.ROUNDED)
        table.add_column("Art", width=10)
        table.add_column("Platz", width=16)
        table.add_column("Alt")
        table.add_column("Neu")
        for slot in self.added:
            table.add_row("[green]neu[/green]", slot, "", "")
        for slot in self.removed:
            table.add_row("[red]entfällt[/red]", slot, "", "")
        for c in self.changed:
            table.add_row(
                "[yellow]geändert[/yellow]",
                f"{c.date} / {c.period}",
                f"{c.old_book} {c.old_content}".strip(),
                f"{c.new_book} {c.new_content}".strip(),
            )
        console.print(table)


def _slot(lesson: "LessonRecord") -> str:
    return f"{lesson.date} / {lesson.period}"


def diff_lessons(
    saved: Iterable["LessonRecord"], generated: Iterable["LessonRecord"]
) -> PlanDiff:
    """Vergleicht gespeicherte und neu erzeugte Einheiten.

    Args:
        saved: Bisheriger Stand (Basis / alt).
        generated: Neuer Plan.

    Returns:
        PlanDiff mit neuen, entfallenden und geänderten Plätzen.
    """
    diff = PlanDiff()
    old = {(l.date, l.period): l for l in saved}
    new = {(l.date, l.period): l for l in generated}

    for key in sorted(set(new) - set(old)):
        diff.added.append(_slot(new[key]))
    for key in sorted(set(old) - set(new)):
        diff.removed.append(_slot(old[key]))

    for key in sorted(set(old) & set(new)):
        a, b = old[key], new[key]
        if (a.book_id, a.content) != (b.book_id, b.content):
            diff.changed.append(
                SlotChange(
                    date=key[0],
                    period=key[1],
                    old_content=a.content,
                    new_content=b.content,
                    old_book=a.book_name,
                    new_book=b.book_name,
                )
            )
    return diff
