"""Datenmodelle für Buch-Zuweisungen und Monatspläne (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator


class BookAllocation(BaseModel):
    """Zuweisung eines Buches an eine Klasse oder einen Privatschüler.

    sessions_by_month ist nach Schuljahres-Monat geschlüsselt (1 = erster
    Monat des Schuljahres, z.B. März) und nur für Monate mit Einheiten befüllt.
    """

    id: str
    owner_id: str
    book_id: str
    priority: int = 1                        # aufsteigend = wichtiger
    sessions_by_month: dict[int, int] = {}
    total_sessions: Optional[int] = None     # Budget des Buches für diesen Owner
    sessions_per_week: int = 1               # Gewicht für die Monatsverteilung

    @field_validator("sessions_by_month")
    @classmethod
    def _check_months(cls, v: dict[int, int]) -> dict[int, int]:
        for month_index, count in v.items():
            if not 1 <= month_index <= 12:
                raise ValueError(f"Ungültiger Schuljahres-Monat: {month_index} (erwartet 1-12)")
            if count < 0:
                raise ValueError(f"Negative Einheitenzahl für Monat {month_index}: {count}")
        return v

    def sessions_for(self, month_index: int) -> int:
        """Einheiten im angegebenen Schuljahres-Monat (0 wenn nicht geplant)."""
        return self.sessions_by_month.get(month_index, 0)

    @property
    def planned_total(self) -> int:
        return sum(self.sessions_by_month.values())


class MonthAllocation(BaseModel):
    """Aktive Zuweisung innerhalb eines Monatsplans."""

    book_id: str
    sessions: int
    priority: int = 1
    allocation_id: Optional[str] = None


class MonthPlan(BaseModel):
    """Berechnete Sicht: aktive Zuweisungen eines Kalendermonats.

    month ist 0-basiert (0 = Januar), wie im Kalender-Resolver.
    """

    year: int
    month: int
    allocations: list[MonthAllocation] = []

    @property
    def key(self) -> str:
        """Eindeutiger Schlüssel, z.B. 'm_2026_2' für März 2026."""
        return f"m_{self.year}_{self.month}"

    @property
    def total_sessions(self) -> int:
        return sum(a.sessions for a in self.allocations)

    @property
    def label(self) -> str:
        return f"{self.year}-{self.month + 1:02d}"
