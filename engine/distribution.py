"""Verteilung von Monatsbudgets auf Buch-Zuweisungen und Aufbau der Monatspläne."""

import logging
from typing import Optional, Sequence

from config.schema import TieBreak
from engine.deck import order_allocations
from engine.errors import PlanConfigurationError
from models.allocation import BookAllocation, MonthAllocation, MonthPlan

logger = logging.getLogger(__name__)


def academic_month_index(month: int, start_month: int = 3) -> int:
    """Kalendermonat (0-basiert) → Schuljahres-Monat (1-basiert).

    start_month ist 1-basiert (3 = März): März → 1, Februar → 12.
    """
    if not 0 <= month <= 11:
        raise PlanConfigurationError(f"Ungültiger Monat: {month} (erwartet 0-11)")
    return ((month - (start_month - 1) + 12) % 12) + 1


def calendar_month(month_index: int, start_month: int = 3) -> int:
    """Schuljahres-Monat (1-basiert) → Kalendermonat (0-basiert)."""
    if not 1 <= month_index <= 12:
        raise PlanConfigurationError(
            f"Ungültiger Schuljahres-Monat: {month_index} (erwartet 1-12)"
        )
    return (start_month - 1 + month_index - 1) % 12


def build_month_plans(
    allocations: Sequence[BookAllocation],
    year: int,
    start_month: int,
    duration: int,
    academic_start: int = 3,
    tie_break: TieBreak = TieBreak.INSERTION,
) -> list[MonthPlan]:
    """Monatspläne für `duration` Monate ab year/start_month (0-basiert).

    Pro Monat werden nur Zuweisungen mit positiver Einheitenzahl übernommen,
    in Prioritätsreihenfolge. Monate ohne Zuweisungen bleiben erhalten
    (leere Liste), damit der Aufrufer sie anzeigen kann.
    """
    if duration < 1:
        raise PlanConfigurationError(f"duration muss positiv sein, nicht {duration}")
    if not 0 <= start_month <= 11:
        raise PlanConfigurationError(f"Ungültiger Monat: {start_month} (erwartet 0-11)")

    plans: list[MonthPlan] = []
    for offset in range(duration):
        absolute = start_month + offset
        plan_year = year + absolute // 12
        month = absolute % 12
        idx = academic_month_index(month, academic_start)
        active = [
            MonthAllocation(
                book_id=a.book_id,
                sessions=a.sessions_for(idx),
                priority=a.priority,
                allocation_id=a.id,
            )
            for a in allocations
            if a.sessions_for(idx) > 0
        ]
        plans.append(MonthPlan(
            year=plan_year,
            month=month,
            allocations=order_allocations(active, tie_break),
        ))
    return plans


def distribute_sessions(
    allocations: Sequence[BookAllocation],
    total_sessions: int,
    used_by_allocation: Optional[dict[str, int]] = None,
) -> dict[str, int]:
    """Verteilt ein Monatsbudget auf die Zuweisungen eines Owners.

    1. Gewicht je Zuweisung = sessions_per_week (mind. 1)
    2. Anteil = floor(total × Gewicht / Gesamtgewicht), gedeckelt auf den Rest
       des Buch-Budgets (total_sessions − bereits verbraucht)
    3. Übrige Einheiten reihum (Prioritätsreihenfolge) an Zuweisungen mit Rest

    Zuweisungen ohne total_sessions gelten als unbegrenzt.

    Returns:
        allocation_id → Einheiten (nur Zuweisungen mit Rest > 0)
    """
    if total_sessions <= 0:
        raise PlanConfigurationError(
            f"Monatsbudget muss positiv sein, nicht {total_sessions}"
        )
    used = used_by_allocation or {}

    candidates: list[tuple[BookAllocation, Optional[int]]] = []
    for alloc in sorted(allocations, key=lambda a: a.priority):
        if alloc.total_sessions is None:
            remaining = None
        else:
            remaining = max(0, alloc.total_sessions - used.get(alloc.id, 0))
            if remaining == 0:
                continue
        candidates.append((alloc, remaining))

    if not candidates:
        logger.warning("Keine Zuweisung mit verbleibenden Einheiten")
        return {}

    total_weight = sum(max(1, a.sessions_per_week) for a, _ in candidates)
    shares: dict[str, int] = {}
    rest: dict[str, Optional[int]] = {}
    for alloc, remaining in candidates:
        target = total_sessions * max(1, alloc.sessions_per_week) // total_weight
        if remaining is not None:
            target = min(target, remaining)
            rest[alloc.id] = remaining - target
        else:
            rest[alloc.id] = None
        shares[alloc.id] = target

    leftover = total_sessions - sum(shares.values())
    while leftover > 0:
        progressed = False
        for alloc, _ in candidates:
            if leftover <= 0:
                break
            left = rest[alloc.id]
            if left is None or left > 0:
                shares[alloc.id] += 1
                if left is not None:
                    rest[alloc.id] = left - 1
                leftover -= 1
                progressed = True
        if not progressed:
            break

    if leftover > 0:
        logger.warning(f"{leftover} Einheiten konnten keinem Buch zugeordnet werden")
    return shares
