"""Tests für Deck-Aufbau und Monatsverteilung der Einheiten."""

import pytest

from config.schema import TieBreak
from engine.deck import build_deck, order_allocations, split_homework
from engine.distribution import (
    academic_month_index,
    build_month_plans,
    calendar_month,
    distribute_sessions,
)
from engine.errors import PlanConfigurationError
from models.allocation import BookAllocation, MonthAllocation
from models.book import Book


def _alloc(book_id: str, sessions: int, priority: int = 1) -> MonthAllocation:
    return MonthAllocation(book_id=book_id, sessions=sessions, priority=priority)


def _book_alloc(alloc_id: str, book_id: str, priority: int = 1, **kwargs) -> BookAllocation:
    return BookAllocation(id=alloc_id, owner_id="K01", book_id=book_id, priority=priority, **kwargs)


# ─── Deck ─────────────────────────────────────────────────────────────────────

class TestBuildDeck:
    def test_round_robin_with_priority(self):
        """Szenario D: [(A,4,1), (B,2,2)] → A B A B A A."""
        deck = build_deck([_alloc("A", 4, 1), _alloc("B", 2, 2)])
        assert deck == ["A", "B", "A", "B", "A", "A"]

    def test_priority_order_not_insertion(self):
        deck = build_deck([_alloc("B", 2, 2), _alloc("A", 4, 1)])
        assert deck == ["A", "B", "A", "B", "A", "A"]

    def test_equal_counts_interleaved(self):
        """Gleiche Priorität, je 3 Einheiten → A B A B A B, nie AAA BBB."""
        deck = build_deck([_alloc("A", 3), _alloc("B", 3)])
        assert deck == ["A", "B", "A", "B", "A", "B"]

    @pytest.mark.parametrize("counts", [[1], [5, 1], [2, 3, 4], [7, 7, 1, 2]])
    def test_deck_length(self, counts):
        allocations = [_alloc(f"B{i}", c, i) for i, c in enumerate(counts)]
        deck = build_deck(allocations)
        assert len(deck) == sum(counts)
        for i, c in enumerate(counts):
            assert deck.count(f"B{i}") == c

    def test_empty_allocations(self):
        assert build_deck([]) == []

    def test_non_positive_count_raises(self):
        with pytest.raises(PlanConfigurationError):
            build_deck([_alloc("A", 0)])

    def test_tie_break_insertion(self):
        deck = build_deck([_alloc("B", 2), _alloc("A", 2)], TieBreak.INSERTION)
        assert deck == ["B", "A", "B", "A"]

    def test_tie_break_book_id(self):
        deck = build_deck([_alloc("B", 2), _alloc("A", 2)], TieBreak.BOOK_ID)
        assert deck == ["A", "B", "A", "B"]

    def test_order_allocations_stable(self):
        ordered = order_allocations([_alloc("C", 1, 2), _alloc("B", 1, 1), _alloc("A", 1, 2)])
        assert [a.book_id for a in ordered] == ["B", "C", "A"]


class TestSplitHomework:
    def test_split(self):
        books = {
            "A": Book(id="A", name="Reading Explorer 1"),
            "H": Book(id="H", name="SCP Vocabulary 1"),
        }
        regular, homework = split_homework(
            [_alloc("A", 4), _alloc("H", 2), _alloc("ZZ", 1)], books
        )
        assert [a.book_id for a in regular] == ["A", "ZZ"]
        assert [a.book_id for a in homework] == ["H"]


# ─── Schuljahres-Monate ───────────────────────────────────────────────────────

class TestAcademicMonths:
    def test_march_is_first(self):
        assert academic_month_index(2) == 1
        assert academic_month_index(1) == 12
        assert academic_month_index(11) == 10

    def test_inverse(self):
        for month in range(12):
            assert calendar_month(academic_month_index(month)) == month

    def test_custom_start(self):
        assert academic_month_index(0, start_month=1) == 1

    def test_invalid(self):
        with pytest.raises(PlanConfigurationError):
            academic_month_index(12)
        with pytest.raises(PlanConfigurationError):
            calendar_month(0)


class TestBuildMonthPlans:
    def test_plans_per_month(self):
        allocations = [
            _book_alloc("A1", "A", 1, sessions_by_month={1: 4, 2: 6}),
            _book_alloc("A2", "B", 2, sessions_by_month={1: 4}),
        ]
        plans = build_month_plans(allocations, 2026, 2, 3)
        assert [p.key for p in plans] == ["m_2026_2", "m_2026_3", "m_2026_4"]
        assert [(a.book_id, a.sessions) for a in plans[0].allocations] == [("A", 4), ("B", 4)]
        assert [(a.book_id, a.sessions) for a in plans[1].allocations] == [("A", 6)]
        assert plans[2].allocations == []
        assert plans[0].allocations[0].allocation_id == "A1"

    def test_year_wraps(self):
        allocations = [_book_alloc("A1", "A", sessions_by_month={10: 4, 11: 4})]
        plans = build_month_plans(allocations, 2026, 11, 2)
        assert (plans[0].year, plans[0].month) == (2026, 11)
        assert (plans[1].year, plans[1].month) == (2027, 0)
        assert plans[1].total_sessions == 4

    def test_priority_order(self):
        allocations = [
            _book_alloc("A2", "B", 2, sessions_by_month={1: 2}),
            _book_alloc("A1", "A", 1, sessions_by_month={1: 2}),
        ]
        plan = build_month_plans(allocations, 2026, 2, 1)[0]
        assert [a.book_id for a in plan.allocations] == ["A", "B"]

    def test_invalid_duration(self):
        with pytest.raises(PlanConfigurationError):
            build_month_plans([], 2026, 2, 0)


class TestDistributeSessions:
    def test_equal_weights(self):
        allocations = [_book_alloc("A1", "A", 1), _book_alloc("A2", "B", 2)]
        assert distribute_sessions(allocations, 8) == {"A1": 4, "A2": 4}

    def test_weighted_with_leftover(self):
        allocations = [
            _book_alloc("A1", "A", 1, sessions_per_week=2),
            _book_alloc("A2", "B", 2, sessions_per_week=1),
        ]
        shares = distribute_sessions(allocations, 8)
        assert shares == {"A1": 6, "A2": 2}
        assert sum(shares.values()) == 8

    def test_capped_at_remaining_budget(self):
        allocations = [
            _book_alloc("A1", "A", 1, total_sessions=3),
            _book_alloc("A2", "B", 2),
        ]
        assert distribute_sessions(allocations, 8) == {"A1": 3, "A2": 5}

    def test_used_budget_excluded(self):
        allocations = [
            _book_alloc("A1", "A", 1, total_sessions=10),
            _book_alloc("A2", "B", 2),
        ]
        shares = distribute_sessions(allocations, 8, used_by_allocation={"A1": 10})
        assert shares == {"A2": 8}

    def test_nothing_left(self):
        allocations = [_book_alloc("A1", "A", 1, total_sessions=2)]
        assert distribute_sessions(allocations, 8, used_by_allocation={"A1": 2}) == {}

    def test_non_positive_total_raises(self):
        with pytest.raises(PlanConfigurationError):
            distribute_sessions([_book_alloc("A1", "A")], 0)
