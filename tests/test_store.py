"""Tests für die JSON-Ablage gespeicherter Lehrpläne."""

import pytest

from config.schema import PlannerConfig, ProgressionConfig
from data.lesson_store import LessonStore
from engine.errors import SequenceConflictError
from engine.generator import LessonPlanGenerator
from models.allocation import MonthAllocation, MonthPlan
from models.book import Book
from models.lesson import ItemState, LessonRecord, ProgressCursor

BOOK = Book(id="X", name="Reading Explorer 1", total_units=5, days_per_unit=3)


def _month(days: list[str], start_unit: int = 1, start_order: int = 1) -> list[LessonRecord]:
    """Je Termin zwei Einheiten, Day 1..3 fortlaufend."""
    records = []
    unit, day, order = start_unit, 1, start_order
    for d in days:
        for period in (1, 2):
            records.append(LessonRecord(
                id=f"{d}_X_{period}_{order}",
                owner_id="K01",
                date=d,
                period=period,
                display_order=order,
                book_id="X",
                book_name=BOOK.name,
                content=f"Unit {unit} Day {day}",
                unit_no=unit,
                day_no=day,
            ))
            order += 1
            day += 1
            if day > 3:
                unit, day = unit + 1, 1
    return records


MARCH = ["2026-03-02", "2026-03-04"]
APRIL = ["2026-04-06", "2026-04-08"]


class TestLessonStore:
    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "store.json"
        store = LessonStore(path)
        store.save_month("K01", 2026, 2, _month(MARCH))

        reloaded = LessonStore(path)
        lessons = reloaded.lessons("K01")
        assert len(lessons) == 4
        assert all(l.state == ItemState.SAVED for l in lessons)
        assert reloaded.owners() == ["K01"]

    def test_month_replaces_only_its_range(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 2, _month(MARCH))
        store.save_month("K01", 2026, 3, _month(APRIL, start_unit=2))

        removed = store.save_month("K01", 2026, 2, _month(MARCH[:1]))
        assert removed == 4
        dates = [l.date for l in store.lessons("K01")]
        assert dates == ["2026-03-02", "2026-03-02"] + [APRIL[0]] * 2 + [APRIL[1]] * 2
        assert [l.display_order for l in store.lessons("K01")] == list(range(1, 7))

    def test_extended_first_month_range(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 3, _month(["2026-03-30", "2026-04-01"]))
        # Erneutes Speichern ersetzt auch den Termin aus der Vorwoche
        store.save_month("K01", 2026, 3, _month(["2026-03-30"]))
        assert {l.date for l in store.lessons("K01")} == {"2026-03-30"}

    def test_contiguity_failure_writes_nothing(self, tmp_path):
        path = tmp_path / "store.json"
        store = LessonStore(path)
        broken = _month(MARCH)
        broken[1] = broken[1].model_copy(update={"period": 3})

        with pytest.raises(SequenceConflictError):
            store.save_month("K01", 2026, 2, broken)
        assert not path.exists()
        assert store.lessons("K01") == []

    def test_owners_are_separate(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 2, _month(MARCH))
        other = [l.model_copy(update={"owner_id": "K02"}) for l in _month(MARCH)]
        store.save_month("K02", 2026, 2, other)
        store.save_month("K01", 2026, 2, [])
        assert store.lessons("K01") == []
        assert len(store.lessons("K02")) == 4


class TestProgress:
    def test_progress_before(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 2, _month(MARCH))
        # Letzte Einheit im März: Unit 2 Day 1
        progress = store.progress_before("K01", "2026-04-01", {"X": BOOK})
        assert progress == {"X": ProgressCursor(unit=2, day=2)}

    def test_progress_ignores_later_lessons(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 2, _month(MARCH))
        store.save_month("K01", 2026, 3, _month(APRIL, start_unit=3))
        progress = store.progress_before("K01", "2026-04-01", {"X": BOOK})
        assert progress["X"] == ProgressCursor(unit=2, day=2)

    def test_progress_uses_configured_days_per_unit(self, tmp_path):
        """Buch ohne eigene days_per_unit: Fortsetzung nach dem konfigurierten Default."""
        book = Book(id="Z", name="Open Reader", total_units=4)
        config = PlannerConfig(progression=ProgressionConfig(default_days_per_unit=5))
        plan = MonthPlan(year=2026, month=2, allocations=[MonthAllocation(book_id="Z", sessions=3)])
        dates = ["2026-03-02", "2026-03-04", "2026-03-09"]
        result = LessonPlanGenerator([book], config).generate("K01", [plan], {plan.key: dates}, 1)

        store = LessonStore(tmp_path / "store.json")
        store.save_month("K01", 2026, 2, result.lessons)
        progress = store.progress_before("K01", "2026-04-01", {"Z": book}, config.progression)
        assert progress["Z"] == ProgressCursor(unit=1, day=4)
        assert progress["Z"] == result.final_progress["Z"]

    def test_progress_without_history(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        assert store.progress_before("K01", "2026-04-01", {"X": BOOK}) == {}

    def test_last_lesson(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        assert store.last_lesson("K01") is None
        store.save_month("K01", 2026, 2, _month(MARCH))
        assert store.last_lesson("K01").content == "Unit 2 Day 1"
        assert store.last_lesson("K01", book_id="Y") is None


class TestAppendReplace:
    def test_append_continues_order(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.append("K01", _month(MARCH[:1]))
        store.append("K01", _month(MARCH[1:], start_order=1))
        lessons = store.lessons("K01")
        assert [l.display_order for l in lessons] == [1, 2, 3, 4]
        assert all(l.state == ItemState.SAVED for l in lessons)

    def test_append_same_slot_rejected(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        store.append("K01", _month(MARCH[:1]))
        with pytest.raises(SequenceConflictError):
            store.append("K01", _month(MARCH[:1]))

    def test_replace_marks_new_items_saved(self, tmp_path):
        store = LessonStore(tmp_path / "store.json")
        lessons = _month(MARCH)
        store.replace("K01", lessons)
        assert all(l.state == ItemState.SAVED for l in store.lessons("K01"))
        assert LessonStore(tmp_path / "store.json").lessons("K01") == store.lessons("K01")
