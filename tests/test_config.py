"""Tests für das Konfigurationssystem und die Basis-Datenmodelle."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    CalendarConfig,
    ExhaustionPolicy,
    PlannerConfig,
    SessionConfig,
    TieBreak,
)
from config.defaults import (
    FIXED_HOLIDAYS,
    SAMPLE_BOOK_CATALOG,
    default_calendar,
    default_planner_config,
    default_sessions,
)
from config.manager import ConfigManager
from models.allocation import BookAllocation, MonthPlan
from models.book import Book, BookRole, ProgressionScheme
from models.calendar import CalendarEvent, CalendarOverride, EventType, Holiday, OverrideKind
from models.lesson import ProgressCursor
from models.owner import Owner


def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "planner_config.yaml"
    mgr.PROFILES_DIR = tmp_path / "profiles"
    return mgr


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_planner_config_valid(self):
        config = default_planner_config()
        assert config.calendar.academic_year_start_month == 3
        assert config.generator.tie_break == TieBreak.INSERTION
        assert config.progression.exhaustion_policy == ExhaustionPolicy.FLAG

    def test_default_sessions_tables(self):
        sc = default_sessions()
        assert sc.slots_per_day_by_weekdays == {1: 4, 2: 3}
        assert sc.default_slots_per_day == 2
        assert sc.monthly_target_by_weekdays == {2: 8, 3: 12}

    def test_default_calendar(self):
        cal = default_calendar()
        assert cal.default_weekdays == ["Mon", "Wed"]
        assert cal.max_search_days == 365

    def test_book_catalog_not_empty(self):
        assert len(SAMPLE_BOOK_CATALOG) >= 5
        for name, meta in SAMPLE_BOOK_CATALOG.items():
            Book(id="X", name=name, **meta)

    def test_fixed_holidays_format(self):
        for md in FIXED_HOLIDAYS:
            month, day = md.split("-")
            assert 1 <= int(month) <= 12
            assert 1 <= int(day) <= 31


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_weekdays_normalized(self):
        cal = CalendarConfig(default_weekdays=["monday", "WED", "friday"])
        assert cal.default_weekdays == ["Mon", "Wed", "Fri"]

    def test_unknown_weekday_raises(self):
        with pytest.raises(ValidationError):
            CalendarConfig(default_weekdays=["Funday"])

    def test_session_table_zero_raises(self):
        with pytest.raises(ValidationError):
            SessionConfig(slots_per_day_by_weekdays={2: 0})

    def test_academic_start_out_of_range(self):
        with pytest.raises(ValidationError):
            CalendarConfig(academic_year_start_month=13)

    def test_holiday_end_before_start_raises(self):
        with pytest.raises(ValidationError):
            Holiday(start="2026-03-10", end="2026-03-01")

    def test_override_bad_date_raises(self):
        with pytest.raises(ValidationError):
            CalendarOverride(date="2026-02-30", kind=OverrideKind.NO_CLASS)

    def test_cursor_positive(self):
        with pytest.raises(ValidationError):
            ProgressCursor(unit=0, day=1)

    def test_cursor_frozen(self):
        cursor = ProgressCursor(unit=1, day=1)
        with pytest.raises(ValidationError):
            cursor.unit = 2

    def test_allocation_month_index_range(self):
        with pytest.raises(ValidationError):
            BookAllocation(id="A", owner_id="K01", book_id="B01", sessions_by_month={13: 4})

    def test_owner_start_month_range(self):
        with pytest.raises(ValidationError):
            Owner(id="K01", name="Test", weekdays=["Mon"], start_month=12)


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren — vollständiger Roundtrip."""
        config = default_planner_config()
        mgr = _manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded.academy_name == config.academy_name
        assert loaded.sessions.slots_per_day_by_weekdays == {1: 4, 2: 3}
        assert loaded.calendar.default_weekdays == ["Mon", "Wed"]

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_planner_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Kalender" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        mgr.save(default_planner_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        """Ungültige Werte in der YAML → ValueError mit Dateiname."""
        path = tmp_path / "broken.yaml"
        path.write_text("calendar:\n  academic_year_start_month: 13\n", encoding="utf-8")
        mgr = ConfigManager()
        with pytest.raises(ValueError, match="broken.yaml"):
            mgr.load(path)

    def test_profile_save_and_load(self, tmp_path: Path):
        """Profil speichern und laden — Roundtrip."""
        config = default_planner_config().model_copy(update={"academy_name": "Test-Akademie"})
        mgr = _manager(tmp_path)

        mgr.save_profile(config, "sommer", "Nur zum Testen")
        loaded = mgr.load_profile("sommer")
        assert loaded.academy_name == "Test-Akademie"

        profiles = mgr.list_profiles()
        assert [p["name"] for p in profiles] == ["sommer"]
        assert profiles[0]["academy"] == "Test-Akademie"
        assert profiles[0]["description"] == "Nur zum Testen"

    def test_set_value(self):
        mgr = ConfigManager()
        config = mgr.set_value(default_planner_config(), "progression.exhaustion_policy", "stop")
        assert config.progression.exhaustion_policy == ExhaustionPolicy.STOP
        config = mgr.set_value(config, "calendar.extend_first_month", "false")
        assert config.calendar.extend_first_month is False
        config = mgr.set_value(config, "sessions.slots_per_day_by_weekdays.2", "4")
        assert config.sessions.slots_per_day_by_weekdays[2] == 4

    def test_set_value_unknown_key(self):
        with pytest.raises(KeyError):
            ConfigManager().set_value(default_planner_config(), "calendar.gibtsnicht", "1")
        with pytest.raises(KeyError):
            ConfigManager().set_value(default_planner_config(), "nirgends.wert", "1")

    def test_set_value_invalid(self):
        with pytest.raises(ValueError):
            ConfigManager().set_value(
                default_planner_config(), "calendar.academic_year_start_month", "13"
            )

    def test_list_profiles_empty(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        assert mgr.list_profiles() == []

    def test_load_missing_profile_raises(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        with pytest.raises(FileNotFoundError):
            mgr.load_profile("gibtsnicht")


# ─── MODELLE ──────────────────────────────────────────────────────────────────

class TestModels:
    def test_trophy_name_becomes_volume_day(self):
        book = Book(id="B1", name="Trophy 9 3A")
        assert book.progression == ProgressionScheme.VOLUME_DAY
        assert book.level_tag == "3A"

    def test_misspelled_series_detected(self):
        book = Book(id="B1", name="Tropy9 2B")
        assert book.is_volume_based
        assert book.level_tag == "2B"

    def test_series_level_wins(self):
        book = Book(id="B1", name="Reader", series="Trophy 9", series_level="5B", level="M1")
        assert book.is_volume_based
        assert book.level_tag == "5B"

    def test_level_fallback(self):
        book = Book(id="B1", name="Trophy 9", level="M2")
        assert book.level_tag == "M2"

    def test_scp_book_is_homework(self):
        book = Book(id="B1", name="SCP Vocabulary 1")
        assert book.role == BookRole.HOMEWORK
        assert book.is_homework

    def test_plain_book_defaults(self):
        book = Book(id="B1", name="Reading Explorer 1", total_units=12)
        assert book.progression == ProgressionScheme.UNIT_DAY
        assert not book.is_homework
        assert not book.is_event

    def test_owner_weekdays_normalized_and_unique(self):
        owner = Owner(id="K01", name="Test", weekdays=["monday", "Mon", "wed"])
        assert owner.weekdays == ["Mon", "Wed"]

    def test_month_plan_key_and_label(self):
        plan = MonthPlan(year=2026, month=2)
        assert plan.key == "m_2026_2"
        assert plan.label == "2026-03"
        assert plan.total_sessions == 0

    def test_allocation_sessions_for(self):
        alloc = BookAllocation(id="A", owner_id="K01", book_id="B01",
                               sessions_by_month={1: 4, 2: 6})
        assert alloc.sessions_for(1) == 4
        assert alloc.sessions_for(3) == 0
        assert alloc.planned_total == 10

    def test_holiday_covers_scope(self):
        h = Holiday(start="2026-03-09", end="2026-03-11", scope=["K02"])
        assert h.covers("2026-03-10", "K02")
        assert not h.covers("2026-03-10", "K01")
        assert not h.covers("2026-03-12", "K02")
        assert h.days() == ["2026-03-09", "2026-03-10", "2026-03-11"]

    def test_vacation_event_expands_to_no_class(self):
        event = CalendarEvent(start="2026-07-27", end="2026-07-29",
                              type=EventType.VACATION, name="Ferien")
        holidays, overrides = event.expand()
        assert len(holidays) == 1
        assert [o.date for o in overrides] == ["2026-07-27", "2026-07-28", "2026-07-29"]
        assert all(o.kind == OverrideKind.NO_CLASS for o in overrides)

    def test_school_event_expands_to_event_override(self):
        event = CalendarEvent(start="2026-05-20", type=EventType.SCHOOL_EVENT,
                              name="Sportfest", sessions=2)
        holidays, overrides = event.expand()
        assert holidays == []
        assert overrides[0].kind == OverrideKind.SCHOOL_EVENT
        assert overrides[0].sessions == 2

    def test_planner_config_json_roundtrip(self):
        config = PlannerConfig()
        restored = PlannerConfig.model_validate_json(config.model_dump_json())
        assert restored == config
