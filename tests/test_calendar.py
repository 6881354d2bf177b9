"""Tests für den Kalender-Resolver (Termine, Sondertermine, Übertrag)."""

from datetime import date

import pytest

from config.schema import SessionConfig
from engine.calendar_resolver import (
    event_slots,
    month_bounds,
    next_class_dates,
    overrides_by_date,
    parse_local_date,
    resolve_dates,
    resolve_run_dates,
    rollover_dates,
    slots_per_day,
    monthly_target,
    week_start,
    weekday_name,
)
from engine.errors import PlanConfigurationError
from models.allocation import MonthPlan
from models.calendar import CalendarOverride, Holiday, OverrideKind

MARCH = 2     # 0-basiert
APRIL = 3
MAY = 4


def _no_class(day: str, scope=None) -> CalendarOverride:
    return CalendarOverride(date=day, kind=OverrideKind.NO_CLASS, scope=scope or [])


def _makeup(day: str, scope=None) -> CalendarOverride:
    return CalendarOverride(date=day, kind=OverrideKind.MAKEUP, scope=scope or [])


# ─── Datums-Hilfsfunktionen ───────────────────────────────────────────────────

class TestDateHelpers:
    def test_weekday_name(self):
        assert weekday_name(date(2026, 3, 1)) == "Sun"
        assert weekday_name(date(2026, 3, 5)) == "Thu"
        assert weekday_name(date(2026, 3, 7)) == "Sat"

    def test_week_start_is_sunday(self):
        assert week_start(date(2026, 4, 1)) == date(2026, 3, 29)
        assert week_start(date(2026, 3, 1)) == date(2026, 3, 1)

    def test_month_bounds(self):
        assert month_bounds(2026, 1) == (date(2026, 2, 1), date(2026, 2, 28))
        assert month_bounds(2028, 1)[1] == date(2028, 2, 29)

    def test_month_bounds_invalid(self):
        with pytest.raises(PlanConfigurationError):
            month_bounds(2026, 12)

    def test_parse_local_date(self):
        assert parse_local_date("2026-03-05") == date(2026, 3, 5)
        with pytest.raises(PlanConfigurationError):
            parse_local_date("05.03.2026")


# ─── resolve_dates ────────────────────────────────────────────────────────────

class TestResolveDates:
    def test_plain_weekdays(self):
        dates = resolve_dates(2026, MARCH, ["Mon", "Wed"])
        assert dates == [
            "2026-03-02", "2026-03-04", "2026-03-09", "2026-03-11", "2026-03-16",
            "2026-03-18", "2026-03-23", "2026-03-25", "2026-03-30",
        ]

    def test_no_class_excludes_allowed_weekday(self):
        """Szenario B: no_class am Donnerstag 2026-03-05 → Datum fehlt."""
        dates = resolve_dates(2026, MARCH, ["Thu"], overrides=[_no_class("2026-03-05")])
        assert "2026-03-05" not in dates
        assert dates == ["2026-03-12", "2026-03-19", "2026-03-26"]

    def test_makeup_includes_free_weekday(self):
        """Szenario C: Samstag 2026-03-07 als makeup → Datum enthalten."""
        dates = resolve_dates(2026, MARCH, ["Mon"], overrides=[_makeup("2026-03-07")])
        assert "2026-03-07" in dates
        assert dates == sorted(dates)

    def test_makeup_beats_holiday(self):
        holidays = [Holiday(start="2026-03-09", name="Brückentag")]
        dates = resolve_dates(2026, MARCH, ["Mon"], holidays, [_makeup("2026-03-09")])
        assert "2026-03-09" in dates

    def test_global_holiday_excluded(self):
        holidays = [Holiday(start="2026-03-16", end="2026-03-20", name="Osterferien")]
        dates = resolve_dates(2026, MARCH, ["Mon", "Wed"], holidays)
        assert "2026-03-16" not in dates
        assert "2026-03-18" not in dates
        assert "2026-03-23" in dates

    def test_scoped_holiday_only_for_owner(self):
        holidays = [Holiday(start="2026-03-09", scope=["K02"])]
        assert "2026-03-09" in resolve_dates(2026, MARCH, ["Mon"], holidays, scope_id="K01")
        assert "2026-03-09" not in resolve_dates(2026, MARCH, ["Mon"], holidays, scope_id="K02")

    def test_scoped_override_beats_global(self):
        overrides = [_no_class("2026-03-11"), _makeup("2026-03-11", scope=["K01"])]
        assert "2026-03-11" in resolve_dates(2026, MARCH, ["Wed"], overrides=overrides,
                                             scope_id="K01")
        assert "2026-03-11" not in resolve_dates(2026, MARCH, ["Wed"], overrides=overrides,
                                                 scope_id="K02")

    def test_weekday_aliases(self):
        assert resolve_dates(2026, MARCH, ["monday"]) == resolve_dates(2026, MARCH, ["Mon"])

    def test_no_weekdays_raises(self):
        with pytest.raises(PlanConfigurationError):
            resolve_dates(2026, MARCH, [])

    def test_extend_to_week_start(self):
        """April 2026 beginnt am Mittwoch → Bereich ab Sonntag 29.03."""
        dates = resolve_dates(2026, APRIL, ["Mon", "Wed"], extend_to_week_start=True)
        assert dates[0] == "2026-03-30"
        assert dates[1] == "2026-04-01"

    def test_extended_days_follow_same_rules(self):
        dates = resolve_dates(2026, APRIL, ["Mon", "Wed"], overrides=[_no_class("2026-03-30")],
                              extend_to_week_start=True)
        assert dates[0] == "2026-04-01"

    def test_date_exclusivity_property(self):
        """no_class ⇒ nie enthalten; makeup ⇒ immer enthalten."""
        overrides = [
            _no_class("2026-03-02"), _no_class("2026-03-21"),
            _makeup("2026-03-08"), _makeup("2026-03-16"),
        ]
        for weekdays in (["Mon"], ["Sat", "Sun"], ["Mon", "Tue", "Wed", "Thu", "Fri"]):
            dates = resolve_dates(2026, MARCH, weekdays, overrides=overrides)
            assert "2026-03-02" not in dates
            assert "2026-03-21" not in dates
            assert "2026-03-08" in dates
            assert "2026-03-16" in dates
            assert len(dates) == len(set(dates))


# ─── Mehrere Monate ───────────────────────────────────────────────────────────

class TestRunDates:
    def test_only_first_month_extended(self):
        plans = [MonthPlan(year=2026, month=APRIL), MonthPlan(year=2026, month=MAY)]
        result = resolve_run_dates(plans, ["Mon", "Wed"])
        assert result["m_2026_3"][0] == "2026-03-30"
        # Mai beginnt am Freitag, wird aber nicht erweitert
        assert result["m_2026_4"][0] == "2026-05-04"

    def test_no_duplicates_across_months(self):
        plans = [MonthPlan(year=2026, month=MARCH), MonthPlan(year=2026, month=APRIL)]
        result = resolve_run_dates(plans, ["Mon", "Wed"])
        flat = result["m_2026_2"] + result["m_2026_3"]
        assert len(flat) == len(set(flat))
        assert flat == sorted(flat)

    def test_extension_can_be_disabled(self):
        plans = [MonthPlan(year=2026, month=APRIL)]
        result = resolve_run_dates(plans, ["Mon", "Wed"], extend_first_month=False)
        assert result["m_2026_3"][0] == "2026-04-01"

    def test_rollover_moves_excess_dates(self):
        plans = [MonthPlan(year=2026, month=MARCH), MonthPlan(year=2026, month=APRIL)]
        result = rollover_dates(plans, ["Mon", "Wed"], 8)
        assert len(result["m_2026_2"]) == 8
        assert result["m_2026_2"][-1] == "2026-03-25"
        # Der neunte Märztermin rutscht in den April
        assert result["m_2026_3"][:2] == ["2026-03-30", "2026-04-01"]
        assert len(result["m_2026_3"]) == 8

    def test_rollover_invalid_size(self):
        with pytest.raises(PlanConfigurationError):
            rollover_dates([MonthPlan(year=2026, month=MARCH)], ["Mon"], 0)


# ─── Privatschüler ────────────────────────────────────────────────────────────

class TestNextClassDates:
    def test_next_dates(self):
        dates = next_class_dates(date(2026, 3, 1), ["Tue"], 3)
        assert dates == ["2026-03-03", "2026-03-10", "2026-03-17"]

    def test_start_is_inclusive(self):
        dates = next_class_dates(date(2026, 3, 3), ["Tue"], 1)
        assert dates == ["2026-03-03"]

    def test_respects_overrides(self):
        dates = next_class_dates(date(2026, 3, 1), ["Tue"], 2,
                                 overrides=[_no_class("2026-03-03"), _makeup("2026-03-05")])
        assert dates == ["2026-03-05", "2026-03-10"]

    def test_search_cap(self):
        dates = next_class_dates(date(2026, 3, 1), ["Mon"], 5, max_days=10)
        assert dates == ["2026-03-02", "2026-03-09"]

    def test_no_weekdays_raises(self):
        with pytest.raises(PlanConfigurationError):
            next_class_dates(date(2026, 3, 1), [], 3)

    def test_limit_must_be_positive(self):
        with pytest.raises(PlanConfigurationError):
            next_class_dates(date(2026, 3, 1), ["Mon"], 0)


# ─── Veranstaltungen und Einheiten ────────────────────────────────────────────

class TestSlots:
    def test_event_slots(self):
        overrides = [
            CalendarOverride(date="2026-05-20", kind=OverrideKind.SCHOOL_EVENT,
                             name="Sportfest", sessions=2),
            CalendarOverride(date="2026-05-27", kind=OverrideKind.SCHOOL_EVENT,
                             name="Leer", sessions=0),
        ]
        events = event_slots(["2026-05-18", "2026-05-20", "2026-05-27"], overrides)
        assert list(events) == ["2026-05-20"]
        assert events["2026-05-20"].sessions == 2

    def test_overrides_by_date_scope(self):
        overrides = [_no_class("2026-03-11", scope=["K02"])]
        assert overrides_by_date(overrides, "K01") == {}
        assert "2026-03-11" in overrides_by_date(overrides, "K02")

    def test_slots_per_day_table(self):
        assert slots_per_day(["Sat"]) == 4
        assert slots_per_day(["Mon", "Wed"]) == 3
        assert slots_per_day(["Mon", "Wed", "Fri"]) == 2

    def test_monthly_target_table(self):
        assert monthly_target(["Mon", "Wed"]) == 8
        assert monthly_target(["Mon", "Wed", "Fri"]) == 12
        assert monthly_target(["Sat"]) == 4
        assert monthly_target(["Mon", "Tue", "Wed", "Thu"]) == 16

    def test_custom_session_config(self):
        cfg = SessionConfig(slots_per_day_by_weekdays={2: 5}, default_slots_per_day=1)
        assert slots_per_day(["Mon", "Wed"], cfg) == 5
        assert slots_per_day(["Mon"], cfg) == 1
