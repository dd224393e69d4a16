"""Unit tests for date and time normalisation."""

from datetime import date, timedelta

import pytest

from marquee.utils.dates import (
    expand_range,
    format_time,
    horizon_end,
    infer_year,
    month_number,
    nearest_weekday,
    next_weekday,
    parse_closing_day,
    parse_date_range,
    parse_date_text,
    parse_iso_date,
    parse_iso_time,
    parse_month_day,
    parse_numeric_date,
    parse_time,
    resolve_weekday_date,
    to_24_hour,
    to_minutes,
    weekday_number,
    within_horizon,
)

# Tuesday
TODAY = date(2026, 2, 17)

MON, TUE, WED, THU, FRI, SAT, SUN = range(7)


class TestNameLookups:
    def test_month_abbreviation_and_full_name(self) -> None:
        assert month_number("Feb") == 2
        assert month_number("february") == 2
        assert month_number("Sept") == 9

    def test_unknown_month(self) -> None:
        assert month_number("Foo") is None

    def test_weekday_names(self) -> None:
        assert weekday_number("SAT") == SAT
        assert weekday_number("Thurs") == THU
        assert weekday_number("monday") == MON


class TestHorizon:
    def test_horizon_is_fourteen_days_counting_today(self) -> None:
        assert horizon_end(TODAY) == date(2026, 3, 2)

    def test_within_horizon_bounds(self) -> None:
        assert within_horizon(TODAY, TODAY)
        assert within_horizon(TODAY + timedelta(days=13), TODAY)
        assert not within_horizon(TODAY + timedelta(days=14), TODAY)
        assert not within_horizon(TODAY - timedelta(days=1), TODAY)


class TestInferYear:
    def test_current_year_for_upcoming_date(self) -> None:
        assert infer_year(2, 20, TODAY) == date(2026, 2, 20)

    def test_recent_past_stays_in_current_year(self) -> None:
        assert infer_year(2, 10, TODAY) == date(2026, 2, 10)

    def test_rolls_forward_at_year_end(self) -> None:
        # "Jan 3" listed on Dec 20 is next January
        assert infer_year(1, 3, date(2025, 12, 20)) == date(2026, 1, 3)

    def test_rolls_back_at_year_start(self) -> None:
        # "Dec 15" listed on Jan 10 is last December
        assert infer_year(12, 15, date(2026, 1, 10)) == date(2025, 12, 15)

    def test_long_past_date_is_next_year(self) -> None:
        assert infer_year(1, 1, TODAY) == date(2027, 1, 1)

    def test_invalid_day(self) -> None:
        assert infer_year(2, 30, TODAY) is None


class TestParseDates:
    def test_month_day_with_weekday(self) -> None:
        assert parse_month_day("Tue Feb 17", TODAY) == date(2026, 2, 17)

    def test_month_day_with_ordinal(self) -> None:
        assert parse_month_day("February 18th", TODAY) == date(2026, 2, 18)

    def test_month_day_explicit_year_wins(self) -> None:
        assert parse_month_day("Wed, Feb 11, 2026", TODAY) == date(2026, 2, 11)
        assert parse_month_day("Feb 11, 2025", TODAY) == date(2025, 2, 11)

    def test_month_day_missing(self) -> None:
        assert parse_month_day("Now Playing", TODAY) is None
        assert parse_month_day(None, TODAY) is None

    def test_iso_date(self) -> None:
        assert parse_iso_date("2025-11-26-00:00:00") == date(2025, 11, 26)
        assert parse_iso_date("2026-02-30") is None
        assert parse_iso_date("soon") is None

    def test_numeric_date(self) -> None:
        assert parse_numeric_date("2/18", TODAY) == date(2026, 2, 18)
        assert parse_numeric_date("Wed 2/18/26", TODAY) == date(2026, 2, 18)

    def test_numeric_date_rejects_bad_month(self) -> None:
        assert parse_numeric_date("13/45", TODAY) is None


class TestWeekdays:
    def test_nearest_weekday_ahead(self) -> None:
        assert nearest_weekday(FRI, TODAY) == date(2026, 2, 20)

    def test_nearest_weekday_behind(self) -> None:
        assert nearest_weekday(MON, TODAY) == date(2026, 2, 16)
        assert nearest_weekday(SAT, TODAY) == date(2026, 2, 14)

    def test_nearest_weekday_today(self) -> None:
        assert nearest_weekday(TUE, TODAY) == TODAY

    def test_next_weekday_counts_today(self) -> None:
        assert next_weekday(TUE, TODAY) == TODAY
        assert next_weekday(MON, TODAY) == date(2026, 2, 23)

    def test_resolve_uses_day_of_month(self) -> None:
        # SAT with a "21" comment is the coming Saturday, not the last one
        assert resolve_weekday_date(SAT, 21, TODAY) == date(2026, 2, 21)
        assert resolve_weekday_date(SAT, 14, TODAY) == date(2026, 2, 14)

    def test_resolve_falls_back_to_weekday(self) -> None:
        assert resolve_weekday_date(SAT, 30, TODAY) == nearest_weekday(SAT, TODAY)


class TestRanges:
    def test_expand_range_clips_to_today(self) -> None:
        days = expand_range(date(2026, 2, 6), date(2026, 2, 19), TODAY)
        assert days == [date(2026, 2, 17), date(2026, 2, 18), date(2026, 2, 19)]

    def test_expand_range_clips_to_horizon(self) -> None:
        days = expand_range(date(2026, 1, 1), date(2026, 4, 30), TODAY)
        assert len(days) == 14
        assert days[0] == TODAY
        assert days[-1] == date(2026, 3, 2)

    def test_expand_range_inverted(self) -> None:
        assert expand_range(date(2026, 2, 20), date(2026, 2, 18), TODAY) == []

    def test_range_with_year(self) -> None:
        days = parse_date_range("Feb 6—Feb 19, 2026", TODAY)
        assert days == [date(2026, 2, 17), date(2026, 2, 18), date(2026, 2, 19)]

    def test_range_reusing_start_month(self) -> None:
        days = parse_date_range("Feb 18 - 20", TODAY)
        assert days == [date(2026, 2, 18), date(2026, 2, 19), date(2026, 2, 20)]

    def test_long_running_range(self) -> None:
        days = parse_date_range("Jan 1 – Apr 30", TODAY)
        assert len(days) == 14
        assert days[0] == TODAY

    def test_range_across_new_year(self) -> None:
        days = parse_date_range("Dec 28 – Jan 4", date(2025, 12, 30))
        assert days[0] == date(2025, 12, 30)
        assert days[-1] == date(2026, 1, 4)
        assert len(days) == 6

    def test_range_across_new_year_with_printed_year(self) -> None:
        days = parse_date_range("Dec 28 – Jan 4, 2027", date(2026, 12, 29))
        assert days[0] == date(2026, 12, 29)
        assert days[-1] == date(2027, 1, 4)

    def test_finished_range_is_empty_not_none(self) -> None:
        assert parse_date_range("Feb 1 - Feb 10, 2026", TODAY) == []

    def test_date_followed_by_time_is_not_a_range(self) -> None:
        assert parse_date_range("Feb 17 - 7:30pm", TODAY) is None

    def test_no_range(self) -> None:
        assert parse_date_range("Tue Feb 17", TODAY) is None


class TestClosingDay:
    def test_must_end_weekday(self) -> None:
        days = parse_closing_day("MUST END THURSDAY", TODAY)
        assert days == [date(2026, 2, 17), date(2026, 2, 18), date(2026, 2, 19)]

    def test_ends_today(self) -> None:
        assert parse_closing_day("Ends Tuesday", TODAY) == [TODAY]
        assert parse_closing_day("must end tonight", TODAY) == [TODAY]

    def test_last_day_tomorrow(self) -> None:
        assert parse_closing_day("Last day tomorrow!", TODAY) == [TODAY, date(2026, 2, 18)]

    def test_no_closing_phrase(self) -> None:
        assert parse_closing_day("Opens Friday", TODAY) is None


class TestParseDateText:
    def test_prefers_range(self) -> None:
        assert parse_date_text("Feb 18 - 19", TODAY) == [date(2026, 2, 18), date(2026, 2, 19)]

    def test_single_date(self) -> None:
        assert parse_date_text("Fri Feb 20 at 7pm", TODAY) == date(2026, 2, 20)

    def test_closing_phrase_with_explicit_date(self) -> None:
        assert parse_date_text("Last showing Sat Feb 21", TODAY) == date(2026, 2, 21)
        assert parse_date_text("Ends Friday, February 20th", TODAY) == date(2026, 2, 20)

    def test_closing_phrase_without_date_is_a_run(self) -> None:
        assert parse_date_text("Ends Thursday", TODAY) == [TODAY, date(2026, 2, 18), date(2026, 2, 19)]

    def test_numeric_fallback(self) -> None:
        assert parse_date_text("2/20 7:00pm", TODAY) == date(2026, 2, 20)

    def test_nothing(self) -> None:
        assert parse_date_text("", TODAY) is None
        assert parse_date_text("Coming soon", TODAY) is None


class TestParseTime:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("3:00pm", "3:00 PM"),
            ("3pm", "3:00 PM"),
            ("3.00 p.m.", "3:00 PM"),
            ("10:00 a.m.", "10:00 AM"),
            ("12:00 AM", "12:00 AM"),
            ("20:45pm", "8:45 PM"),
            ("noon", "12:00 PM"),
        ],
    )
    def test_times_with_meridiem(self, raw: str, expected: str) -> None:
        assert parse_time(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("11:00", "11:00 AM"),
            ("9:30", "9:30 AM"),
            ("12:15", "12:15 PM"),
            ("2:30", "2:30 PM"),
            ("8:45", "8:45 PM"),
            ("13:15", "1:15 PM"),
            ("0:30", "12:30 AM"),
        ],
    )
    def test_bare_times_use_cinema_hours(self, raw: str, expected: str) -> None:
        assert parse_time(raw) == expected

    def test_invalid_times(self) -> None:
        assert parse_time("25:00") is None
        assert parse_time("See Times") is None
        assert parse_time("") is None
        assert parse_time(None) is None

    def test_canonical_time_is_stable(self) -> None:
        assert parse_time("7:30 PM") == "7:30 PM"


class TestClockConversions:
    def test_to_minutes(self) -> None:
        assert to_minutes("12:00 AM") == 0
        assert to_minutes("1:00 AM") == 60
        assert to_minutes("12:30 PM") == 750
        assert to_minutes("11:00 PM") == 1380

    def test_late_show_sorts_after_early_morning(self) -> None:
        assert to_minutes("11:00 PM") > to_minutes("1:00 AM")

    def test_to_minutes_sentinel(self) -> None:
        assert to_minutes("See Times") is None

    def test_to_24_hour(self) -> None:
        assert to_24_hour("7:30 PM") == "19:30"
        assert to_24_hour("12:05 AM") == "00:05"

    def test_format_time(self) -> None:
        assert format_time(19, 5) == "7:05 PM"
        assert format_time(0, 0) == "12:00 AM"
        assert format_time(12, 0) == "12:00 PM"

    def test_iso_time(self) -> None:
        assert parse_iso_time("2026-02-17T19:00:00-05:00") == "7:00 PM"
        assert parse_iso_time("2026-02-17T09:30") == "9:30 AM"
        assert parse_iso_time("2026-02-17") is None
