"""Tests for repeat rules: parsing, next-date evaluation, the next_date facade.

Tests cover:
- Documented examples for every rule kind
- Month-length rollover and -1/-2 sentinels
- Month-set scanning and the no-match error
- Parse errors for each malformed rule
- Forward progress over a range of dates
- Dates past the end of the calendar
"""

from datetime import date, timedelta

import pytest

from planner.repeat import (
    DateOutOfRange,
    EmptyRule,
    EveryNDays,
    InvalidInterval,
    InvalidMonth,
    InvalidMonthlyDay,
    InvalidWeekday,
    MalformedRule,
    MonthlyOnDays,
    NoMatchingMonth,
    RepeatError,
    UnknownRuleKind,
    WeeklyOnDays,
    Yearly,
    get_next_date,
    is_valid_repeat,
    next_date,
    parse_repeat,
)
from planner.utils import parse_ymd


def d(text: str) -> date:
    return parse_ymd(text)


# ---------------------------------------------------------------------
# d / y
# ---------------------------------------------------------------------

def test_every_n_days_first_step_after_now():
    assert next_date(d("20240105"), d("20240101"), "d 7") == "20240108"


def test_every_n_days_date_equal_to_now_moves_forward():
    assert next_date(d("20240105"), d("20240105"), "d 1") == "20240106"


def test_every_n_days_counts_from_future_date():
    """The interval is always added to the stored date, even if it is already ahead."""
    assert next_date(d("20240101"), d("20240201"), "d 30") == "20240302"


def test_yearly_example():
    assert next_date(d("20240215"), d("20230301"), "y") == "20240301"


def test_yearly_from_leap_day_normalizes_to_march():
    assert next_date(d("20240301"), d("20240229"), "y") == "20250301"


def test_yearly_skips_several_years():
    assert next_date(d("20240615"), d("20200101"), "y") == "20250101"


def test_yearly_ignores_trailing_tokens():
    assert parse_repeat(d("20240101"), d("20240101"), "y whatever") == Yearly()


# ---------------------------------------------------------------------
# w
# ---------------------------------------------------------------------

def test_weekly_tuesday_anchor_goes_to_wednesday():
    # 2024-01-02 is a Tuesday
    assert next_date(d("20240102"), d("20240101"), "w 1,3,5") == "20240103"


def test_weekly_wraps_to_next_week():
    # Friday -> next Monday
    assert next_date(d("20240105"), d("20240101"), "w 1") == "20240108"


def test_weekly_sunday_anchor():
    # Sunday -> Tuesday
    assert next_date(d("20240107"), d("20240101"), "w 2") == "20240109"


def test_weekly_same_weekday_is_next_week():
    assert next_date(d("20240101"), d("20231201"), "w 1") == "20240108"


def test_weekly_uses_date_when_it_is_ahead_of_now():
    # anchor is 2024-01-10 (Wednesday)
    assert next_date(d("20240101"), d("20240110"), "w 5") == "20240112"


def test_weekly_unsorted_days():
    assert next_date(d("20240102"), d("20240101"), "w 7,3") == "20240103"


# ---------------------------------------------------------------------
# m without months
# ---------------------------------------------------------------------

def test_monthly_rollover_builds_date_directly():
    assert next_date(d("20240415"), d("20240401"), "m 31") == "20240531"


def test_monthly_rollover_from_february():
    assert next_date(d("20230215"), d("20230201"), "m 30") == "20230330"


def test_monthly_last_day_sentinel():
    assert next_date(d("20240410"), d("20240401"), "m -1") == "20240430"


def test_monthly_penultimate_day_sentinel_leap_february():
    assert next_date(d("20240210"), d("20240201"), "m -2") == "20240228"


def test_monthly_smallest_later_day():
    assert next_date(d("20240110"), d("20240101"), "m 15,1") == "20240115"


def test_monthly_moves_to_next_month():
    assert next_date(d("20240110"), d("20240101"), "m 5") == "20240205"


def test_monthly_moves_into_next_year():
    assert next_date(d("20241220"), d("20241201"), "m 1") == "20250101"


def test_monthly_next_month_too_short_keeps_requested_day():
    # from May 31: June has no 31st, so the result is built as July 31
    assert next_date(d("20240531"), d("20240501"), "m 31") == "20240731"


def test_monthly_second_pass_keeps_rollover_correction():
    assert next_date(d("20230131"), d("20230101"), "m 30") == "20230330"


# ---------------------------------------------------------------------
# m with months
# ---------------------------------------------------------------------

def test_monthly_later_listed_month():
    assert next_date(d("20240115"), d("20240101"), "m 10 6") == "20240610"


def test_monthly_current_listed_month():
    assert next_date(d("20240320"), d("20240301"), "m 25 3,4") == "20240325"


def test_monthly_day_missing_in_month_moves_to_following_listed_month():
    assert next_date(d("20240410"), d("20240401"), "m 31 5,4") == "20240531"


def test_monthly_no_listed_month_fits():
    with pytest.raises(NoMatchingMonth):
        next_date(d("20240110"), d("20240101"), "m 31 2")


def test_monthly_listed_months_already_passed():
    with pytest.raises(NoMatchingMonth):
        next_date(d("20240515"), d("20240501"), "m 10 1")


def test_monthly_anchor_month_compares_against_first_day():
    assert next_date(d("20240410"), d("20240401"), "m 5 4") == "20240405"


def test_monthly_december_day_missing_in_november():
    assert next_date(d("20241120"), d("20241101"), "m 31 11,12") == "20241231"


def test_monthly_listed_months_do_not_wrap_into_next_year():
    with pytest.raises(NoMatchingMonth):
        next_date(d("20241220"), d("20241201"), "m 5 1")


# ---------------------------------------------------------------------
# parsing
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "rule, error",
    [
        ("", EmptyRule),
        ("   ", EmptyRule),
        ("z 1", UnknownRuleKind),
        ("d 400", InvalidInterval),
        ("d 0", InvalidInterval),
        ("d x", InvalidInterval),
        ("d", InvalidInterval),
        ("w 9", InvalidWeekday),
        ("w 0,1", InvalidWeekday),
        ("w 1,,2", InvalidWeekday),
        ("w", InvalidWeekday),
        ("m", MalformedRule),
        ("m 1 2 3", MalformedRule),
        ("m 32", InvalidMonthlyDay),
        ("m -3", InvalidMonthlyDay),
        ("m x", InvalidMonthlyDay),
        ("m 1 13", InvalidMonth),
        ("m 1 x", InvalidMonth),
        ("d 1_0", InvalidInterval),
        ("d ٣", InvalidInterval),
        ("w ١", InvalidWeekday),
        ("m 1_0", InvalidMonthlyDay),
        ("m 1 1_2", InvalidMonth),
    ],
)
def test_parse_errors(rule, error):
    with pytest.raises(error):
        parse_repeat(d("20240410"), d("20240401"), rule)


def test_errors_share_a_base():
    with pytest.raises(RepeatError):
        next_date(d("20240101"), d("20240101"), "d 400")
    assert issubclass(RepeatError, ValueError)


def test_parse_monthly_resolves_sentinels_by_now():
    rule = parse_repeat(d("20240410"), d("20240205"), "m -1,5 1,2")
    assert rule == MonthlyOnDays(days=(30, 5), months=(1, 2))


def test_parse_monthly_resolves_sentinels_by_later_date():
    rule = parse_repeat(d("20240110"), d("20240205"), "m -1,-2")
    assert rule == MonthlyOnDays(days=(29, 28))


def test_parse_variants():
    now = d("20240101")
    assert parse_repeat(now, now, "d 3") == EveryNDays(3)
    assert parse_repeat(now, now, "w 1,7") == WeeklyOnDays((1, 7))


def test_variant_invariants():
    with pytest.raises(InvalidInterval):
        EveryNDays(366)
    with pytest.raises(InvalidWeekday):
        WeeklyOnDays(())


def test_unknown_variant_object():
    with pytest.raises(TypeError):
        get_next_date("y", d("20240101"), d("20240101"))


@pytest.mark.parametrize(
    "now, start, rule",
    [
        ("99991231", "99991230", "d 5"),
        ("99991220", "99991201", "m 5"),
        ("99990701", "99990601", "y"),
        ("99991231", "99991231", "w 1"),
    ],
)
def test_date_past_calendar_end(now, start, rule):
    with pytest.raises(DateOutOfRange):
        next_date(d(now), d(start), rule)


def test_years_before_1000_keep_eight_digits():
    assert next_date(d("00050105"), d("00050101"), "d 7") == "00050108"


@pytest.mark.parametrize(
    "rule, ok",
    [("y", True), ("d 7", True), ("w 1,2", True), ("m 1 2", True),
     ("y 1", False), ("d", False), ("x 1", False), ("", False)],
)
def test_is_valid_repeat(rule, ok):
    assert is_valid_repeat(rule) is ok


# ---------------------------------------------------------------------
# properties
# ---------------------------------------------------------------------

@pytest.mark.parametrize("rule", ["y", "d 1", "d 13", "w 2,6", "w 7"])
def test_result_is_after_now(rule):
    stored = d("20231120")
    now = d("20231201")
    for _ in range(120):
        result = parse_ymd(next_date(now, stored, rule))
        assert result > now
        now += timedelta(days=3)


@pytest.mark.parametrize("rule", ["m 1", "m 15,31", "m -1", "m -2,10"])
def test_monthly_result_is_after_anchor(rule):
    stored = d("20240101")
    now = d("20231215")
    for _ in range(120):
        anchor = max(now, stored)
        result = parse_ymd(next_date(now, stored, rule))
        assert result > anchor
        now += timedelta(days=4)


def test_formatted_result_round_trips():
    text = next_date(d("20240415"), d("20240401"), "m 31")
    assert len(text) == 8 and text.isdigit()
    parsed = parse_ymd(text)
    assert (parsed.year, parsed.month, parsed.day) == (2024, 5, 31)
