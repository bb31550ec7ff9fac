# planner/repeat.py
"""
Правила повторения задач и вычисление следующей даты.

Поддерживаются четыре вида правил:
- y           : ежегодно;
- d <n>       : каждые n дней (1..365);
- w <дни>     : по дням недели, 1 = понедельник, 7 = воскресенье;
- m <дни>[ <месяцы>]: по дням месяца (-1 = последний день, -2 = предпоследний),
                       опционально только в перечисленных месяцах.

Все функции чистые: никакого состояния между вызовами.
"""
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Union

from loguru import logger

from .utils import _days_in_month, add_date, format_ymd, later_of, make_date

# Грубая проверка формата перед разбором (её делает бот на вводе пользователя)
REPEAT_RULE_PATTERN = re.compile(r"^([mwd]\s\S.*|y$)")
# Только ASCII-цифры со знаком: без "1_0", "١" и пробелов
INT_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)

MAX_INTERVAL_DAYS = 365
LAST_DAY = -1
PENULTIMATE_DAY = -2


# ---------- ошибки ----------

class RepeatError(ValueError):
    """Правило повторения не удалось разобрать или применить."""


class EmptyRule(RepeatError):
    pass


class UnknownRuleKind(RepeatError):
    pass


class InvalidInterval(RepeatError):
    pass


class InvalidWeekday(RepeatError):
    pass


class InvalidMonthlyDay(RepeatError):
    pass


class InvalidMonth(RepeatError):
    pass


class MalformedRule(RepeatError):
    pass


class NoMatchingMonth(RepeatError):
    """Ни один день из правила m не попал в перечисленные месяцы текущего года."""


class DateOutOfRange(RepeatError):
    """Следующая дата выходит за пределы календаря (после 9999-12-31)."""


# ---------- варианты правил ----------

@dataclass(frozen=True, slots=True)
class Yearly:
    pass


@dataclass(frozen=True, slots=True)
class EveryNDays:
    n: int

    def __post_init__(self) -> None:
        if not 1 <= self.n <= MAX_INTERVAL_DAYS:
            raise InvalidInterval(f"expected number of days between 1 and {MAX_INTERVAL_DAYS}, got {self.n}")


@dataclass(frozen=True, slots=True)
class WeeklyOnDays:
    days: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.days or any(not 1 <= d <= 7 for d in self.days):
            raise InvalidWeekday(f"weekdays must be in 1..7, got {self.days}")


@dataclass(frozen=True, slots=True)
class MonthlyOnDays:
    """
    days  : уже разрешённые дни месяца (сентинелы -1/-2 подставлены при разборе);
    months: пустой кортеж означает «каждый месяц».
    """

    days: tuple[int, ...]
    months: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not self.days or any(not 1 <= d <= 31 for d in self.days):
            raise InvalidMonthlyDay(f"month days must be in 1..31, got {self.days}")
        if any(not 1 <= m <= 12 for m in self.months):
            raise InvalidMonth(f"months must be in 1..12, got {self.months}")


RecurrenceRule = Union[Yearly, EveryNDays, WeeklyOnDays, MonthlyOnDays]


# ---------- разбор ----------

def is_valid_repeat(rule: str) -> bool:
    return bool(rule) and REPEAT_RULE_PATTERN.match(rule) is not None


def _atoi(piece: str, error: type[RepeatError], what: str) -> int:
    if INT_PATTERN.fullmatch(piece) is None:
        raise error(f"error in checking {what} in repeat rule, got '{piece}'")
    return int(piece)


def _split_ints(raw: str, error: type[RepeatError], what: str) -> list[int]:
    return [_atoi(piece, error, what) for piece in raw.split(",")]


def _parse_days_interval(tokens: list[str]) -> EveryNDays:
    if len(tokens) < 2:
        raise InvalidInterval("expected number of days in 'd' repeat rule")
    return EveryNDays(_atoi(tokens[1], InvalidInterval, "days"))


def _parse_weekly(tokens: list[str]) -> WeeklyOnDays:
    if len(tokens) < 2:
        raise InvalidWeekday("expected weekdays in 'w' repeat rule")
    days = _split_ints(tokens[1], InvalidWeekday, "weekdays")
    for d in days:
        if not 1 <= d <= 7:
            raise InvalidWeekday(f"can not parse weekday for repeat value, got '{d}'")
    return WeeklyOnDays(tuple(days))


def _parse_monthly(tokens: list[str], now: date, d: date) -> MonthlyOnDays:
    if len(tokens) == 1 or len(tokens) > 3:
        raise MalformedRule(f"error in 'm' rule: expected 2 or 3 parts, got {len(tokens)}")

    anchor = later_of(now, d)
    last_day = _days_in_month(anchor.year, anchor.month)

    days: list[int] = []
    for day in _split_ints(tokens[1], InvalidMonthlyDay, "days"):
        if 1 <= day <= 31:
            days.append(day)
        elif day == LAST_DAY:
            days.append(last_day)
        elif day == PENULTIMATE_DAY:
            days.append(last_day - 1)
        else:
            raise InvalidMonthlyDay(f"error in checking days in repeat rule 'm', got '{day}'")

    months: list[int] = []
    if len(tokens) == 3:
        for month in _split_ints(tokens[2], InvalidMonth, "months"):
            if not 1 <= month <= 12:
                raise InvalidMonth(f"error in checking months in repeat rule 'm', got '{month}'")
            months.append(month)

    return MonthlyOnDays(tuple(days), tuple(months))


def parse_repeat(now: date, d: date, rule: str) -> RecurrenceRule:
    """
    Разбирает текст правила в один из вариантов.

    now и d нужны только правилу m: сентинелы -1/-2 разрешаются
    по месяцу якорной даты (d, если она позже now, иначе now).
    """
    tokens = rule.split() if rule else []
    if not tokens:
        raise EmptyRule("expected repeat, got an empty string")

    kind = tokens[0]
    logger.debug("parsing repeat rule {!r}, kind={}", rule, kind)

    if kind == "y":
        return Yearly()
    if kind == "d":
        return _parse_days_interval(tokens)
    if kind == "w":
        return _parse_weekly(tokens)
    if kind == "m":
        return _parse_monthly(tokens, now, d)
    raise UnknownRuleKind(f"unknown repeat identifier '{kind}'")


# ---------- вычисление ----------

def _next_yearly(now: date, d: date) -> date:
    i = 1
    while True:
        result = add_date(d, years=i)
        if result > now:
            return result
        i += 1


def _next_every_n_days(rule: EveryNDays, now: date, d: date) -> date:
    result = d
    while True:
        result = result + timedelta(days=rule.n)
        if result > now:
            return result


def _next_weekly(rule: WeeklyOnDays, now: date, d: date) -> date:
    anchor = later_of(now, d)
    wd = anchor.isoweekday()
    days = sorted(rule.days)

    for s in days:
        if s > wd:
            return anchor + timedelta(days=s - wd)

    # переносим на следующую неделю
    return anchor + timedelta(days=(7 - wd) + days[0])


def _pick_month_day(anchor: date, days: list[int], inclusive: bool) -> date | None:
    for day in days:
        fits = day >= anchor.day if inclusive else day > anchor.day
        if not fits:
            continue
        candidate = anchor + timedelta(days=day - anchor.day)
        if candidate.day != day:
            # 31-е из 30-дневного месяца: арифметика уехала на 1-е, строим дату напрямую
            candidate = make_date(anchor.year, anchor.month + 1, day)
        return candidate
    return None


def _next_monthly_any_month(days: list[int], anchor: date) -> date:
    found = _pick_month_day(anchor, days, inclusive=False)
    if found is not None:
        return found

    first_of_next = make_date(anchor.year, anchor.month + 1, 1)
    found = _pick_month_day(first_of_next, days, inclusive=True)
    if found is None:
        # недостижимо: days не пуст, а на первом числе подходит любой день >= 1
        raise NoMatchingMonth(f"no day from {days} fits after {format_ymd(anchor)}")
    return found


def _next_monthly_in_months(days: list[int], months: list[int], anchor: date) -> date:
    start = anchor
    for month in months:
        if month < start.month:
            continue
        same_month = month == start.month

        start = make_date(start.year, month, 1)
        day_count = _days_in_month(start.year, start.month)

        for day in days:
            fits = day > start.day if same_month else day >= start.day
            if fits and day <= day_count:
                return make_date(start.year, month, day)
            if day > start.day and day > day_count:
                # в этом месяце столько дней нет, смотрим со следующего
                start = make_date(start.year, start.month + 1, 1)

    raise NoMatchingMonth(
        f"no day from {days} fits months {months} after {format_ymd(anchor)}"
    )


def _next_monthly(rule: MonthlyOnDays, now: date, d: date) -> date:
    anchor = later_of(now, d)
    days = sorted(rule.days)

    if not rule.months:
        return _next_monthly_any_month(days, anchor)
    return _next_monthly_in_months(days, sorted(rule.months), anchor)


def get_next_date(rule: RecurrenceRule, now: date, d: date) -> date:
    """Ближайшая дата по правилу. y и d считают от d, w и m от якоря."""
    try:
        match rule:
            case Yearly():
                result = _next_yearly(now, d)
            case EveryNDays():
                result = _next_every_n_days(rule, now, d)
            case WeeklyOnDays():
                result = _next_weekly(rule, now, d)
            case MonthlyOnDays():
                result = _next_monthly(rule, now, d)
            case _:
                raise TypeError(f"unsupported repeat rule: {rule!r}")
    except RepeatError:
        raise
    except (OverflowError, ValueError) as e:
        # date() не умеет годы после 9999
        raise DateOutOfRange(f"next date for {format_ymd(d)} is out of range: {e}") from e

    logger.debug("next date for {} (now={}, date={}): {}", rule, now, d, result)
    return result


def next_date(now: date, d: date, rule: str) -> str:
    """
    Следующая дата задачи в формате '20240131'.

    Бросает RepeatError (или наследника), если правило некорректно
    или по нему не находится дата.
    """
    parsed = parse_repeat(now, d, rule)
    return format_ymd(get_next_date(parsed, now, d))
