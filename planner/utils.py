# planner/utils.py
from datetime import date, datetime, timedelta
from typing import Optional

from .config import TZ, DATE_FORMAT, SEARCH_DATE_FORMAT


# ---------- время и парсинг ----------

def now_local() -> datetime:
    return datetime.now(TZ)


def today_local() -> date:
    return now_local().date()


def format_ymd(d: date) -> str:
    """date -> '20240131' (всегда 8 цифр)."""
    # strftime не дополняет нулями годы < 1000
    return f"{d.year:04d}{d.month:02d}{d.day:02d}"


def parse_ymd(text: str) -> Optional[date]:
    """
    '20240131' -> date(2024, 1, 31).
    Строго 8 цифр, иначе None.
    """
    if not text:
        return None
    s = text.strip()
    if len(s) != 8 or not s.isdigit():
        return None
    try:
        return datetime.strptime(s, DATE_FORMAT).date()
    except ValueError:
        return None


def parse_search_date(text: str) -> Optional[date]:
    """'31.01.2024' -> date, для /search."""
    try:
        return datetime.strptime(text.strip(), SEARCH_DATE_FORMAT).date()
    except ValueError:
        return None


# ---------- календарная математика ----------

def _days_in_month(year: int, month: int) -> int:
    if month in (1, 3, 5, 7, 8, 10, 12):
        return 31
    if month in (4, 6, 9, 11):
        return 30
    leap = (year % 400 == 0) or (year % 4 == 0 and year % 100 != 0)
    return 29 if leap else 28


def make_date(year: int, month: int, day: int) -> date:
    """
    Собирает дату с нормализацией, как обычная календарная арифметика:
    - месяц 13 -> январь следующего года, месяц 0 -> декабрь предыдущего;
    - 31 апреля -> 1 мая;
    - день 0 -> последний день предыдущего месяца.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def add_date(d: date, years: int = 0, months: int = 0, days: int = 0) -> date:
    # 29.02 + 1 год = 01.03, а не 28.02
    shifted = make_date(d.year + years, d.month + months, d.day)
    return shifted + timedelta(days=days)


def later_of(now: date, d: date) -> date:
    """Якорь: дата задачи, если она строго позже now, иначе now."""
    return d if d > now else now


# ---------- форматирование карточки задачи ----------

def human_ymd(text: str) -> str:
    d = parse_ymd(text)
    return f"{d.day:02d}.{d.month:02d}.{d.year:04d}" if d else text


def pretty_task(task) -> str:
    """
    #7 🗓 31.01.2024 | Тренировка

    повтор: w 1,3,5

    💬 комментарий
    """
    header = f"#{task.id} 🗓 {human_ymd(task.date)} | {task.title}"
    rep_line = f"повтор: {task.repeat}" if task.repeat else "повтор: —"

    blocks = [header, rep_line]
    if task.comment:
        blocks.append(f"💬 {task.comment}")

    return "\n\n".join(blocks)
