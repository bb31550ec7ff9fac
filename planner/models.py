import sqlite3
from dataclasses import dataclass, replace
from datetime import date

from loguru import logger

from .repeat import next_date
from .utils import format_ymd, parse_ymd


class TaskValidationError(ValueError):
    pass


class TaskNotFound(LookupError):
    pass


@dataclass(frozen=True, slots=True)
class Task:
    """
    Задача планировщика.

    date хранится строкой '20240131', repeat хранит текст правила (может быть пустым).
    """

    id: int | None
    user_id: int
    date: str
    title: str
    comment: str = ""
    repeat: str = ""

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Task":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            title=row["title"],
            comment=row["comment"] or "",
            repeat=row["repeat"] or "",
        )


def normalize_task_date(task: Task, today: date) -> Task:
    """
    Проверяет задачу и приводит её дату к актуальной:
    - пустая дата или 'today' -> сегодня;
    - дата в прошлом без правила -> сегодня;
    - дата в прошлом с правилом -> следующая дата по правилу.
    """
    if not task.title or not task.title.strip():
        raise TaskValidationError("the title field is empty")

    if not task.date or task.date == "today":
        return replace(task, date=format_ymd(today))

    d = parse_ymd(task.date)
    if d is None:
        raise TaskValidationError(f"the field date is wrong: '{task.date}'")

    if d < today:
        if not task.repeat:
            logger.debug("task date {} is in the past, no repeat rule: using today", task.date)
            return replace(task, date=format_ymd(today))
        nxt = next_date(today, d, task.repeat)
        logger.debug("task date {} is in the past, repeat {!r}: moved to {}", task.date, task.repeat, nxt)
        return replace(task, date=nxt)

    return task
