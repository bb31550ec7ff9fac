# planner/tasks_repo.py
from dataclasses import replace
from datetime import date
from typing import Optional

from loguru import logger

from .config import TASKS_LIMIT
from .db import db_conn
from .models import Task, TaskNotFound, TaskValidationError, normalize_task_date
from .repeat import next_date
from .utils import format_ymd, parse_search_date, parse_ymd


# ---------- CRUD ----------

async def add_task(task: Task) -> int:
    async with db_conn() as db:
        cur = await db.execute(
            "INSERT INTO scheduler (user_id, date, title, comment, repeat) VALUES (?, ?, ?, ?, ?)",
            (task.user_id, task.date, task.title, task.comment, task.repeat)
        )
        await db.commit()
        task_id = cur.lastrowid
    logger.info("Task #{} added for user {} on {}", task_id, task.user_id, task.date)
    return task_id


async def get_task(user_id: int, task_id: int) -> Optional[Task]:
    async with db_conn() as db:
        cur = await db.execute(
            "SELECT * FROM scheduler WHERE id=? AND user_id=?",
            (task_id, user_id)
        )
        row = await cur.fetchone()
    return Task.from_row(row) if row else None


async def update_task(task: Task) -> None:
    async with db_conn() as db:
        cur = await db.execute(
            "UPDATE scheduler SET date=?, title=?, comment=?, repeat=? WHERE id=? AND user_id=?",
            (task.date, task.title, task.comment, task.repeat, task.id, task.user_id)
        )
        await db.commit()
        if cur.rowcount == 0:
            raise TaskNotFound(f"task #{task.id} not found")


async def update_task_date(task: Task, new_date: str) -> None:
    async with db_conn() as db:
        await db.execute(
            "UPDATE scheduler SET date=? WHERE id=? AND user_id=?",
            (new_date, task.id, task.user_id)
        )
        await db.commit()


# русские названия полей для /edit
EDIT_FIELDS = {
    "date": "date", "дата": "date",
    "title": "title", "заголовок": "title",
    "comment": "comment", "комментарий": "comment",
}


async def edit_task(user_id: int, task_id: int, field: str, value: str, today: date) -> Task:
    """
    Меняет одно поле задачи (дату, заголовок или комментарий).

    Перед сохранением дата проверяется так же, как при создании:
    прошедшая дата с правилом переносится по правилу.
    """
    name = EDIT_FIELDS.get(field.lower())
    if name is None:
        raise TaskValidationError(f"unknown task field '{field}'")

    task = await get_task(user_id, task_id)
    if task is None:
        raise TaskNotFound(f"task #{task_id} not found")

    value = value.strip()
    if name == "comment" and value == "-":
        value = ""

    updated = normalize_task_date(replace(task, **{name: value}), today)
    await update_task(updated)
    logger.info("Task #{} edited: {}={!r}", task_id, name, getattr(updated, name))
    return updated


async def delete_task(user_id: int, task_id: int) -> bool:
    async with db_conn() as db:
        cur = await db.execute("DELETE FROM scheduler WHERE id=? AND user_id=?", (task_id, user_id))
        await db.commit()
        deleted = cur.rowcount > 0
    if deleted:
        logger.info("Task #{} deleted for user {}", task_id, user_id)
    return deleted


# ---------- выборки ----------

async def list_upcoming(user_id: int, today: date) -> list[Task]:
    """Ближайшие задачи: с сегодняшнего дня, по дате."""
    async with db_conn() as db:
        cur = await db.execute(
            "SELECT * FROM scheduler WHERE user_id=? AND date >= ? ORDER BY date LIMIT ?",
            (user_id, format_ymd(today), TASKS_LIMIT)
        )
        rows = await cur.fetchall()
    return [Task.from_row(r) for r in rows]


async def search_tasks(user_id: int, search: str) -> list[Task]:
    """
    '31.01.2024' ищет задачи на эту дату,
    любой другой текст ищется как подстрока в заголовке или комментарии.
    """
    search_date = parse_search_date(search)
    if search_date is not None:
        where = "user_id=? AND date = ?"
        params = [user_id, format_ymd(search_date)]
    else:
        where = "user_id=? AND (title LIKE ? OR comment LIKE ?)"
        pattern = f"%{search}%"
        params = [user_id, pattern, pattern]

    query = f"SELECT * FROM scheduler WHERE {where} ORDER BY date LIMIT ?"
    async with db_conn() as db:
        cur = await db.execute(query, (*params, TASKS_LIMIT))
        rows = await cur.fetchall()
    return [Task.from_row(r) for r in rows]


async def tasks_for_date(day: date) -> list[Task]:
    """Задачи всех пользователей на дату (для утренней сводки)."""
    async with db_conn() as db:
        cur = await db.execute(
            "SELECT * FROM scheduler WHERE date = ? ORDER BY user_id, id",
            (format_ymd(day),)
        )
        rows = await cur.fetchall()
    return [Task.from_row(r) for r in rows]


# ---------- выполнение ----------

async def mark_done(user_id: int, task_id: int, today: date) -> Optional[Task]:
    """
    Отмечает задачу выполненной.

    Без правила повторения задача удаляется (возвращается None),
    с правилом переносится на следующую дату и возвращается обновлённой.
    """
    task = await get_task(user_id, task_id)
    if task is None:
        raise TaskNotFound(f"task #{task_id} not found")

    if not task.repeat:
        await delete_task(user_id, task_id)
        return None

    stored = parse_ymd(task.date)
    if stored is None:
        raise TaskValidationError(f"task #{task_id} has a broken date '{task.date}'")

    nxt = next_date(today, stored, task.repeat)
    await update_task_date(task, nxt)
    logger.info("Task #{} done, moved {} -> {} by {!r}", task_id, task.date, nxt, task.repeat)
    return replace(task, date=nxt)
