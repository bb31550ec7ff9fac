from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import StatesGroup, State
from aiogram.types import Message, CallbackQuery
from loguru import logger

from ..keyboards import (
    SKIP, date_presets_kb, repeat_presets_kb, skip_kb, confirm_kb
)
from ..models import Task, TaskValidationError, normalize_task_date
from ..repeat import RepeatError, is_valid_repeat, next_date
from ..tasks_repo import add_task
from ..utils import today_local, parse_ymd, human_ymd

router = Router()

class AddTask(StatesGroup):
    waiting_title = State()
    waiting_date = State()
    waiting_repeat = State()
    waiting_comment = State()
    confirming = State()

def selection_preview(data: dict) -> str:
    date_str = human_ymd(data["date"]) if data.get("date") else "сегодня"
    rep_str = data.get("repeat") or "нет"
    comment_str = data.get("comment") or "нет"

    return (
        f"🧩 Новая задача: {data.get('title', '')}\n"
        f"• Дата: {date_str}\n"
        f"• Повтор: {rep_str}\n"
        f"• Комментарий: {comment_str}\n"
    )

def check_repeat(rule: str, date_text: str) -> str | None:
    """Пробный расчёт: None, если правило годится, иначе текст ошибки."""
    if not is_valid_repeat(rule):
        return "формат: y | d <дни> | w <дни недели> | m <дни> [месяцы]"
    today = today_local()
    d = parse_ymd(date_text) if date_text and date_text != "today" else today
    try:
        next_date(today, d, rule)
    except RepeatError as e:
        return str(e)
    return None

@router.message(Command("add"))
async def cmd_add(message: Message, state: FSMContext):
    await state.clear()
    await state.set_state(AddTask.waiting_title)
    await message.answer("Шаг 1/4. Отправьте текст задачи:")

@router.message(AddTask.waiting_title)
async def st_title(message: Message, state: FSMContext):
    title = (message.text or "").strip()
    if not title:
        await message.answer("Текст пуст. Повторите:")
        return
    await state.update_data(title=title, date="", repeat="", comment="")
    await state.set_state(AddTask.waiting_date)
    await message.answer(
        selection_preview(await state.get_data()) + "\nШаг 2/4. Дата в формате ГГГГММДД (например 20240131):",
        reply_markup=date_presets_kb()
    )

async def _ask_repeat(message: Message, state: FSMContext):
    await state.set_state(AddTask.waiting_repeat)
    await message.answer(
        selection_preview(await state.get_data())
        + "\nШаг 3/4. Правило повтора (y, d 7, w 1,3,5, m 1,-1 или m 15 1,6) или «-» без повтора:",
        reply_markup=repeat_presets_kb()
    )

@router.message(AddTask.waiting_date)
async def st_date(message: Message, state: FSMContext):
    text = (message.text or "").strip()
    if text in (SKIP, "today", "сегодня"):
        text = "today"
    elif parse_ymd(text) is None:
        await message.answer("Не понял дату. Нужно 8 цифр ГГГГММДД, например 20240131:")
        return
    await state.update_data(date=text)
    await _ask_repeat(message, state)

@router.callback_query(AddTask.waiting_date, F.data == "adate:today")
async def cb_date_today(call: CallbackQuery, state: FSMContext):
    await state.update_data(date="today")
    await _ask_repeat(call.message, state)
    await call.answer()

async def _set_repeat(message: Message, state: FSMContext, rule: str) -> bool:
    if rule:
        data = await state.get_data()
        problem = check_repeat(rule, data.get("date", ""))
        if problem:
            logger.warning("Rejected repeat rule {!r}: {}", rule, problem)
            await message.answer(f"Некорректное правило повтора: {problem}\nПовторите:")
            return False
    await state.update_data(repeat=rule)
    await state.set_state(AddTask.waiting_comment)
    await message.answer(
        selection_preview(await state.get_data()) + "\nШаг 4/4. Комментарий (или «-»):",
        reply_markup=skip_kb("acomment:skip")
    )
    return True

@router.message(AddTask.waiting_repeat)
async def st_repeat(message: Message, state: FSMContext):
    rule = (message.text or "").strip()
    await _set_repeat(message, state, "" if rule == SKIP else rule)

@router.callback_query(AddTask.waiting_repeat, F.data.startswith("arep:"))
async def cb_repeat(call: CallbackQuery, state: FSMContext):
    rule = call.data.split(":", 1)[1]
    await _set_repeat(call.message, state, "" if rule == "none" else rule)
    await call.answer()

async def _ask_confirm(message: Message, state: FSMContext):
    await state.set_state(AddTask.confirming)
    await message.answer(
        selection_preview(await state.get_data()) + "\nПроверить и сохранить?",
        reply_markup=confirm_kb()
    )

@router.message(AddTask.waiting_comment)
async def st_comment(message: Message, state: FSMContext):
    comment = (message.text or "").strip()
    await state.update_data(comment="" if comment == SKIP else comment)
    await _ask_confirm(message, state)

@router.callback_query(AddTask.waiting_comment, F.data == "acomment:skip")
async def cb_comment_skip(call: CallbackQuery, state: FSMContext):
    await state.update_data(comment="")
    await _ask_confirm(call.message, state)
    await call.answer()

@router.callback_query(AddTask.confirming, F.data == "save_task")
async def cb_save(call: CallbackQuery, state: FSMContext):
    data = await state.get_data()
    draft = Task(
        id=None,
        user_id=call.from_user.id,
        date=data.get("date", ""),
        title=data.get("title", ""),
        comment=data.get("comment", ""),
        repeat=data.get("repeat", ""),
    )

    try:
        task = normalize_task_date(draft, today_local())
    except (TaskValidationError, RepeatError) as e:
        logger.warning("Task draft rejected: {}", e)
        await call.message.answer(f"Не удалось сохранить: {e}")
        await call.answer()
        return

    task_id = await add_task(task)
    await state.clear()
    text = f"Задача #{task_id} добавлена ✅ на {human_ymd(task.date)}"
    try:
        await call.message.edit_text(text)
        await call.message.edit_reply_markup(reply_markup=None)
    except Exception:
        await call.message.answer(text, reply_markup=None)
    await call.answer()

@router.callback_query(F.data == "cancel_task")
async def cb_cancel(call: CallbackQuery, state: FSMContext):
    await state.clear()
    try:
        await call.message.edit_text("Отменено.")
        await call.message.edit_reply_markup(reply_markup=None)
    except Exception:
        await call.message.answer("Отменено.")
    await call.answer()
