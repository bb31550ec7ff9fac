from dataclasses import replace

from aiogram import Router, F
from aiogram.filters import Command
from aiogram.types import Message, CallbackQuery
from loguru import logger

from ..keyboards import SKIP
from ..models import TaskNotFound, TaskValidationError, normalize_task_date
from ..repeat import RepeatError, is_valid_repeat
from ..tasks_repo import get_task, update_task, delete_task, edit_task, mark_done
from ..utils import today_local, human_ymd, pretty_task

router = Router()

# Done/Delete/Repeat + коллбэки
@router.message(Command("done"))
async def cmd_done_cmd(message: Message):
    parts = message.text.strip().split()
    if len(parts) < 2 or not parts[1].isdigit():
        await message.answer("Использование: /done <id>")
        return
    await handle_done(message.from_user.id, int(parts[1]), message)

@router.message(Command("delete"))
async def cmd_delete_cmd(message: Message):
    parts = message.text.strip().split()
    if len(parts) < 2 or not parts[1].isdigit():
        await message.answer("Использование: /delete <id>")
        return
    await handle_delete(message.from_user.id, int(parts[1]), message)

@router.message(Command("repeat"))
async def cmd_repeat(message: Message):
    parts = message.text.strip().split(maxsplit=2)
    if len(parts) < 3 or not parts[1].isdigit():
        await message.answer("Использование: /repeat <id> <правило>, напр.: /repeat 12 w 1,3,5 (или «-» чтобы снять)")
        return
    task_id = int(parts[1])
    rule = parts[2].strip()
    if rule == SKIP:
        rule = ""
    elif not is_valid_repeat(rule):
        await message.answer("Некорректное правило. Допустимо: y | d <дни> | w <дни недели> | m <дни> [месяцы]")
        return

    task = await get_task(message.from_user.id, task_id)
    if task is None:
        await message.answer("Задача не найдена.")
        return

    try:
        updated = normalize_task_date(replace(task, repeat=rule), today_local())
    except (TaskValidationError, RepeatError) as e:
        logger.warning("Repeat {!r} rejected for task #{}: {}", rule, task_id, e)
        await message.answer(f"Некорректное правило повтора: {e}")
        return

    await update_task(updated)
    shown = rule or "без повтора"
    await message.answer(f"Повторение для задачи #{task_id}: {shown}. Дата: {human_ymd(updated.date)}")

@router.message(Command("edit"))
async def cmd_edit(message: Message):
    parts = message.text.strip().split(maxsplit=3)
    if len(parts) < 4 or not parts[1].isdigit():
        await message.answer(
            "Использование: /edit <id> <поле> <значение>\n"
            "Поля: дата (ГГГГММДД или today), заголовок, комментарий («-» чтобы очистить)"
        )
        return
    task_id = int(parts[1])

    try:
        task = await edit_task(message.from_user.id, task_id, parts[2], parts[3], today_local())
    except TaskNotFound:
        await message.answer("Задача не найдена.")
        return
    except (TaskValidationError, RepeatError) as e:
        logger.warning("Edit of task #{} rejected: {}", task_id, e)
        await message.answer(f"Не удалось изменить задачу: {e}")
        return

    await message.answer(f"Задача обновлена:\n\n{pretty_task(task)}")

@router.callback_query(F.data.startswith("done:"))
async def cb_done(call: CallbackQuery):
    task_id = int(call.data.split(":")[1])
    await handle_done(call.from_user.id, task_id, call.message, edit=True)
    await call.answer("Готово!")

@router.callback_query(F.data.startswith("del:"))
async def cb_del(call: CallbackQuery):
    task_id = int(call.data.split(":")[1])
    await handle_delete(call.from_user.id, task_id, call.message, edit=True)
    await call.answer("Удалено")

async def _reply(msg_obj, text: str, edit: bool):
    if edit and msg_obj:
        try:
            await msg_obj.edit_text(text)
        except Exception:
            await msg_obj.answer(text)
    else:
        await msg_obj.answer(text)

async def handle_done(user_id: int, task_id: int, msg_obj, edit: bool = False):
    try:
        task = await mark_done(user_id, task_id, today_local())
    except TaskNotFound:
        await msg_obj.answer("Задача не найдена.")
        return
    except RepeatError as e:
        logger.warning("Task #{} can not be moved: {}", task_id, e)
        await msg_obj.answer(f"Не удалось рассчитать следующую дату: {e}")
        return
    except TaskValidationError as e:
        logger.warning("Task #{} has broken data: {}", task_id, e)
        await msg_obj.answer(f"Задача повреждена: {e}")
        return

    if task is None:
        text = f"Задача #{task_id}: ✅ выполнено и удалено"
    else:
        text = f"Задача #{task_id}: ✅ выполнено, следующая дата {human_ymd(task.date)}"
    await _reply(msg_obj, text, edit)

async def handle_delete(user_id: int, task_id: int, msg_obj, edit: bool = False):
    if not await delete_task(user_id, task_id):
        await msg_obj.answer("Задача не найдена.")
        return
    await _reply(msg_obj, f"Задача #{task_id}: 🗑 удалена", edit)
