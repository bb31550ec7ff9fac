from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from loguru import logger

from ..repeat import RepeatError, is_valid_repeat, next_date
from ..utils import parse_ymd, human_ymd

router = Router()

USAGE = (
    "Использование: /nextdate <now> <date> <правило>\n"
    "напр.: /nextdate 20240105 20240101 d 7"
)

@router.message(Command("nextdate"))
async def cmd_nextdate(message: Message, command: CommandObject):
    """Предпросмотр следующей даты, ничего не сохраняет."""
    parts = (command.args or "").split(maxsplit=2)
    if len(parts) < 3:
        await message.answer(USAGE)
        return

    now, d, rule = parse_ymd(parts[0]), parse_ymd(parts[1]), parts[2].strip()
    if now is None:
        await message.answer("Некорректная дата now. " + USAGE)
        return
    if d is None:
        await message.answer("Некорректная дата date. " + USAGE)
        return
    if not is_valid_repeat(rule):
        await message.answer("Некорректное правило повтора. " + USAGE)
        return

    try:
        result = next_date(now, d, rule)
    except RepeatError as e:
        logger.warning("Preview failed for {!r}: {}", rule, e)
        await message.answer(f"Не удалось рассчитать: {e}")
        return

    await message.answer(f"{result} ({human_ymd(result)})")
