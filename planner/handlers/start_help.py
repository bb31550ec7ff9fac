from aiogram import Router, F
from aiogram.filters import CommandStart, Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from aiogram.utils.markdown import code

from ..keyboards import main_kb, BTN_ADD, BTN_LIST, BTN_DONE, BTN_DELETE, BTN_HELP

router = Router()

RULES_HELP = (
    "Правила повтора:\n"
    "• y — каждый год\n"
    "• d 7 — каждые 7 дней (1..365)\n"
    "• w 1,3,5 — по пн, ср, пт (1 = пн, 7 = вс)\n"
    "• m 1,15 — 1-го и 15-го числа; -1 — последний день, -2 — предпоследний\n"
    "• m 10 1,6 — 10-го числа января и июня"
)

@router.message(CommandStart())
async def cmd_start(message: Message):
    await message.answer(
        "Привет! Планировщик задач с повторениями и утренней сводкой.\n\n"
        "Команды:\n"
        "• /add — добавить задачу (мастер)\n"
        "• /list — ближайшие задачи\n"
        "• /search <текст|ДД.ММ.ГГГГ> — поиск\n"
        "• /done <id> — выполнить (с повтором — перенести)\n"
        "• /delete <id> — удалить\n"
        "• /repeat <id> <правило> — задать повтор\n"
        "• /edit <id> <поле> <значение> — изменить дату, заголовок или комментарий\n"
        "• /nextdate <now> <date> <правило> — посчитать следующую дату\n"
        "• /help — помощь",
        reply_markup=main_kb()
    )

@router.message(Command("help"))
async def cmd_help(message: Message):
    await message.answer(
        "➕ /add — текст → дата (ГГГГММДД) → повтор → комментарий → сохранить.\n"
        "Прошедшая дата без повтора становится сегодняшней, с повтором — следующей по правилу.\n"
        "✏️ /edit 12 дата 20240131 — дата проверяется так же, как при добавлении.\n"
        "✅ /done — задача без повтора удаляется, с повтором переносится.\n\n"
        + RULES_HELP
    )

# Текстовые кнопки главного меню
from .add_wizard import cmd_add  # переиспользуем
from .list_search import cmd_list

@router.message(F.text == BTN_ADD)
async def kb_add(message: Message, state: FSMContext):
    await cmd_add(message, state)

@router.message(F.text == BTN_LIST)
async def kb_list(message: Message):
    await cmd_list(message)

@router.message(F.text == BTN_DONE)
async def kb_done_prompt(message: Message):
    await message.answer("Отправьте команду: " + code("/done <id>"))

@router.message(F.text == BTN_DELETE)
async def kb_del_prompt(message: Message):
    await message.answer("Отправьте команду: " + code("/delete <id>"))

@router.message(F.text == BTN_HELP)
async def kb_help(message: Message):
    await cmd_help(message)
