from aiogram.types import (
    ReplyKeyboardMarkup, KeyboardButton,
    InlineKeyboardMarkup, InlineKeyboardButton
)

# Текстовые кнопки главного меню
BTN_ADD = "➕ Добавить задачу"
BTN_LIST = "📋 Список"
BTN_DONE = "✅ Сделано"
BTN_DELETE = "🗑 Удалить"
BTN_HELP = "❓ Помощь"

# Значение «пропустить шаг» в мастере
SKIP = "-"

def main_kb():
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=BTN_ADD)],
            [KeyboardButton(text=BTN_LIST), KeyboardButton(text=BTN_DONE)],
            [KeyboardButton(text=BTN_DELETE), KeyboardButton(text=BTN_HELP)],
        ],
        resize_keyboard=True,
    )

def date_presets_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="📅 Сегодня", callback_data="adate:today"),
        InlineKeyboardButton(text="❌ Отмена", callback_data="cancel_task"),
    ]])

def repeat_presets_kb() -> InlineKeyboardMarkup:
    row1 = [
        InlineKeyboardButton(text="Без повтора", callback_data="arep:none"),
        InlineKeyboardButton(text="Каждый день", callback_data="arep:d 1"),
        InlineKeyboardButton(text="Каждую неделю", callback_data="arep:d 7"),
    ]
    row2 = [
        InlineKeyboardButton(text="Последний день месяца", callback_data="arep:m -1"),
        InlineKeyboardButton(text="Каждый год", callback_data="arep:y"),
    ]
    return InlineKeyboardMarkup(inline_keyboard=[row1, row2])

def skip_kb(callback_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="Пропустить", callback_data=callback_data),
    ]])

def confirm_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="💾 Сохранить", callback_data="save_task"),
        InlineKeyboardButton(text="❌ Отмена", callback_data="cancel_task"),
    ]])

def inline_task_actions(task_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[
        InlineKeyboardButton(text="✅ Сделано", callback_data=f"done:{task_id}"),
        InlineKeyboardButton(text="🗑 Удалить", callback_data=f"del:{task_id}")
    ]])
