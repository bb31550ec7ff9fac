import asyncio
from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from ..keyboards import inline_task_actions
from ..tasks_repo import list_upcoming, search_tasks
from ..utils import pretty_task, today_local

router = Router()

async def send_cards(message: Message, title: str, tasks):
    if not tasks:
        await message.answer("Задач не найдено.")
        return
    await message.answer(f"{title}: {len(tasks)}")
    for t in tasks:
        await message.answer(pretty_task(t), reply_markup=inline_task_actions(t.id))
        await asyncio.sleep(0.05)  # мягкий троттлинг

@router.message(Command("list"))
async def cmd_list(message: Message):
    tasks = await list_upcoming(message.from_user.id, today_local())
    await send_cards(message, "Ближайшие задачи", tasks)

@router.message(Command("search"))
async def cmd_search(message: Message, command: CommandObject):
    query = (command.args or "").strip()
    if not query:
        await message.answer("Использование: /search <текст> или /search ДД.ММ.ГГГГ")
        return
    tasks = await search_tasks(message.from_user.id, query)
    await send_cards(message, f"Поиск «{query}»", tasks)
