from collections import defaultdict

from aiogram import Bot
from loguru import logger

from .tasks_repo import tasks_for_date
from .utils import today_local, pretty_task

def build_digest(tasks) -> dict[int, str]:
    """user_id -> текст сводки по задачам на сегодня."""
    by_user = defaultdict(list)
    for t in tasks:
        by_user[t.user_id].append(t)

    digests = {}
    for uid, user_tasks in by_user.items():
        lines = ["Утренняя сводка задач:", "📅 Сегодня:"]
        lines += [f"— {pretty_task(t)}" for t in user_tasks]
        digests[uid] = "\n".join(lines)
    return digests

async def send_morning_digest(bot: Bot):
    tasks = await tasks_for_date(today_local())
    for uid, text in build_digest(tasks).items():
        try:
            await bot.send_message(uid, text)
        except Exception as e:
            logger.warning("Digest for user {} not sent: {}", uid, e)
