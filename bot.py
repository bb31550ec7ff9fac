import asyncio
import sys
from aiogram import Bot, Dispatcher
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from planner.config import BOT_TOKEN, TZ, DIGEST_HOUR, LOG_LEVEL
from planner.db import init_db
from planner.router import build_router
from planner.scheduler import send_morning_digest

async def main():
    if not BOT_TOKEN:
        raise RuntimeError("Добавьте BOT_TOKEN в .env")

    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)

    await init_db()
    bot = Bot(BOT_TOKEN)
    dp = Dispatcher()
    dp.include_router(build_router())

    scheduler = AsyncIOScheduler(timezone=str(TZ))
    scheduler.add_job(send_morning_digest, "cron", hour=DIGEST_HOUR, minute=0, args=[bot], id="morning_digest", coalesce=True)
    scheduler.start()

    logger.info("Bot is up.")
    await dp.start_polling(bot)

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
