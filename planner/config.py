import os
from dotenv import load_dotenv
from zoneinfo import ZoneInfo

load_dotenv()

# Токен проверяется при старте бота (bot.py), чтобы ядро импортировалось без .env
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Часовой пояс нужен только для того, чтобы понять, какой сегодня день
TZ = ZoneInfo(os.getenv("PLANNER_TZ", "Europe/Moscow"))
DB_PATH = os.getenv("TODO_DBFILE") or "scheduler.db"

# Формат хранения дат задач: 20240131
DATE_FORMAT = "%Y%m%d"
# Формат даты в поиске: 31.01.2024
SEARCH_DATE_FORMAT = "%d.%m.%Y"

# Сколько задач отдавать в /list и /search
TASKS_LIMIT = int(os.getenv("TASKS_LIMIT", "20"))

# Время ежедневной сводки
DIGEST_HOUR = int(os.getenv("DIGEST_HOUR", "9"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
