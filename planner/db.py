import sqlite3
import aiosqlite
from contextlib import asynccontextmanager
from loguru import logger
from .config import DB_PATH

async def init_db():
    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute("""
        CREATE TABLE IF NOT EXISTS scheduler (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            date    VARCHAR(8) NOT NULL,    -- YYYYMMDD
            title   VARCHAR(128) NOT NULL,
            comment VARCHAR(250),
            repeat  VARCHAR(128)            -- y | d N | w 1,3 | m 1,-1 [1,6]
        );
        """)
        await db.execute("CREATE INDEX IF NOT EXISTS scheduler_date ON scheduler(date);")
        await db.commit()
    logger.info("Database ready at {}", DB_PATH)

@asynccontextmanager
async def db_conn():
    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        await conn.close()
