"""Well-behaved module used for linter demos."""

import asyncio
import logging

logger = logging.getLogger(__name__)


class RecordNotFound(Exception):
    pass


def get_user(db, user_id):
    return db.query("SELECT * FROM users WHERE id = ?", [user_id])


def get_order(db, order_id):
    rows = db.query("SELECT * FROM orders WHERE id = ?", [order_id])
    if not rows:
        raise RecordNotFound(order_id)
    return rows[0]


def load_settings(path):
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read()
    except OSError as error:
        logger.error("Cannot read %s", path)
        raise RecordNotFound(path) from error


async def refresh_all(client, items, limit=10):
    semaphore = asyncio.Semaphore(limit)

    async def refresh_one(item):
        async with semaphore:
            return await client.refresh(item)

    return await asyncio.gather(*(refresh_one(item) for item in items))
