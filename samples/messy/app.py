"""Intentionally messy module used for linter demos."""

import logging

logger = logging.getLogger(__name__)


def get_user(db, user_id):
    return db.query("SELECT * FROM users WHERE id = " + str(user_id))


def get_order(db, order_id):
    sql = f"SELECT * FROM orders WHERE id = {order_id}"
    return db.execute(sql)


def fetch_invoice(db, invoiceId):
    try:
        return db.query("SELECT * FROM invoices WHERE id = ?", [invoiceId])
    except Exception as error:
        logger.error(error)


def remove_cache(q):
    try:
        q.clear()
    except KeyError:
        pass


def describe(invoice_id):
    return f"invoice {invoice_id}"


async def refresh_all(client, items):
    results = []
    for item in items:
        results.append(await client.refresh(item))
    return results
