import logging
from collections import Counter
from typing import Any, List, Tuple
from uuid import UUID

from tortoise.exceptions import DBConnectionError, OperationalError

from restopos.core.errors import NotFoundError, translate_db_errors
from restopos.models.order import Order, OrderStatus
from restopos.models.table import Table, TableStatus

log = logging.getLogger("restopos.tables")

# Orders that still hold a table
SEATED_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED)


async def occupy_table(table_id: UUID, conn: Any) -> None:
    """Marks the table OCCUPIED on the order-creation transaction."""
    updated = await Table.filter(id=table_id).using_db(conn).update(status=TableStatus.OCCUPIED)
    if not updated:
        raise NotFoundError("Table", table_id)


async def mark_table_dirty(table_id: UUID) -> bool:
    """
    Best-effort turnover after an order closes. Runs outside the close
    transaction; a failure is logged and reported as False.
    """
    try:
        updated = await Table.filter(id=table_id).update(status=TableStatus.DIRTY)
    except (OperationalError, DBConnectionError):
        log.exception(f"Could not mark table {table_id} as DIRTY.")
        return False
    if not updated:
        log.warning(f"Table {table_id} vanished before it could be marked DIRTY.")
    return bool(updated)


async def set_table_status(table_id: UUID, status: TableStatus) -> Table:
    """Manual status change (e.g. a cleaned DIRTY table back to FREE)."""
    with translate_db_errors("updating table status"):
        table = await Table.get_or_none(id=table_id)
        if not table:
            raise NotFoundError("Table", table_id)
        table.status = status
        await table.save(update_fields=["status"])
    log.info(f"Table {table.number} set to {status.value}.")
    return table


async def list_tables() -> List[Tuple[Table, int]]:
    """All tables by number, each with its count of orders still seated."""
    tables = await Table.all().order_by("number")
    seated = await Order.filter(table_id__in=[t.id for t in tables], status__in=SEATED_STATUSES).values_list(
        "table_id", flat=True
    )
    counts = Counter(str(t) for t in seated)
    return [(t, counts.get(str(t.id), 0)) for t in tables]
