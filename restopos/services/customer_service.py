import logging
from typing import Any, List, Optional

from tortoise import timezone
from tortoise.expressions import Q

from restopos.models.customer import Customer

log = logging.getLogger("restopos.customers")


async def upsert_customer(name: str, phone: str, address: str, conn: Any, now=None) -> Customer:
    """
    Records a delivery order against the customer keyed by `phone`.

    Two explicit branches, both run on the caller's transaction:
    an existing customer gets name/default address refreshed, the address
    appended to its history (once), the order count bumped and the last order
    date moved to now; an unknown phone inserts a customer whose first order
    already counts, so order_count starts at 1.
    """
    now = now or timezone.now()
    customer = await Customer.filter(phone=phone).using_db(conn).select_for_update().first()

    if customer:
        history = list(customer.address_history or [])
        if address not in history:
            history.append(address)
        customer.name = name
        customer.default_address = address
        customer.address_history = history
        customer.order_count += 1
        customer.last_order_date = now
        await customer.save(
            using_db=conn,
            update_fields=["name", "default_address", "address_history", "order_count", "last_order_date"],
        )
        log.info(f"Customer {phone} updated, order #{customer.order_count}.")
        return customer

    customer = await Customer.create(
        phone=phone,
        name=name,
        default_address=address,
        address_history=[address],
        order_count=1,
        last_order_date=now,
        using_db=conn,
    )
    log.info(f"Customer {phone} created.")
    return customer


async def list_customers(search: Optional[str] = None, limit: int = 50) -> List[Customer]:
    """Most frequent customers first, optionally filtered by name or phone fragment."""
    query = Customer.all()
    if search:
        query = query.filter(Q(name__icontains=search) | Q(phone__icontains=search))
    return await query.order_by("-order_count", "-last_order_date").limit(limit)
