from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio

from restopos.core.db import init_db, close_db
from restopos.models.catalog import Modifier, Product, Recipe
from restopos.models.inventory import InventoryItem, StockUnit
from restopos.models.table import Table
from restopos.schemas.order import DeliveryInfo, OrderItemRequest, OrderRequest


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    await init_db(db_url="sqlite://:memory:")
    yield
    await close_db()


@pytest_asyncio.fixture
async def cafe(db):
    """A small café: coffee drinks with recipes, bottled water without, one free table."""
    coffee = await InventoryItem.create(
        name="Ground coffee", current_stock=Decimal("5000"), min_stock=Decimal("1000"), unit=StockUnit.GRAM
    )
    milk = await InventoryItem.create(
        name="Whole milk", current_stock=Decimal("20000"), min_stock=Decimal("5000"), unit=StockUnit.MILLILITER
    )

    latte = await Product.create(id="latte", name="Latte", price=Decimal("4.5"))
    await Modifier.create(product=latte, name="Leche Oat", price_adjust=Decimal("0.5"))
    await Modifier.create(product=latte, name="Extra shot", price_adjust=Decimal("1.0"))
    await Recipe.create(product=latte, inventory_item=coffee, quantity=Decimal("18"))
    await Recipe.create(product=latte, inventory_item=milk, quantity=Decimal("200"))

    espresso = await Product.create(id="espresso", name="Espresso", price=Decimal("2.5"))
    await Recipe.create(product=espresso, inventory_item=coffee, quantity=Decimal("18"))

    water = await Product.create(id="water-bottle", name="Bottled water", price=Decimal("2.0"), is_preparable=False)

    table = await Table.create(number=1, capacity=4)

    return SimpleNamespace(coffee=coffee, milk=milk, latte=latte, espresso=espresso, water=water, table=table)


@pytest.fixture
def make_request():
    """Builds an OrderRequest from (product_id, quantity, modifiers) tuples."""
    def _make(lines, table_id=None, order_type=None, delivery=None, notes=None):
        items = []
        for line in lines:
            modifiers = list(line[2]) if len(line) > 2 else []
            items.append(OrderItemRequest(product_id=line[0], quantity=line[1], modifiers=modifiers))
        return OrderRequest(
            table_id=table_id,
            type=order_type,
            notes=notes,
            items=items,
            delivery_info=DeliveryInfo(**delivery) if delivery else None,
        )
    return _make
