# restopos/scripts/seed_data.py
import asyncio
import logging
from decimal import Decimal
from restopos.core.db import init_db, close_db
from restopos.models.catalog import Category, Product, Modifier, Recipe
from restopos.models.inventory import InventoryItem, StockUnit
from restopos.models.table import Table

log = logging.getLogger("restopos.seed")

CATEGORIES = [("Coffee", 1), ("Drinks", 2), ("Food", 3), ("Desserts", 4)]

INVENTORY = [
    # name, stock, minimum, unit, cost per unit
    ("Ground coffee", "5000", "1000", StockUnit.GRAM, "0.05"),
    ("Whole milk", "20000", "5000", StockUnit.MILLILITER, "0.001"),
    ("Oat milk", "10000", "2000", StockUnit.MILLILITER, "0.002"),
    ("Water", "50000", "10000", StockUnit.MILLILITER, "0.0005"),
    ("Orange juice", "15000", "3000", StockUnit.MILLILITER, "0.003"),
    ("Croissant dough", "50", "10", StockUnit.UNIT, "1.5"),
    ("Cheese", "3000", "500", StockUnit.GRAM, "0.02"),
    ("Ham", "2000", "500", StockUnit.GRAM, "0.03"),
]

PRODUCTS = [
    # id, name, price, category, preparable
    ("espresso", "Espresso", "2.5", "Coffee", True),
    ("americano", "Americano", "3.0", "Coffee", True),
    ("cappuccino", "Cappuccino", "4.5", "Coffee", True),
    ("latte", "Latte", "4.5", "Coffee", True),
    ("water-bottle", "Bottled water", "2.0", "Drinks", False),
    ("orange-juice", "Orange juice", "4.0", "Drinks", True),
    ("ham-cheese-croissant", "Ham & cheese croissant", "6.0", "Food", True),
]

MODIFIERS = [
    ("espresso", "Extra shot", "1.0"),
    ("latte", "Extra shot", "1.0"),
    ("latte", "Leche Oat", "0.5"),
    ("cappuccino", "Leche Oat", "0.5"),
]

RECIPES = [
    ("espresso", "Ground coffee", "18"),
    ("americano", "Ground coffee", "18"),
    ("americano", "Water", "150"),
    ("cappuccino", "Ground coffee", "18"),
    ("cappuccino", "Whole milk", "120"),
    ("latte", "Ground coffee", "18"),
    ("latte", "Whole milk", "200"),
    ("orange-juice", "Orange juice", "250"),
    ("ham-cheese-croissant", "Croissant dough", "1"),
    ("ham-cheese-croissant", "Cheese", "30"),
    ("ham-cheese-croissant", "Ham", "40"),
]


async def seed():
    categories = {}
    for name, order in CATEGORIES:
        categories[name], _ = await Category.get_or_create(name=name, defaults={"display_order": order})

    items = {}
    for name, stock, minimum, unit, cost in INVENTORY:
        items[name], _ = await InventoryItem.get_or_create(
            name=name,
            defaults={
                "current_stock": Decimal(stock),
                "min_stock": Decimal(minimum),
                "unit": unit,
                "cost_per_unit": Decimal(cost),
            },
        )
    log.info(f"Inventory seeded: {len(items)} items.")

    for pid, name, price, category, preparable in PRODUCTS:
        await Product.get_or_create(
            id=pid,
            defaults={
                "name": name,
                "price": Decimal(price),
                "category": categories[category],
                "is_preparable": preparable,
            },
        )
    for pid, name, adjust in MODIFIERS:
        await Modifier.get_or_create(product_id=pid, name=name, defaults={"price_adjust": Decimal(adjust)})
    for pid, item_name, qty in RECIPES:
        await Recipe.get_or_create(
            product_id=pid, inventory_item=items[item_name], defaults={"quantity": Decimal(qty)}
        )
    log.info(f"Catalog seeded: {len(PRODUCTS)} products, {len(RECIPES)} recipes.")

    for number in range(1, 9):
        await Table.get_or_create(number=number, defaults={"capacity": 4 if number > 4 else 2})
    log.info("Tables seeded.")


async def main():
    await init_db()
    await seed()
    await close_db()


def run():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    asyncio.run(main())


if __name__ == "__main__":
    run()
