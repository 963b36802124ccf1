# restopos/models/__init__.py
from .catalog import Category, Product, Modifier, Recipe
from .inventory import InventoryItem, StockUnit
from .order import Order, OrderItem, OrderStatus, OrderType, KITCHEN_STATUSES, next_order_status
from .delivery import DeliveryOrder, DeliveryStatus
from .customer import Customer
from .table import Table, TableStatus

# Export all models
__all__ = [
    "Category",
    "Product",
    "Modifier",
    "Recipe",
    "InventoryItem",
    "StockUnit",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "KITCHEN_STATUSES",
    "next_order_status",
    "DeliveryOrder",
    "DeliveryStatus",
    "Customer",
    "Table",
    "TableStatus",
]
