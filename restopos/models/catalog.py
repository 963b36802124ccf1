from tortoise import fields, models
import uuid


class Category(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128, unique=True)
    display_order = fields.IntField(default=0)

    class Meta:
        table = "categories"


class Product(models.Model):
    # Human-readable keys ("latte", "espresso") are used by the POS clients
    id = fields.CharField(primary_key=True, max_length=64)
    name = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    category = fields.ForeignKeyField("models.Category", related_name="products", null=True)
    is_preparable = fields.BooleanField(default=True)  # Consumes inventory through recipes
    barcode = fields.CharField(max_length=64, unique=True, null=True)
    is_active = fields.BooleanField(default=True)

    class Meta:
        table = "products"
        indexes = [
            ("is_active",),
            ("category_id",),
        ]


class Modifier(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    product = fields.ForeignKeyField("models.Product", related_name="modifiers")
    name = fields.CharField(max_length=128)
    price_adjust = fields.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        table = "modifiers"
        unique_together = (("product", "name"),)


class Recipe(models.Model):
    """
    Quantity of one inventory item consumed by a single unit of a product.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    product = fields.ForeignKeyField("models.Product", related_name="recipes")
    inventory_item = fields.ForeignKeyField("models.InventoryItem", related_name="recipes")
    quantity = fields.DecimalField(max_digits=12, decimal_places=3)

    class Meta:
        table = "recipes"
        unique_together = (("product", "inventory_item"),)
