"""Data models for the catalog and its stock: Category, Product, ProductVariant
and the append-only InventoryLog."""

from enum import Enum

from tortoise import fields, models

from ...common.models import TimestampMixin, public_id_field

# Category label used wherever a product has no category
FALLBACK_CATEGORY = "Egyéb"


class InventoryLogReason(str, Enum):
    ORDER_PLACED = "ORDER_PLACED"
    SALE = "SALE"
    RESTOCK = "RESTOCK"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"
    ORDER_CANCELLED = "ORDER_CANCELLED"


class Category(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    name = fields.CharField(max_length=100, unique=True)
    description = fields.TextField(null=True)

    products: fields.ReverseRelation["Product"]

    def __str__(self):
        return self.name

    class Meta:
        table = "categories"


class Product(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    name = fields.CharField(max_length=255)
    stock = fields.IntField(default=0)
    price = fields.FloatField(default=0.0)
    sale_price = fields.FloatField(null=True, default=None)
    is_archived = fields.BooleanField(default=False)

    category: fields.ForeignKeyRelation[Category] = fields.ForeignKeyField(
        "models.Category",
        related_name="products",
        on_delete=fields.SET_NULL,
        null=True,
    )

    variants: fields.ReverseRelation["ProductVariant"]
    inventory_logs: fields.ReverseRelation["InventoryLog"]

    @property
    def effective_price(self) -> float:
        return self.sale_price or self.price

    def __str__(self):
        return f"{self.name} (Stock: {self.stock}, Price: {self.price:.2f})"

    class Meta:
        table = "products"


class ProductVariant(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    product: fields.ForeignKeyRelation[Product] = fields.ForeignKeyField(
        "models.Product", related_name="variants", on_delete=fields.CASCADE
    )
    # Open key/value mapping such as {"size": "M", "color": "red"}
    attributes = fields.JSONField(default=dict)
    stock = fields.IntField(default=0)

    def __str__(self):
        attrs = ", ".join(f"{k}: {v}" for k, v in (self.attributes or {}).items())
        return f"Variant {self.public_id} ({attrs}) - Stock: {self.stock}"

    class Meta:
        table = "product_variants"


class InventoryLog(models.Model):  # Append-only, no TimestampMixin
    id = fields.IntField(primary_key=True)
    product: fields.ForeignKeyRelation[Product] = fields.ForeignKeyField(
        "models.Product", related_name="inventory_logs", on_delete=fields.CASCADE
    )
    variant: fields.ForeignKeyNullableRelation[ProductVariant] = fields.ForeignKeyField(
        "models.ProductVariant",
        related_name="inventory_logs",
        on_delete=fields.SET_NULL,
        null=True,
    )
    change = fields.IntField(description="Signed stock delta")
    reason = fields.CharEnumField(InventoryLogReason, max_length=32)
    reference_id = fields.CharField(max_length=64, null=True)
    user: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="inventory_logs", on_delete=fields.SET_NULL, null=True
    )
    created_at = fields.DatetimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.reason.value} {self.change:+d} for product {self.product_id}"

    class Meta:
        table = "inventory_logs"
        ordering = ["-created_at"]
