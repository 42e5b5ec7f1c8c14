import datetime
from enum import Enum

from tortoise import fields, models

from ...common.models import TimestampMixin, public_id_field


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Order(TimestampMixin):
    id = fields.IntField(primary_key=True)
    order_id = fields.CharField(
        max_length=50, unique=True, description="Pattern: <year+0000> e.g. 20250001"
    )
    public_id = public_id_field()

    contact_name = fields.CharField(max_length=255)
    contact_email = fields.CharField(max_length=255)
    delivery_address = fields.TextField()
    status = fields.CharEnumField(OrderStatus, max_length=20, default=OrderStatus.PENDING)

    total_price = fields.FloatField(default=0.0)
    discount_amount = fields.FloatField(default=0.0)
    loyalty_discount = fields.FloatField(default=0.0)
    payment_method = fields.CharField(max_length=50, null=True)
    coupon_code = fields.CharField(max_length=50, null=True, db_index=True)

    user: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="orders", on_delete=fields.SET_NULL, null=True
    )

    items: fields.ReverseRelation["OrderItem"]

    @classmethod
    async def generate_next_order_id(cls, using_db=None):
        year_str = str(datetime.datetime.now().year)
        query = cls.filter(order_id__startswith=year_str)
        if using_db is not None:
            query = query.using_db(using_db)
        last_order = await query.order_by("-order_id").first()
        if last_order and last_order.order_id.startswith(year_str):
            next_sequence = int(last_order.order_id[len(year_str):]) + 1
        else:
            next_sequence = 1
        return f"{year_str}{next_sequence:04d}"

    def __str__(self):
        return f"Order {self.order_id} ({self.public_id}) - Status: {self.status.value}"

    class Meta:
        table = "orders"


class OrderItem(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()

    order: fields.ForeignKeyRelation[Order] = fields.ForeignKeyField(
        "models.Order", related_name="items", on_delete=fields.CASCADE
    )
    # Products can be deleted after purchase, the name/price snapshot stays
    product: fields.ForeignKeyNullableRelation["Product"] = fields.ForeignKeyField(
        "models.Product",
        related_name="order_items",
        on_delete=fields.SET_NULL,
        null=True,
    )
    variant: fields.ForeignKeyNullableRelation["ProductVariant"] = fields.ForeignKeyField(
        "models.ProductVariant",
        related_name="order_items",
        on_delete=fields.SET_NULL,
        null=True,
    )

    name = fields.CharField(max_length=255)
    price = fields.FloatField(description="Unit price at the time of purchase")
    quantity = fields.IntField()

    def __str__(self):
        return f"{self.quantity} x {self.name} for order #{self.order_id}"

    class Meta:
        table = "order_items"


class Coupon(TimestampMixin):
    id = fields.IntField(primary_key=True)
    code = fields.CharField(max_length=50, unique=True)
    discount_type = fields.CharEnumField(DiscountType, max_length=20)
    discount_value = fields.FloatField()
    is_active = fields.BooleanField(default=True)
    used_count = fields.IntField(default=0)

    def discount_for(self, subtotal: float) -> float:
        """Discount granted on a subtotal, never more than the subtotal itself."""
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal * self.discount_value / 100
        else:
            discount = self.discount_value
        return round(min(discount, subtotal), 2)

    def __str__(self):
        return f"Coupon {self.code} ({self.discount_type.value} {self.discount_value})"

    class Meta:
        table = "coupons"
