"""Shopping carts. A cart is kept per visitor and touched (updated_at) on
every change to its items."""

from tortoise import fields

from ...common.models import TimestampMixin, public_id_field


class Cart(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    user: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="carts", on_delete=fields.CASCADE, null=True
    )

    items: fields.ReverseRelation["CartItem"]

    class Meta:
        table = "carts"


class CartItem(TimestampMixin):
    id = fields.IntField(primary_key=True)
    cart: fields.ForeignKeyRelation[Cart] = fields.ForeignKeyField(
        "models.Cart", related_name="items", on_delete=fields.CASCADE
    )
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="cart_items", on_delete=fields.CASCADE
    )
    variant: fields.ForeignKeyNullableRelation["ProductVariant"] = fields.ForeignKeyField(
        "models.ProductVariant", related_name="cart_items", on_delete=fields.CASCADE, null=True
    )
    quantity = fields.IntField(default=1)

    class Meta:
        table = "cart_items"
