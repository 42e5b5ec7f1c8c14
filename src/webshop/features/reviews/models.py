from enum import Enum

from tortoise import fields

from ...common.models import TimestampMixin, public_id_field


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(TimestampMixin):
    id = fields.IntField(primary_key=True)
    public_id = public_id_field()
    product: fields.ForeignKeyRelation["Product"] = fields.ForeignKeyField(
        "models.Product", related_name="reviews", on_delete=fields.CASCADE
    )
    user: fields.ForeignKeyNullableRelation["User"] = fields.ForeignKeyField(
        "models.User", related_name="reviews", on_delete=fields.SET_NULL, null=True
    )
    rating = fields.SmallIntField(description="1 to 5")
    text = fields.TextField(null=True)
    status = fields.CharEnumField(ReviewStatus, max_length=20, default=ReviewStatus.PENDING)

    def __str__(self):
        return f"Review {self.public_id} ({self.rating}/5, {self.status.value})"

    class Meta:
        table = "reviews"
