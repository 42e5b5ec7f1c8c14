from tortoise import fields

from ...common.models import TimestampMixin


class NewsletterSubscriber(TimestampMixin):
    id = fields.IntField(primary_key=True)
    email = fields.CharField(max_length=255, unique=True)
    is_active = fields.BooleanField(default=True)

    def __str__(self):
        return f"{self.email} ({'active' if self.is_active else 'inactive'})"

    class Meta:
        table = "newsletter_subscribers"
