"""Models module for the webshop.

This module contains the common database models for the application.
It includes a TimestampMixin class that provides created_at and updated_at
fields for models, and a helper for generating KSUIDs (K-Sortable Unique
IDentifiers) which are used as the public identifiers of every entity."""

from tortoise import fields, models
from ksuid import ksuid


def generate_ksuid():
    """Generate a K-Sortable Unique IDentifier (KSUID).

    Returns:
        str: The 27 character base62 representation of a new KSUID.
    """
    return str(ksuid.Ksuid())


def public_id_field():
    return fields.CharField(
        max_length=27, unique=True, default=generate_ksuid, db_index=True
    )


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
