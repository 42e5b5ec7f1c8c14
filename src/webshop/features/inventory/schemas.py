from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional
import datetime

from .models import InventoryLogReason

MANUAL_REASONS = (InventoryLogReason.RESTOCK, InventoryLogReason.MANUAL_ADJUSTMENT)

# --- Category Schemas (defined first as ProductResponse uses CategoryResponse) ---
class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the category")
    description: Optional[str] = Field(None, max_length=500, description="Optional description for the category")

class CategoryCreate(CategoryBase):
    pass

class CategoryResponse(CategoryBase):
    public_id: str = Field(..., description="Public unique identifier for the category (KSUID)")
    created_at: datetime.datetime = Field(..., description="Timestamp of when the category was created")

    model_config = ConfigDict(from_attributes=True)

# --- Variant Schemas ---
class VariantCreate(BaseModel):
    attributes: Dict[str, str] = Field(default_factory=dict, description='Free form attributes, e.g. {"size": "M"}')
    stock: int = Field(default=0, ge=0, description="Initial stock of the variant")

class VariantResponse(BaseModel):
    public_id: str = Field(..., description="Public unique identifier for the variant (KSUID)")
    attributes: Dict[str, str]
    stock: int

    model_config = ConfigDict(from_attributes=True)

# --- Product Schemas ---
class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Name of the product")
    price: float = Field(default=0.0, ge=0, description="List price of the product")
    sale_price: Optional[float] = Field(None, ge=0, description="Discounted price, used instead of price when set")

class ProductCreate(ProductBase):
    stock: int = Field(default=0, ge=0, description="Initial stock quantity")
    category_id: Optional[str] = Field(None, description="Public ID of the category to assign to the product")

class ProductUpdate(BaseModel):
    """Stock is not updatable here, it only moves through stock adjustments and orders."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="New name of the product")
    price: Optional[float] = Field(None, ge=0, description="New list price")
    sale_price: Optional[float] = Field(None, ge=0, description="New sale price, null clears it")
    category_id: Optional[str] = Field(None, description="Public ID of the new category, null clears it")

class ProductResponse(ProductBase):
    public_id: str = Field(..., description="Public unique identifier for the product (KSUID)")
    stock: int
    is_archived: bool
    category: Optional[CategoryResponse] = Field(None, description="Category of the product")
    variants: List[VariantResponse] = Field(default_factory=list)
    created_at: datetime.datetime = Field(..., description="Timestamp of when the product was created")
    updated_at: datetime.datetime = Field(..., description="Timestamp of when the product was last updated")

class PaginatedProductResponse(BaseModel):
    items: list[ProductResponse]
    total: int
    page: int
    size: int

# --- Stock Schemas ---
class StockAdjustment(BaseModel):
    change: int = Field(..., description="Signed stock delta, must not be zero")
    reason: InventoryLogReason = Field(..., description="RESTOCK or MANUAL_ADJUSTMENT")
    variant_id: Optional[str] = Field(None, description="Public ID of the variant whose stock changes")
    reference_id: Optional[str] = Field(None, max_length=64, description="External reference, e.g. a delivery note")

    @field_validator("change")
    @classmethod
    def change_not_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("change must not be zero")
        return value

    @field_validator("reason")
    @classmethod
    def manual_reason_only(cls, value: InventoryLogReason) -> InventoryLogReason:
        # Order related reasons are written by the order service only
        if value not in MANUAL_REASONS:
            raise ValueError("reason must be RESTOCK or MANUAL_ADJUSTMENT")
        return value

class InventoryLogResponse(BaseModel):
    change: int
    reason: InventoryLogReason
    reference_id: Optional[str]
    variant_id: Optional[str] = Field(None, description="Public ID of the variant, if the change concerned one")
    variant_attributes: Optional[Dict[str, str]] = None
    created_at: datetime.datetime
