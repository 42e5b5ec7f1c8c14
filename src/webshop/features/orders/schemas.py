from pydantic import BaseModel, ConfigDict, Field, EmailStr
from typing import List, Optional
import datetime

from ..auth.schemas import UserResponse
from .models import OrderStatus

class OrderStatusUpdateSchema(BaseModel):
    status: OrderStatus = Field(..., description="Target status, e.g. paid, shipped, completed or cancelled")

# Order Item Schemas
class OrderItemCreateSchema(BaseModel):
    product_public_id: str = Field(..., description="Public KSUID of the product")
    variant_public_id: Optional[str] = Field(None, description="Public KSUID of the chosen variant")
    quantity: int = Field(..., gt=0, description="Quantity of the product")

class OrderItemPublicSchema(BaseModel):
    public_id: str = Field(..., description="Public KSUID of this order item")
    product_public_id: Optional[str] = Field(None, description="Null once the product has been deleted")
    variant_public_id: Optional[str] = None
    name: str = Field(..., description="Product name at the time of purchase")
    price: float = Field(..., description="Unit price at the time of purchase")
    quantity: int

# Order Schemas
class OrderBase(BaseModel):
    contact_name: str = Field(..., max_length=255)
    contact_email: EmailStr
    delivery_address: str
    payment_method: Optional[str] = Field(None, max_length=50, description="e.g. card, transfer, cod")

class OrderCreateSchema(OrderBase):
    coupon_code: Optional[str] = Field(None, max_length=50)
    items: List[OrderItemCreateSchema] = Field(..., min_length=1)

class OrderPublicSchema(OrderBase):
    public_id: str
    order_id: str
    user: Optional[UserResponse] = None
    status: OrderStatus
    total_price: float
    discount_amount: float
    loyalty_discount: float
    coupon_code: Optional[str] = None
    items: List[OrderItemPublicSchema]
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
