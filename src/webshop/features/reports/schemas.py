"""Business Report Schemas

Pydantic models describing the period report returned by the reports
endpoint. The report is a computed snapshot, so every model is frozen and
every collection is a tuple. Field names serialize as camelCase
(``previousPeriod``, ``byDayOfWeek``...), the shape the admin dashboard reads.

Sections:

1. Revenue
2. Orders
3. Products
4. Users
5. Coupons
6. Reviews
7. Newsletter
8. Cart abandonment
9. Inventory snapshot
10. Stock changes per product and variant"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, Optional, Tuple
import datetime

from ...core.config import DEFAULT_REPORT_PERIOD
from .periods import ReportPeriod


class ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# Request parameters
class ReportQuery(BaseModel):
    period: ReportPeriod = Field(
        ReportPeriod(DEFAULT_REPORT_PERIOD), description="Report granularity"
    )
    date: Optional[datetime.date] = Field(
        None, description="Day the report window ends on (YYYY-MM-DD), defaults to today"
    )


# 1. Revenue
class PaymentMethodRevenue(ReportModel):
    method: str
    amount: float
    count: int

class DailyRevenue(ReportModel):
    date: str = Field(..., description="ISO day, YYYY-MM-DD")
    amount: float
    orders: int

class RevenueSection(ReportModel):
    total: float
    previous_period: float
    change: int
    by_payment_method: Tuple[PaymentMethodRevenue, ...]
    by_day: Tuple[DailyRevenue, ...]
    gross: float
    discounts: float
    loyalty_discounts: float
    net: float


# 2. Orders
class StatusCount(ReportModel):
    status: str
    count: int

class HourCount(ReportModel):
    hour: int
    count: int

class WeekdayCount(ReportModel):
    day: str
    count: int

class OrdersSection(ReportModel):
    total: int
    previous_period: int
    change: int
    by_status: Tuple[StatusCount, ...]
    average_value: int
    median_value: float
    max_value: float
    min_value: float
    cancelled: int
    cancelled_value: float
    completed_rate: int
    by_hour: Tuple[HourCount, ...]
    by_day_of_week: Tuple[WeekdayCount, ...]


# 3. Products
class ProductSale(ReportModel):
    id: int
    name: str
    quantity: int
    revenue: float
    category: str

class CategorySale(ReportModel):
    category: str
    quantity: int
    revenue: float
    percentage: int

class LowStockProduct(ReportModel):
    id: int
    name: str
    stock: int

class ProductsSection(ReportModel):
    total_sold: int
    unique_products_sold: int
    top_selling: Tuple[ProductSale, ...]
    worst_selling: Tuple[ProductSale, ...]
    by_category: Tuple[CategorySale, ...]
    low_stock: Tuple[LowStockProduct, ...]
    out_of_stock: int
    average_price: int


# 4. Users
class TopSpender(ReportModel):
    id: str
    name: str
    email: str
    spent: float
    orders: int

class UsersSection(ReportModel):
    total: int
    new: int
    previous_period_new: int
    change: int
    active: int
    returning: int = Field(0, description="Not computed yet, always 0")
    top_spenders: Tuple[TopSpender, ...]


# 5. Coupons
class CouponUsage(ReportModel):
    code: str
    used_count: int
    total_discount: float

class CouponsSection(ReportModel):
    total_used: int
    total_discount: float
    most_used: Tuple[CouponUsage, ...]
    conversion_rate: int


# 6. Reviews
class RatingCount(ReportModel):
    rating: int
    count: int

class ReviewsSection(ReportModel):
    total: int
    approved: int
    pending: int
    rejected: int
    average_rating: float
    rating_distribution: Tuple[RatingCount, ...]


# 7. Newsletter
class NewsletterSection(ReportModel):
    total_subscribers: int
    new_subscribers: int
    unsubscribed: int = Field(0, description="Unsubscribes are not tracked, always 0")


# 8. Cart abandonment
class CartSection(ReportModel):
    abandoned_carts: int
    abandoned_value: float
    average_cart_value: int
    average_items_per_cart: int


# 9. Inventory snapshot
class InventorySection(ReportModel):
    total_products: int
    total_stock: int
    average_stock: int
    stock_value: float
    low_stock_count: int
    out_of_stock_count: int


# 10. Stock changes
class VariantStockChange(ReportModel):
    variant_id: str
    attributes: Dict[str, str]
    current_stock: int
    total_change: int
    orders_sold: int
    restocked: int

class ProductStockChange(ReportModel):
    product_id: int
    product_name: str
    category: str
    current_stock: int
    start_stock: int
    total_change: int
    orders_sold: int
    restocked: int
    manual_adjustments: int
    variants: Tuple[VariantStockChange, ...]


class ReportData(ReportModel):
    period: ReportPeriod
    start_date: datetime.datetime
    end_date: datetime.datetime
    generated_at: datetime.datetime

    revenue: RevenueSection
    orders: OrdersSection
    products: ProductsSection
    users: UsersSection
    coupons: CouponsSection
    reviews: ReviewsSection
    newsletter: NewsletterSection
    cart: CartSection
    inventory: InventorySection
    stock_changes: Tuple[ProductStockChange, ...]
