"""
Report aggregators.

Pure folds that turn rows already fetched by the report service into report
sections. Nothing in here touches the database, which keeps every metric
testable with plain in-memory rows.

Orders are passed as ``Order`` model instances (or anything exposing the same
attributes); the other inputs are the small row tuples defined below.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from ..inventory.models import FALLBACK_CATEGORY, InventoryLogReason
from ..orders.models import OrderStatus
from .periods import as_utc, half_up, median_value
from .schemas import (
    CartSection, CategorySale, CouponsSection, CouponUsage, DailyRevenue, HourCount,
    InventorySection, LowStockProduct, NewsletterSection, OrdersSection,
    PaymentMethodRevenue, ProductSale, ProductsSection, ProductStockChange, RatingCount,
    ReviewsSection, RevenueSection, StatusCount, TopSpender, UsersSection,
    VariantStockChange, WeekdayCount,
)

TOP_LIST_SIZE = 10
UNKNOWN_PRODUCT = "Ismeretlen"
NOT_AVAILABLE = "N/A"
UNKNOWN_PAYMENT_METHOD = "unknown"
# Sunday first, matching the order the dashboard charts expect
WEEKDAY_NAMES = ("Vasárnap", "Hétfő", "Kedd", "Szerda", "Csütörtök", "Péntek", "Szombat")
RATINGS = (1, 2, 3, 4, 5)

SOLD_REASONS = (InventoryLogReason.ORDER_PLACED, InventoryLogReason.SALE)
RETURNED_REASONS = (InventoryLogReason.RESTOCK, InventoryLogReason.ORDER_CANCELLED)


class SoldLine(NamedTuple):
    """One order item of an in-window, non-cancelled order."""
    product_id: Optional[int]
    name: str
    category: str
    price: float
    quantity: int


class StockVariant(NamedTuple):
    id: int
    public_id: str
    attributes: Mapping[str, object]
    stock: int


class StockProduct(NamedTuple):
    id: int
    name: str
    category: str
    stock: int
    variants: Tuple[StockVariant, ...] = ()


class StockMovement(NamedTuple):
    product_id: int
    variant_id: Optional[int]
    change: int
    reason: InventoryLogReason


class CartLine(NamedTuple):
    cart_id: int
    quantity: int
    price: float
    sale_price: Optional[float]


def _enum_value(value) -> str:
    return getattr(value, "value", value)


def _ratio_percent(part: float, whole: float) -> int:
    return half_up(part / whole * 100) if whole else 0


# --- Revenue ---

def summarize_revenue(orders: Sequence, previous_total: float, change: int) -> RevenueSection:
    """Single pass over the in-window orders, keyed by payment method and by ISO day."""
    total = 0.0
    discounts = 0.0
    loyalty_discounts = 0.0
    by_method: Dict[str, List[float]] = {}
    by_day: Dict[str, List[float]] = {}

    for order in orders:
        total += order.total_price
        discounts += order.discount_amount or 0
        loyalty_discounts += order.loyalty_discount or 0

        method = order.payment_method or UNKNOWN_PAYMENT_METHOD
        bucket = by_method.setdefault(method, [0.0, 0])
        bucket[0] += order.total_price
        bucket[1] += 1

        day = as_utc(order.created_at).date().isoformat()
        bucket = by_day.setdefault(day, [0.0, 0])
        bucket[0] += order.total_price
        bucket[1] += 1

    return RevenueSection(
        total=total,
        previous_period=previous_total,
        change=change,
        by_payment_method=tuple(
            PaymentMethodRevenue(method=method, amount=amount, count=count)
            for method, (amount, count) in by_method.items()
        ),
        by_day=tuple(
            DailyRevenue(date=day, amount=amount, orders=count)
            for day, (amount, count) in sorted(by_day.items())
        ),
        gross=total + discounts + loyalty_discounts,
        discounts=discounts,
        loyalty_discounts=loyalty_discounts,
        net=total,
    )


# --- Orders ---

def summarize_orders(
    orders: Sequence,
    previous_count: int,
    change: int,
    status_counts: Iterable[Mapping],
    cancelled_count: int,
    cancelled_value: float,
) -> OrdersSection:
    """
    Order statistics for the window.

    ``status_counts`` comes from a GROUP BY over every order in the window,
    cancelled ones included, while everything else is folded from the
    non-cancelled ``orders``.
    """
    values = sorted(order.total_price for order in orders)
    total_value = sum(values)
    completed = sum(1 for order in orders if order.status == OrderStatus.COMPLETED)

    by_hour = [0] * 24
    by_weekday = [0] * 7
    for order in orders:
        created = as_utc(order.created_at)
        by_hour[created.hour] += 1
        by_weekday[(created.weekday() + 1) % 7] += 1

    return OrdersSection(
        total=len(orders),
        previous_period=previous_count,
        change=change,
        by_status=tuple(
            StatusCount(status=_enum_value(row["status"]), count=row["count"])
            for row in status_counts
        ),
        average_value=half_up(total_value / len(orders)) if orders else 0,
        median_value=median_value(values),
        max_value=values[-1] if values else 0,
        min_value=values[0] if values else 0,
        cancelled=cancelled_count,
        cancelled_value=cancelled_value,
        completed_rate=_ratio_percent(completed, len(orders)),
        by_hour=tuple(HourCount(hour=hour, count=count) for hour, count in enumerate(by_hour)),
        by_day_of_week=tuple(
            WeekdayCount(day=name, count=count) for name, count in zip(WEEKDAY_NAMES, by_weekday)
        ),
    )


# --- Products ---

@dataclass
class _SaleTally:
    id: int
    name: str
    category: str
    quantity: int = 0
    revenue: float = 0.0

    def to_schema(self) -> ProductSale:
        return ProductSale(
            id=self.id, name=self.name, quantity=self.quantity,
            revenue=self.revenue, category=self.category,
        )


def tally_product_sales(lines: Iterable[SoldLine]) -> List[_SaleTally]:
    """Sums quantity and revenue per product. Lines without a product share id 0."""
    tallies: Dict[int, _SaleTally] = {}
    for line in lines:
        product_id = line.product_id or 0
        tally = tallies.get(product_id)
        if tally is None:
            tally = tallies[product_id] = _SaleTally(
                id=product_id,
                name=line.name or UNKNOWN_PRODUCT,
                category=line.category or FALLBACK_CATEGORY,
            )
        tally.quantity += line.quantity
        tally.revenue += line.price * line.quantity
    return list(tallies.values())


def rank_sellers(tallies: Sequence[_SaleTally]) -> Tuple[List[_SaleTally], List[_SaleTally]]:
    """
    Best and worst sellers.

    Worst sellers only consider products that sold at least one unit. With
    few products sold the two lists share entries.
    """
    top = sorted(tallies, key=lambda t: t.quantity, reverse=True)[:TOP_LIST_SIZE]
    worst = sorted(
        (t for t in tallies if t.quantity > 0),
        key=lambda t: t.quantity,
    )[:TOP_LIST_SIZE]
    return top, worst


def summarize_products(
    lines: Iterable[SoldLine],
    low_stock: Iterable[Mapping],
    out_of_stock: int,
) -> ProductsSection:
    tallies = tally_product_sales(lines)
    top, worst = rank_sellers(tallies)

    by_category: Dict[str, List[float]] = {}
    for tally in tallies:
        bucket = by_category.setdefault(tally.category, [0, 0.0])
        bucket[0] += tally.quantity
        bucket[1] += tally.revenue
    category_revenue = sum(revenue for _, revenue in by_category.values())
    categories = sorted(
        (
            CategorySale(
                category=category,
                quantity=quantity,
                revenue=revenue,
                percentage=_ratio_percent(revenue, category_revenue),
            )
            for category, (quantity, revenue) in by_category.items()
        ),
        key=lambda c: c.revenue,
        reverse=True,
    )

    # Mean of each product's own unit price, every product weighted equally
    unit_prices = [t.revenue / t.quantity for t in tallies if t.quantity]

    return ProductsSection(
        total_sold=sum(t.quantity for t in tallies),
        unique_products_sold=len(tallies),
        top_selling=tuple(t.to_schema() for t in top),
        worst_selling=tuple(t.to_schema() for t in worst),
        by_category=tuple(categories),
        low_stock=tuple(
            LowStockProduct(id=row["id"], name=row["name"], stock=row["stock"])
            for row in low_stock
        ),
        out_of_stock=out_of_stock,
        average_price=half_up(sum(unit_prices) / len(unit_prices)) if unit_prices else 0,
    )


def summarize_inventory(
    catalog: Sequence, low_stock_count: int, out_of_stock_count: int
) -> InventorySection:
    """Snapshot of the non-archived catalog. Stock is valued at the sale price when set."""
    total_stock = sum(product.stock for product in catalog)
    return InventorySection(
        total_products=len(catalog),
        total_stock=total_stock,
        average_stock=half_up(total_stock / len(catalog)) if catalog else 0,
        stock_value=sum((p.sale_price or p.price) * p.stock for p in catalog),
        low_stock_count=low_stock_count,
        out_of_stock_count=out_of_stock_count,
    )


# --- Stock changes ---

@dataclass
class _VariantTally:
    variant: StockVariant
    total_change: int = 0
    orders_sold: int = 0
    restocked: int = 0

    def add(self, movement: StockMovement) -> None:
        self.total_change += movement.change
        if movement.reason in SOLD_REASONS:
            self.orders_sold += abs(movement.change)
        elif movement.reason in RETURNED_REASONS:
            self.restocked += movement.change


@dataclass
class _ProductTally:
    product: StockProduct
    total_change: int = 0
    orders_sold: int = 0
    restocked: int = 0
    manual_adjustments: int = 0
    variants: Dict[int, _VariantTally] = field(default_factory=dict)

    def add(self, movement: StockMovement) -> None:
        self.total_change += movement.change
        if movement.reason in SOLD_REASONS:
            self.orders_sold += abs(movement.change)
        elif movement.reason in RETURNED_REASONS:
            # A cancelled order puts its stock back
            self.restocked += movement.change
        elif movement.reason == InventoryLogReason.MANUAL_ADJUSTMENT:
            self.manual_adjustments += movement.change

        if movement.variant_id is not None:
            variant = self.variants.get(movement.variant_id)
            if variant is not None:
                variant.add(movement)

    @property
    def touched(self) -> bool:
        return self.total_change != 0 or any(v.total_change != 0 for v in self.variants.values())

    def to_schema(self) -> ProductStockChange:
        return ProductStockChange(
            product_id=self.product.id,
            product_name=self.product.name,
            category=self.product.category or FALLBACK_CATEGORY,
            current_stock=self.product.stock,
            start_stock=self.product.stock - self.total_change,
            total_change=self.total_change,
            orders_sold=self.orders_sold,
            restocked=self.restocked,
            manual_adjustments=self.manual_adjustments,
            variants=tuple(
                VariantStockChange(
                    variant_id=v.variant.public_id,
                    attributes={str(k): str(val) for k, val in (v.variant.attributes or {}).items()},
                    current_stock=v.variant.stock,
                    total_change=v.total_change,
                    orders_sold=v.orders_sold,
                    restocked=v.restocked,
                )
                for v in self.variants.values()
            ),
        )


def reconstruct_stock_changes(
    products: Iterable[StockProduct], movements: Iterable[StockMovement]
) -> Tuple[ProductStockChange, ...]:
    """
    Folds the window's inventory log into per product (and per variant) deltas.

    The starting stock is derived as ``current - total_change`` rather than
    read from anywhere, so it is only as good as the log is complete.
    Movements of products outside ``products`` (archived ones) are ignored.
    Products whose stock did not move are left out; the rest are sorted by the
    size of their net change.
    """
    tallies: Dict[int, _ProductTally] = {}
    for product in products:
        tallies[product.id] = _ProductTally(
            product=product,
            variants={v.id: _VariantTally(variant=v) for v in product.variants},
        )

    for movement in movements:
        tally = tallies.get(movement.product_id)
        if tally is not None:
            tally.add(movement)

    changed = [t.to_schema() for t in tallies.values() if t.touched]
    changed.sort(key=lambda change: abs(change.total_change), reverse=True)
    return tuple(changed)


# --- Users ---

def tally_spending(orders: Iterable) -> Dict[int, List[float]]:
    """user_id -> [spent, order count], guest orders skipped."""
    spending: Dict[int, List[float]] = defaultdict(lambda: [0.0, 0])
    for order in orders:
        if order.user_id:
            spending[order.user_id][0] += order.total_price
            spending[order.user_id][1] += 1
    return dict(spending)


def top_spender_ids(spending: Mapping[int, List[float]]) -> List[int]:
    ranked = sorted(spending.items(), key=lambda item: item[1][0], reverse=True)
    return [user_id for user_id, _ in ranked[:TOP_LIST_SIZE]]


def summarize_users(
    total: int,
    new: int,
    previous_new: int,
    change: int,
    spending: Mapping[int, List[float]],
    users_by_id: Mapping[int, object],
) -> UsersSection:
    """
    Users that ordered in the window count as active. Top spenders are
    resolved against ``users_by_id``; ids that are gone fall back to "N/A".
    """
    spenders = []
    for user_id in top_spender_ids(spending):
        user = users_by_id.get(user_id)
        spent, order_count = spending[user_id]
        spenders.append(
            TopSpender(
                id=user.public_id if user else str(user_id),
                name=(user.name if user else None) or NOT_AVAILABLE,
                email=(user.email if user else None) or NOT_AVAILABLE,
                spent=spent,
                orders=order_count,
            )
        )
    return UsersSection(
        total=total,
        new=new,
        previous_period_new=previous_new,
        change=change,
        active=len(spending),
        returning=0,
        top_spenders=tuple(spenders),
    )


# --- Coupons, reviews, newsletter ---

def summarize_coupons(orders: Sequence, total_discount: float) -> CouponsSection:
    """
    Coupon usage read off the orders themselves.

    The discount of an order carrying a coupon code is attributed entirely to
    that coupon; ``total_discount`` is the window's overall discount sum.
    """
    with_coupon = [order for order in orders if order.coupon_code]
    usage: Dict[str, List[float]] = {}
    for order in with_coupon:
        bucket = usage.setdefault(order.coupon_code, [0, 0.0])
        bucket[0] += 1
        bucket[1] += order.discount_amount or 0

    most_used = sorted(
        (
            CouponUsage(code=code, used_count=count, total_discount=discount)
            for code, (count, discount) in usage.items()
        ),
        key=lambda c: c.used_count,
        reverse=True,
    )[:TOP_LIST_SIZE]

    return CouponsSection(
        total_used=len(with_coupon),
        total_discount=total_discount,
        most_used=tuple(most_used),
        conversion_rate=_ratio_percent(len(with_coupon), len(orders)),
    )


def summarize_reviews(
    status_counts: Iterable[Mapping], approved_rating_counts: Iterable[Mapping]
) -> ReviewsSection:
    """The average rating and the histogram only look at approved reviews."""
    by_status = {_enum_value(row["status"]): row["count"] for row in status_counts}
    by_rating = {row["rating"]: row["count"] for row in approved_rating_counts}
    rated = sum(by_rating.values())
    average = sum(rating * count for rating, count in by_rating.items()) / rated if rated else 0
    return ReviewsSection(
        total=sum(by_status.values()),
        approved=by_status.get("approved", 0),
        pending=by_status.get("pending", 0),
        rejected=by_status.get("rejected", 0),
        average_rating=half_up(average * 10) / 10,
        rating_distribution=tuple(
            RatingCount(rating=rating, count=by_rating.get(rating, 0)) for rating in RATINGS
        ),
    )


def summarize_newsletter(total_active: int, new_active: int) -> NewsletterSection:
    return NewsletterSection(total_subscribers=total_active, new_subscribers=new_active, unsubscribed=0)


# --- Carts ---

def summarize_carts(lines: Iterable[CartLine]) -> CartSection:
    """
    Abandoned cart estimate: every cart touched in the window that still
    holds items. Carts that were checked out afterwards are counted too.
    """
    carts: Dict[int, List[float]] = {}
    for line in lines:
        bucket = carts.setdefault(line.cart_id, [0.0, 0])
        bucket[0] += (line.sale_price or line.price) * line.quantity
        bucket[1] += 1

    value = sum(cart_value for cart_value, _ in carts.values())
    item_lines = sum(count for _, count in carts.values())
    cart_count = len(carts)
    return CartSection(
        abandoned_carts=cart_count,
        abandoned_value=value,
        average_cart_value=half_up(value / cart_count) if cart_count else 0,
        average_items_per_cart=half_up(item_lines / cart_count) if cart_count else 0,
    )
