"""
Reports Service Module

Builds the period report shown on the admin dashboard. All reads are issued
against the database in two concurrent phases:

1. The window's non-cancelled orders plus the store-side figures they are
   compared against (previous window, cancelled orders, status breakdown).
2. Everything that either depends on the fetched orders (order items, top
   spenders) or is independent of them (catalog, inventory log, users,
   reviews, newsletter, carts).

The fetched rows are handed to the pure folds in ``aggregators``. No errors
are caught here: a failing query aborts the whole report.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple, Union

from tortoise.functions import Count

from ..auth.models import User
from ..carts.models import CartItem
from ..inventory.models import Category, InventoryLog, InventoryLogReason, Product
from ..newsletter.models import NewsletterSubscriber
from ..orders.models import Order, OrderItem, OrderStatus
from ..reviews.models import Review, ReviewStatus
from . import aggregators
from .aggregators import CartLine, SoldLine, StockMovement, StockProduct, StockVariant
from .periods import (
    Clock, DateRange, ReferenceDate, ReportPeriod, calculate_change, parse_period,
    resolve_previous_range, resolve_range, system_clock,
)
from .schemas import ReportData

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 5
LOW_STOCK_LIST_SIZE = 20


def _in_window(window: DateRange) -> dict:
    return {"created_at__gte": window.start, "created_at__lte": window.end}


async def _count_and_total(query) -> Tuple[int, float]:
    totals = await query.values_list("total_price", flat=True)
    return len(totals), float(sum(totals))


async def _category_names() -> Dict[int, str]:
    rows = await Category.all().values("id", "name")
    return {row["id"]: row["name"] for row in rows}


async def _sold_lines(orders: Sequence[Order], categories: Dict[int, str]) -> List[SoldLine]:
    """Order items of the given orders, with the live product name and category where it still exists."""
    if not orders:
        return []
    items = await OrderItem.filter(order_id__in=[o.id for o in orders]).values(
        "product_id", "name", "price", "quantity"
    )
    product_ids = {item["product_id"] for item in items if item["product_id"]}
    products = {
        row["id"]: row
        for row in await Product.filter(id__in=list(product_ids)).values("id", "name", "category_id")
    } if product_ids else {}

    lines = []
    for item in items:
        product = products.get(item["product_id"])
        lines.append(
            SoldLine(
                product_id=item["product_id"],
                name=(product["name"] if product else None) or item["name"],
                category=categories.get(product["category_id"]) if product else None,
                price=item["price"],
                quantity=item["quantity"],
            )
        )
    return lines


async def _catalog(categories: Dict[int, str]) -> Tuple[List[Product], List[StockProduct]]:
    """Non-archived products, both as models and as stock seeds with their variants."""
    products = await Product.filter(is_archived=False).prefetch_related("variants")
    seeds = [
        StockProduct(
            id=product.id,
            name=product.name,
            category=categories.get(product.category_id),
            stock=product.stock,
            variants=tuple(
                StockVariant(id=v.id, public_id=v.public_id, attributes=v.attributes, stock=v.stock)
                for v in product.variants
            ),
        )
        for product in products
    ]
    return list(products), seeds


async def _stock_movements(window: DateRange) -> List[StockMovement]:
    rows = await InventoryLog.filter(**_in_window(window)).order_by("created_at").values(
        "product_id", "variant_id", "change", "reason"
    )
    return [
        StockMovement(
            product_id=row["product_id"],
            variant_id=row["variant_id"],
            change=row["change"],
            reason=InventoryLogReason(row["reason"]),
        )
        for row in rows
    ]


async def _users_by_id(user_ids: Sequence[int]) -> Dict[int, User]:
    if not user_ids:
        return {}
    return {user.id: user for user in await User.filter(id__in=list(user_ids))}


async def _cart_lines(window: DateRange) -> List[CartLine]:
    rows = await CartItem.filter(
        cart__updated_at__gte=window.start, cart__updated_at__lte=window.end
    ).values("cart_id", "quantity", "product__price", "product__sale_price")
    return [
        CartLine(
            cart_id=row["cart_id"],
            quantity=row["quantity"],
            price=row["product__price"],
            sale_price=row["product__sale_price"],
        )
        for row in rows
    ]


async def generate_report(
    period: Union[str, ReportPeriod],
    reference_date: Optional[ReferenceDate] = None,
    clock: Clock = system_clock,
) -> ReportData:
    """
    Generates the full report for one period.

    Args:
        period: daily, weekly, monthly or yearly. Anything else raises ValueError.
        reference_date: The day the window ends on, defaults to today (UTC).
        clock: Source of "now", used for the default window and ``generatedAt``.

    Returns:
        ReportData: The immutable report document.
    """
    started = time.perf_counter()
    period = parse_period(period)
    window = resolve_range(period, reference_date, clock=clock)
    previous = resolve_previous_range(period, window)
    logger.info(f"Generating {period.value} report for {window.start.isoformat()} - {window.end.isoformat()}")

    orders, (previous_count, previous_revenue), (cancelled_count, cancelled_value), status_counts = (
        await asyncio.gather(
            Order.filter(**_in_window(window)).exclude(status=OrderStatus.CANCELLED).order_by("created_at"),
            _count_and_total(Order.filter(**_in_window(previous)).exclude(status=OrderStatus.CANCELLED)),
            _count_and_total(Order.filter(status=OrderStatus.CANCELLED, **_in_window(window))),
            Order.filter(**_in_window(window))
            .annotate(count=Count("id"))
            .group_by("status")
            .values("status", "count"),
        )
    )
    logger.debug(f"Fetched {len(orders)} orders, {cancelled_count} cancelled in window")

    spending = aggregators.tally_spending(orders)
    categories = await _category_names()

    (
        sold_lines,
        (catalog, stock_seeds),
        movements,
        low_stock,
        low_stock_count,
        out_of_stock,
        total_users,
        new_users,
        previous_new_users,
        top_users,
        review_counts,
        rating_counts,
        active_subscribers,
        new_subscribers,
        cart_lines,
    ) = await asyncio.gather(
        _sold_lines(orders, categories),
        _catalog(categories),
        _stock_movements(window),
        Product.filter(is_archived=False, stock__lte=LOW_STOCK_THRESHOLD)
        .order_by("stock")
        .limit(LOW_STOCK_LIST_SIZE)
        .values("id", "name", "stock"),
        Product.filter(is_archived=False, stock__lte=LOW_STOCK_THRESHOLD).count(),
        Product.filter(is_archived=False, stock=0).count(),
        User.all().count(),
        User.filter(**_in_window(window)).count(),
        User.filter(**_in_window(previous)).count(),
        _users_by_id(aggregators.top_spender_ids(spending)),
        Review.filter(**_in_window(window)).annotate(count=Count("id")).group_by("status").values("status", "count"),
        Review.filter(status=ReviewStatus.APPROVED, **_in_window(window))
        .annotate(count=Count("id"))
        .group_by("rating")
        .values("rating", "count"),
        NewsletterSubscriber.filter(is_active=True).count(),
        NewsletterSubscriber.filter(is_active=True, **_in_window(window)).count(),
        _cart_lines(window),
    )
    logger.debug(
        f"Fetched {len(sold_lines)} order items, {len(movements)} inventory log entries, "
        f"{len(catalog)} active products"
    )

    revenue = aggregators.summarize_revenue(
        orders, previous_revenue, calculate_change(sum(o.total_price for o in orders), previous_revenue)
    )
    report = ReportData(
        period=period,
        start_date=window.start,
        end_date=window.end,
        generated_at=clock(),
        revenue=revenue,
        orders=aggregators.summarize_orders(
            orders,
            previous_count,
            calculate_change(len(orders), previous_count),
            status_counts,
            cancelled_count,
            cancelled_value,
        ),
        products=aggregators.summarize_products(sold_lines, low_stock, out_of_stock),
        users=aggregators.summarize_users(
            total_users,
            new_users,
            previous_new_users,
            calculate_change(new_users, previous_new_users),
            spending,
            top_users,
        ),
        coupons=aggregators.summarize_coupons(orders, revenue.discounts),
        reviews=aggregators.summarize_reviews(review_counts, rating_counts),
        newsletter=aggregators.summarize_newsletter(active_subscribers, new_subscribers),
        cart=aggregators.summarize_carts(cart_lines),
        inventory=aggregators.summarize_inventory(catalog, low_stock_count, out_of_stock),
        stock_changes=aggregators.reconstruct_stock_changes(stock_seeds, movements),
    )
    logger.info(
        f"Generated {period.value} report: {report.orders.total} orders, "
        f"revenue {report.revenue.total:.2f}, {len(report.stock_changes)} stock changes "
        f"in {time.perf_counter() - started:.3f}s"
    )
    return report
