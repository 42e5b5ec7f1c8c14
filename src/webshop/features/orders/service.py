import logging
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from tortoise.transactions import in_transaction

from .models import Coupon, Order, OrderItem, OrderStatus
from ..auth.models import User as AuthUser
from ..auth.schemas import UserResponse
from ..auth.service import ADMIN_ROLE
from ..inventory.models import InventoryLogReason, Product, ProductVariant
from ..inventory.service import log_inventory_change
from .schemas import OrderCreateSchema, OrderItemPublicSchema, OrderPublicSchema

from ...common.models import generate_ksuid

logger = logging.getLogger(__name__)

# Forward moves only; completed and cancelled are terminal
ALLOWED_TRANSITIONS: Dict[OrderStatus, Tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.PAID, OrderStatus.CANCELLED),
    OrderStatus.PAID: (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    OrderStatus.SHIPPED: (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
    OrderStatus.COMPLETED: (),
    OrderStatus.CANCELLED: (),
}


async def get_order_by_public_id(order_public_id: str, current_user: AuthUser) -> Order:
    order = await Order.get_or_none(public_id=order_public_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Order {order_public_id} not found.")

    # Admins can see any order, customers only their own
    if current_user.role != ADMIN_ROLE and order.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this order.")

    return order


async def get_all_orders(current_user: AuthUser, page: int, size: int, statuses: Optional[List[OrderStatus]]) -> List[Order]:
    offset = (page - 1) * size
    query = Order.all().order_by("-created_at", "-id")

    if statuses:
        query = query.filter(status__in=statuses)

    if current_user.role != ADMIN_ROLE:
        query = query.filter(user_id=current_user.id)

    return await query.offset(offset).limit(size)


async def create_new_order(order_data: OrderCreateSchema, current_user: AuthUser) -> Order:
    """
    Places an order.

    Inside one transaction every ordered product (and variant) is locked,
    checked for stock and decremented, with an ORDER_PLACED inventory log
    entry per line. Names and unit prices (sale price when set) are
    snapshotted on the order items. An optional coupon is applied to the
    subtotal and its usage counter incremented.
    """
    order_public_id = generate_ksuid()
    async with in_transaction() as conn:
        coupon = None
        if order_data.coupon_code:
            coupon = await Coupon.filter(
                code=order_data.coupon_code, is_active=True
            ).using_db(conn).select_for_update().first()
            if not coupon:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Coupon {order_data.coupon_code} is not valid.")

        lines = []
        for item_data in order_data.items:
            product = await Product.filter(
                public_id=item_data.product_public_id, is_archived=False
            ).using_db(conn).select_for_update().first()
            if not product:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Product {item_data.product_public_id} not found.")

            variant = None
            if item_data.variant_public_id:
                variant = await ProductVariant.filter(
                    public_id=item_data.variant_public_id, product_id=product.id
                ).using_db(conn).select_for_update().first()
                if not variant:
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Variant {item_data.variant_public_id} not found.")
                if variant.stock < item_data.quantity:
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Not enough stock for {product.name} ({variant.attributes}).")
                variant.stock -= item_data.quantity
                await variant.save(using_db=conn, update_fields=['stock', 'updated_at'])

            if product.stock < item_data.quantity:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Not enough stock for {product.name}.")
            product.stock -= item_data.quantity
            await product.save(using_db=conn, update_fields=['stock', 'updated_at'])
            lines.append((product, variant, item_data.quantity, product.effective_price))

        subtotal = sum(price * quantity for _, _, quantity, price in lines)
        discount = coupon.discount_for(subtotal) if coupon else 0.0

        order = await Order.create(
            public_id=order_public_id,
            order_id=await Order.generate_next_order_id(using_db=conn),
            contact_name=order_data.contact_name,
            contact_email=order_data.contact_email,
            delivery_address=order_data.delivery_address,
            payment_method=order_data.payment_method,
            coupon_code=coupon.code if coupon else None,
            discount_amount=discount,
            total_price=round(subtotal - discount, 2),
            status=OrderStatus.PENDING,
            user=current_user,
            using_db=conn,
        )
        for product, variant, quantity, price in lines:
            await OrderItem.create(
                order=order, product=product, variant=variant,
                name=product.name, price=price, quantity=quantity,
                using_db=conn,
            )
            await log_inventory_change(
                product_id=product.id,
                change=-quantity,
                reason=InventoryLogReason.ORDER_PLACED,
                variant_id=variant.id if variant else None,
                reference_id=order.public_id,
                user_id=current_user.id,
                using_db=conn,
            )

        if coupon:
            coupon.used_count += 1
            await coupon.save(using_db=conn, update_fields=['used_count', 'updated_at'])

    logger.info(f"Order {order.order_id} placed by {current_user.username}: {len(lines)} lines, total {order.total_price:.2f}")
    return order


async def update_order_status(order_public_id: str, new_status: OrderStatus, current_user: Optional[AuthUser] = None) -> Order:
    """
    Moves an order along pending -> paid -> shipped -> completed, or cancels it.

    Cancelling puts every line's quantity back on the product (and variant)
    and records it as ORDER_CANCELLED in the inventory log. Lines whose
    product has since been deleted are skipped.
    """
    async with in_transaction() as conn:
        order = await Order.filter(public_id=order_public_id).using_db(conn).select_for_update().first()
        if not order:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found.")
        if new_status not in ALLOWED_TRANSITIONS[order.status]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot change order status from {order.status.value} to {new_status.value}.",
            )

        if new_status == OrderStatus.CANCELLED:
            for item in await OrderItem.filter(order_id=order.id, product_id__isnull=False).using_db(conn):
                product = await Product.filter(id=item.product_id).using_db(conn).select_for_update().first()
                product.stock += item.quantity
                await product.save(using_db=conn, update_fields=['stock', 'updated_at'])

                variant = None
                if item.variant_id:
                    variant = await ProductVariant.filter(id=item.variant_id).using_db(conn).select_for_update().first()
                if variant:
                    variant.stock += item.quantity
                    await variant.save(using_db=conn, update_fields=['stock', 'updated_at'])

                await log_inventory_change(
                    product_id=product.id,
                    change=item.quantity,
                    reason=InventoryLogReason.ORDER_CANCELLED,
                    variant_id=variant.id if variant else None,
                    reference_id=order.public_id,
                    user_id=current_user.id if current_user else None,
                    using_db=conn,
                )

        previous_status = order.status
        order.status = new_status
        await order.save(using_db=conn, update_fields=['status', 'updated_at'])

    logger.info(f"Order {order.order_id} moved from {previous_status.value} to {new_status.value}")
    return order


async def _to_order_public_schema(order: Order) -> OrderPublicSchema:
    items = await OrderItem.filter(order_id=order.id).order_by("id")

    # Products and variants may be gone, so look them up instead of joining
    product_ids = [i.product_id for i in items if i.product_id]
    variant_ids = [i.variant_id for i in items if i.variant_id]
    product_public_ids = {}
    variant_public_ids = {}
    if product_ids:
        product_public_ids = dict(await Product.filter(id__in=product_ids).values_list("id", "public_id"))
    if variant_ids:
        variant_public_ids = dict(await ProductVariant.filter(id__in=variant_ids).values_list("id", "public_id"))

    user = await AuthUser.get_or_none(id=order.user_id) if order.user_id else None

    return OrderPublicSchema(
        public_id=order.public_id,
        order_id=order.order_id,
        contact_name=order.contact_name,
        contact_email=order.contact_email,
        delivery_address=order.delivery_address,
        payment_method=order.payment_method,
        status=order.status,
        total_price=order.total_price,
        discount_amount=order.discount_amount,
        loyalty_discount=order.loyalty_discount,
        coupon_code=order.coupon_code,
        user=UserResponse.model_validate(user) if user else None,
        items=[
            OrderItemPublicSchema(
                public_id=item.public_id,
                product_public_id=product_public_ids.get(item.product_id),
                variant_public_id=variant_public_ids.get(item.variant_id),
                name=item.name,
                price=item.price,
                quantity=item.quantity,
            )
            for item in items
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
