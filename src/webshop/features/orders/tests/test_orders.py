import datetime

import pytest
from fastapi import HTTPException, status

from webshop.features.inventory.models import InventoryLog, InventoryLogReason, Product, ProductVariant
from webshop.features.orders.models import Coupon, DiscountType, Order, OrderItem, OrderStatus
from webshop.features.orders.schemas import OrderCreateSchema
from webshop.features.orders.service import create_new_order, update_order_status


async def place(payload: dict, user) -> Order:
    return await create_new_order(OrderCreateSchema(**payload), user)


# --- Placing orders ---

async def test_create_order_snapshots_sale_price(mug, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 2, None)), customer_user)

    assert order.status == OrderStatus.PENDING
    assert order.total_price == 5000
    assert order.order_id.startswith(str(datetime.datetime.now().year))
    (item,) = await OrderItem.filter(order_id=order.id)
    assert (item.name, item.price, item.quantity) == ("Bögre", 2500, 2)


async def test_create_order_decrements_stock_and_logs(mug, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 3, None)), customer_user)

    assert (await Product.get(id=mug.id)).stock == 7
    (log,) = await InventoryLog.filter(product_id=mug.id)
    assert log.change == -3
    assert log.reason == InventoryLogReason.ORDER_PLACED
    assert log.reference_id == order.public_id
    assert log.user_id == customer_user.id


async def test_create_order_with_variant(shirt, customer_user, order_payload):
    medium = await ProductVariant.filter(product_id=shirt.id).order_by("id").first()

    await place(order_payload((shirt.public_id, 2, medium.public_id)), customer_user)

    assert (await ProductVariant.get(id=medium.id)).stock == 1
    assert (await Product.get(id=shirt.id)).stock == 3
    (log,) = await InventoryLog.filter(product_id=shirt.id)
    assert log.variant_id == medium.id


async def test_create_order_with_coupon(mug, summer_coupon, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 4, None), coupon_code="NYAR10"), customer_user)

    assert order.coupon_code == "NYAR10"
    assert order.discount_amount == 1000
    assert order.total_price == 9000
    assert (await Coupon.get(id=summer_coupon.id)).used_count == 1


async def test_fixed_coupon_never_exceeds_subtotal(mug, customer_user, order_payload):
    await Coupon.create(code="MINUSZ5000", discount_type=DiscountType.FIXED, discount_value=5000)

    order = await place(order_payload((mug.public_id, 1, None), coupon_code="MINUSZ5000"), customer_user)

    assert order.discount_amount == 2500
    assert order.total_price == 0


async def test_inactive_coupon_is_rejected(mug, customer_user, order_payload):
    await Coupon.create(code="TAVALYI", discount_type=DiscountType.FIXED, discount_value=500, is_active=False)

    with pytest.raises(HTTPException) as exc_info:
        await place(order_payload((mug.public_id, 1, None), coupon_code="TAVALYI"), customer_user)
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST


async def test_insufficient_stock_rolls_back(mug, shirt, customer_user, order_payload):
    payload = order_payload((mug.public_id, 2, None), (shirt.public_id, 6, None))

    with pytest.raises(HTTPException) as exc_info:
        await place(payload, customer_user)

    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
    assert (await Product.get(id=mug.id)).stock == 10
    assert await Order.all().count() == 0
    assert await InventoryLog.all().count() == 0


async def test_archived_product_cannot_be_ordered(mug, customer_user, order_payload):
    mug.is_archived = True
    await mug.save()

    with pytest.raises(HTTPException) as exc_info:
        await place(order_payload((mug.public_id, 1, None)), customer_user)
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST


# --- Status changes ---

async def test_order_moves_forward_to_completed(mug, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 1, None)), customer_user)

    for next_status in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED):
        order = await update_order_status(order.public_id, next_status)

    assert order.status == OrderStatus.COMPLETED
    assert (await Product.get(id=mug.id)).stock == 9


@pytest.mark.parametrize(
    "path, target",
    [
        ((), OrderStatus.COMPLETED),
        ((OrderStatus.PAID,), OrderStatus.PENDING),
        ((OrderStatus.CANCELLED,), OrderStatus.PAID),
        ((OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.COMPLETED), OrderStatus.CANCELLED),
    ],
)
async def test_invalid_transitions_are_rejected(mug, customer_user, order_payload, path, target):
    order = await place(order_payload((mug.public_id, 1, None)), customer_user)
    for step in path:
        await update_order_status(order.public_id, step)

    with pytest.raises(HTTPException) as exc_info:
        await update_order_status(order.public_id, target)
    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST


async def test_cancel_restocks_and_logs(shirt, admin_user, customer_user, order_payload):
    large = await ProductVariant.filter(product_id=shirt.id).order_by("-id").first()
    order = await place(order_payload((shirt.public_id, 2, large.public_id)), customer_user)
    await update_order_status(order.public_id, OrderStatus.PAID)

    await update_order_status(order.public_id, OrderStatus.CANCELLED, admin_user)

    assert (await Product.get(id=shirt.id)).stock == 5
    assert (await ProductVariant.get(id=large.id)).stock == 2
    logs = await InventoryLog.filter(product_id=shirt.id).order_by("id")
    assert [(log.change, log.reason) for log in logs] == [
        (-2, InventoryLogReason.ORDER_PLACED),
        (2, InventoryLogReason.ORDER_CANCELLED),
    ]
    assert logs[1].user_id == admin_user.id
    assert logs[1].reference_id == order.public_id


async def test_cancel_skips_deleted_products(mug, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 1, None)), customer_user)
    await OrderItem.filter(order_id=order.id).update(product_id=None)

    cancelled = await update_order_status(order.public_id, OrderStatus.CANCELLED)

    assert cancelled.status == OrderStatus.CANCELLED
    assert await InventoryLog.filter(reason=InventoryLogReason.ORDER_CANCELLED).count() == 0


# --- API ---

async def test_create_and_get_order(customer_client, mug, order_payload):
    response = await customer_client.post("/api/v1/orders/", json=order_payload((mug.public_id, 2, None)))
    assert response.status_code == status.HTTP_201_CREATED, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["total_price"] == 5000
    assert data["user"]["username"] == "customerfixture"
    assert data["items"][0]["product_public_id"] == mug.public_id

    response = await customer_client.get(f"/api/v1/orders/{data['public_id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["order_id"] == data["order_id"]


async def test_create_order_without_items(customer_client, order_payload):
    response = await customer_client.post("/api/v1/orders/", json=order_payload())
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_customers_only_see_their_own_orders(customer_client, admin_user, mug, order_payload):
    admins_order = await place(order_payload((mug.public_id, 1, None)), admin_user)

    response = await customer_client.get(f"/api/v1/orders/{admins_order.public_id}")
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await customer_client.get("/api/v1/orders/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


async def test_status_change_is_admin_only(admin_client, customer_client, mug, customer_user, order_payload):
    order = await place(order_payload((mug.public_id, 1, None)), customer_user)
    url = f"/api/v1/orders/{order.public_id}/status"

    response = await customer_client.patch(url, json={"status": "paid"})
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await admin_client.patch(url, json={"status": "paid"})
    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()["status"] == "paid"

    response = await admin_client.patch(url, json={"status": "pending"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


async def test_admin_lists_orders_by_status(admin_client, mug, customer_user, order_payload):
    first = await place(order_payload((mug.public_id, 1, None)), customer_user)
    await place(order_payload((mug.public_id, 1, None)), customer_user)
    await update_order_status(first.public_id, OrderStatus.CANCELLED)

    response = await admin_client.get("/api/v1/orders/", params={"statuses": ["cancelled"]})
    assert response.status_code == status.HTTP_200_OK
    assert [o["public_id"] for o in response.json()] == [first.public_id]
