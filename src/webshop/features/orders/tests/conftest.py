import pytest
import pytest_asyncio

from webshop.features.inventory.models import Product, ProductVariant
from webshop.features.orders.models import Coupon, DiscountType


@pytest_asyncio.fixture
async def mug() -> Product:
    return await Product.create(name="Bögre", price=3000, sale_price=2500, stock=10)


@pytest_asyncio.fixture
async def shirt() -> Product:
    product = await Product.create(name="Póló", price=5000, stock=5)
    await ProductVariant.create(product=product, attributes={"size": "M"}, stock=3)
    await ProductVariant.create(product=product, attributes={"size": "L"}, stock=2)
    return product


@pytest_asyncio.fixture
async def summer_coupon() -> Coupon:
    return await Coupon.create(code="NYAR10", discount_type=DiscountType.PERCENTAGE, discount_value=10)


@pytest.fixture
def order_payload():
    """Builds the body of a POST /orders request."""

    def _payload(*items, coupon_code=None, payment_method="card"):
        return {
            "contact_name": "Teszt Elek",
            "contact_email": "teszt.elek@example.com",
            "delivery_address": "Fő utca 1, 1011 Budapest",
            "payment_method": payment_method,
            "coupon_code": coupon_code,
            "items": [
                {"product_public_id": product_id, "quantity": quantity, "variant_public_id": variant_id}
                for product_id, quantity, variant_id in items
            ],
        }

    return _payload
