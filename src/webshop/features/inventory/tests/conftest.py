import pytest_asyncio

from webshop.features.inventory.models import Category, Product, ProductVariant


@pytest_asyncio.fixture
async def kitchen() -> Category:
    return await Category.create(name="Konyha", description="Bögrék, tálak, evőeszközök")


@pytest_asyncio.fixture
async def product_factory(kitchen: Category):
    """A factory to create products, in the kitchen category unless told otherwise."""

    async def _factory(
        name: str,
        stock: int = 10,
        price: float = 1000.0,
        sale_price: float = None,
        category: Category = kitchen,
    ) -> Product:
        return await Product.create(
            name=name, stock=stock, price=price, sale_price=sale_price, category=category
        )

    return _factory


@pytest_asyncio.fixture
async def shirt(product_factory) -> Product:
    """A product with two size variants whose stock adds up to the product's."""
    product = await product_factory("Póló", stock=12, price=4990)
    await ProductVariant.create(product=product, attributes={"size": "M"}, stock=7)
    await ProductVariant.create(product=product, attributes={"size": "L"}, stock=5)
    return product
