import logging
from typing import Optional, List
from fastapi import HTTPException, status
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from ..auth.models import User as AuthUser
from .models import Category, InventoryLog, InventoryLogReason, Product, ProductVariant
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    InventoryLogResponse,
    PaginatedProductResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    VariantCreate,
    VariantResponse,
)

logger = logging.getLogger(__name__)


def _to_product_response(product: Product) -> ProductResponse:
    """Converts a Product with fetched category and variants to a ProductResponse schema."""
    category_data = None
    if product.category:
        category_data = CategoryResponse.model_validate(product.category)

    return ProductResponse(
        public_id=product.public_id,
        name=product.name,
        price=product.price,
        sale_price=product.sale_price,
        stock=product.stock,
        is_archived=product.is_archived,
        category=category_data,
        variants=[VariantResponse.model_validate(v) for v in product.variants],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


async def _get_active_product(product_public_id: str) -> Product:
    product = await Product.get_or_none(public_id=product_public_id, is_archived=False)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


async def _get_category(category_public_id: str) -> Category:
    category = await Category.get_or_none(public_id=category_public_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category {category_public_id} not found",
        )
    return category


async def create_category(category_in: CategoryCreate) -> CategoryResponse:
    try:
        category = await Category.create(**category_in.model_dump())
    except IntegrityError:
        logger.warning(f"Category name '{category_in.name}' already exists")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Category name '{category_in.name}' already exists.",
        )
    return CategoryResponse.model_validate(category)


async def list_categories() -> List[CategoryResponse]:
    categories = await Category.all().order_by("name")
    return [CategoryResponse.model_validate(cat) for cat in categories]


async def create_product(product_in: ProductCreate) -> ProductResponse:
    """
    Creates a new product.

    Args:
        product_in: The data for the new product.

    Returns:
        The created product.
    """
    product_data = product_in.model_dump()
    category_public_id = product_data.pop("category_id", None)
    category = await _get_category(category_public_id) if category_public_id else None

    product = await Product.create(**product_data, category=category)
    await product.fetch_related("category", "variants")
    logger.info(f"Created product {product.public_id} '{product.name}' with stock {product.stock}")
    return _to_product_response(product)


async def list_products(
    page: int, size: int, category_public_id: Optional[str]
) -> PaginatedProductResponse:
    """
    Lists the products that are not archived.

    Args:
        page: The page number.
        size: The number of products per page.
        category_public_id: The public ID of the category to filter by.

    Returns:
        A paginated list of products.
    """
    offset = (page - 1) * size
    filters = {"is_archived": False}
    if category_public_id:
        category = await _get_category(category_public_id)
        filters["category_id"] = category.id

    products = (
        await Product.filter(**filters)
        .prefetch_related("category", "variants")
        .order_by("name")
        .offset(offset)
        .limit(size)
    )
    total = await Product.filter(**filters).count()
    return PaginatedProductResponse(
        items=[_to_product_response(p) for p in products], total=total, page=page, size=size
    )


async def get_product(product_public_id: str) -> ProductResponse:
    product = await _get_active_product(product_public_id)
    await product.fetch_related("category", "variants")
    return _to_product_response(product)


async def update_product(
    product_public_id: str, product_in: ProductUpdate
) -> ProductResponse:
    """
    Updates the catalog fields of a product. Stock is left alone.

    Args:
        product_public_id: The public ID of the product to update.
        product_in: The new data for the product.

    Returns:
        The updated product.
    """
    product = await _get_active_product(product_public_id)

    update_data = product_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No fields for update"
        )

    if "category_id" in update_data:
        category_public_id = update_data.pop("category_id")
        product.category = await _get_category(category_public_id) if category_public_id else None

    for key, value in update_data.items():
        setattr(product, key, value)
    await product.save()
    await product.fetch_related("category", "variants")
    return _to_product_response(product)


async def archive_product(product_public_id: str):
    """
    Archives a product. Archived products disappear from the catalog and
    from stock reports but keep their order and inventory history.
    """
    product = await _get_active_product(product_public_id)
    product.is_archived = True
    await product.save(update_fields=["is_archived", "updated_at"])
    logger.info(f"Archived product {product.public_id}")
    return None


async def create_variant(product_public_id: str, variant_in: VariantCreate) -> VariantResponse:
    product = await _get_active_product(product_public_id)
    variant = await ProductVariant.create(product=product, **variant_in.model_dump())
    return VariantResponse.model_validate(variant)


async def log_inventory_change(
    product_id: int,
    change: int,
    reason: InventoryLogReason,
    variant_id: Optional[int] = None,
    reference_id: Optional[str] = None,
    user_id: Optional[int] = None,
    using_db=None,
) -> InventoryLog:
    """
    Appends one row to the inventory log.

    Every stock movement goes through here, from manual adjustments as well
    as from order placement and cancellation. Pass ``using_db`` to write
    inside the caller's transaction.
    """
    log = await InventoryLog.create(
        product_id=product_id,
        variant_id=variant_id,
        change=change,
        reason=reason,
        reference_id=reference_id,
        user_id=user_id,
        using_db=using_db,
    )
    logger.debug(f"Inventory log: product {product_id} variant {variant_id} {change:+d} {reason.value}")
    return log


async def adjust_stock(
    product_public_id: str,
    change: int,
    reason: InventoryLogReason,
    variant_public_id: Optional[str] = None,
    user: Optional[AuthUser] = None,
    reference_id: Optional[str] = None,
) -> ProductResponse:
    """
    Applies a signed stock delta to a product, and to one of its variants
    when given, and records it in the inventory log.

    Product stock is the total over its variants, so a variant change moves
    both. Neither may drop below zero.

    Returns:
        The product with its updated stock.
    """
    async with in_transaction() as conn:
        product = await Product.filter(
            public_id=product_public_id, is_archived=False
        ).using_db(conn).select_for_update().first()
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
            )

        variant = None
        if variant_public_id:
            variant = await ProductVariant.filter(
                public_id=variant_public_id, product_id=product.id
            ).using_db(conn).select_for_update().first()
            if not variant:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Variant {variant_public_id} not found for this product",
                )
            if variant.stock + change < 0:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Variant stock cannot go below zero (current: {variant.stock})",
                )
            variant.stock += change
            await variant.save(using_db=conn, update_fields=["stock", "updated_at"])

        if product.stock + change < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Stock cannot go below zero (current: {product.stock})",
            )
        product.stock += change
        await product.save(using_db=conn, update_fields=["stock", "updated_at"])

        await log_inventory_change(
            product_id=product.id,
            change=change,
            reason=reason,
            variant_id=variant.id if variant else None,
            reference_id=reference_id,
            user_id=user.id if user else None,
            using_db=conn,
        )

    logger.info(f"Stock of {product.public_id} changed by {change:+d} ({reason.value}), now {product.stock}")
    await product.fetch_related("category", "variants")
    return _to_product_response(product)


async def list_product_inventory_logs(product_public_id: str) -> List[InventoryLogResponse]:
    """Inventory history of a product, newest first. Archived products keep their history."""
    product = await Product.get_or_none(public_id=product_public_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    logs = await InventoryLog.filter(product_id=product.id).order_by("-created_at", "-id")
    variant_ids = {log.variant_id for log in logs if log.variant_id}
    variants = {}
    if variant_ids:
        variants = {v.id: v for v in await ProductVariant.filter(id__in=list(variant_ids))}

    response = []
    for log in logs:
        variant = variants.get(log.variant_id)
        response.append(
            InventoryLogResponse(
                change=log.change,
                reason=log.reason,
                reference_id=log.reference_id,
                variant_id=variant.public_id if variant else None,
                variant_attributes=variant.attributes if variant else None,
                created_at=log.created_at,
            )
        )
    return response
