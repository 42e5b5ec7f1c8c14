"""API routes for managing the catalog, its categories and stock."""
from fastapi import APIRouter, status, Query, Depends
from typing import Optional, List, Annotated

from .schemas import (
    CategoryCreate,
    CategoryResponse,
    InventoryLogResponse,
    PaginatedProductResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StockAdjustment,
    VariantCreate,
    VariantResponse,
)
from . import service

from ..auth.models import User as AuthUser
from ..auth.security import get_current_active_admin_user

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory", "Categories"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/products/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    tags=["Inventory"],
)
async def create_product(
    product_in: ProductCreate,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.create_product(product_in)


@router.get(
    "/products/",
    response_model=PaginatedProductResponse,
    summary="List all products that are not archived",
    tags=["Inventory"],
)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Number of products per page"),
    category_public_id: Optional[str] = Query(
        None, description="Public ID of the category to filter by"
    ),
):
    return await service.list_products(page, size, category_public_id)


@router.get(
    "/products/{product_public_id}",
    response_model=ProductResponse,
    summary="Get a specific product",
    tags=["Inventory"],
)
async def get_product(product_public_id: str):
    return await service.get_product(product_public_id)


@router.put(
    "/products/{product_public_id}",
    response_model=ProductResponse,
    summary="Update a product",
    tags=["Inventory"],
)
async def update_product(
    product_public_id: str,
    product_in: ProductUpdate,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.update_product(product_public_id, product_in)


@router.delete(
    "/products/{product_public_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Archive a product",
    tags=["Inventory"],
)
async def archive_product(
    product_public_id: str,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    await service.archive_product(product_public_id)
    return None


@router.post(
    "/products/{product_public_id}/variants",
    response_model=VariantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a variant to a product",
    tags=["Inventory"],
)
async def create_variant(
    product_public_id: str,
    variant_in: VariantCreate,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.create_variant(product_public_id, variant_in)


@router.post(
    "/products/{product_public_id}/stock",
    response_model=ProductResponse,
    summary="Restock or manually adjust stock",
    tags=["Inventory"],
)
async def adjust_stock(
    product_public_id: str,
    adjustment: StockAdjustment,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.adjust_stock(
        product_public_id,
        change=adjustment.change,
        reason=adjustment.reason,
        variant_public_id=adjustment.variant_id,
        user=current_admin,
        reference_id=adjustment.reference_id,
    )


@router.get(
    "/products/{product_public_id}/logs",
    response_model=List[InventoryLogResponse],
    summary="Inventory history of a product",
    tags=["Inventory"],
)
async def list_product_inventory_logs(
    product_public_id: str,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.list_product_inventory_logs(product_public_id)


# --- Category Endpoints ---
@router.post(
    "/categories/",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new category",
    tags=["Categories"],
)
async def create_category(
    category_in: CategoryCreate,
    current_admin: Annotated[AuthUser, Depends(get_current_active_admin_user)],
):
    return await service.create_category(category_in)


@router.get(
    "/categories/",
    response_model=List[CategoryResponse],
    summary="List all categories",
    tags=["Categories"],
)
async def list_categories():
    return await service.list_categories()
