from fastapi import APIRouter, Depends, HTTPException, Path, status

from foodinventory.core.dependencies import get_resolver, request_deadline
from foodinventory.core.errors import CatalogError, ProductNotFound
from foodinventory.schemas.product import BARCODE_PATTERN, ProductOut, ProductUpdate
from foodinventory.services.resolver import ProductResolver, ResolveStatus

router = APIRouter()


@router.get("/{ean}", response_model=ProductOut)
async def get_product(
    ean: str = Path(..., pattern=BARCODE_PATTERN),
    resolver: ProductResolver = Depends(get_resolver),
):
    """Look up a product, fetching it from the catalog if it is not cached"""
    try:
        async with request_deadline():
            resolution = await resolver.resolve(ean)
    except CatalogError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "CATALOG_UNAVAILABLE", "message": str(e)},
        )
    if resolution.status is ResolveStatus.TIMEOUT:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={"code": "CATALOG_TIMEOUT", "message": f"Catalog lookup for EAN {ean} timed out"},
        )
    if resolution.status is ResolveStatus.UNKNOWN:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PRODUCT_NOT_FOUND", "message": f"EAN {ean} is not in the catalog"},
        )
    return resolution.product


@router.patch("/{ean}", response_model=ProductOut)
async def update_product(
    payload: ProductUpdate,
    ean: str = Path(..., pattern=BARCODE_PATTERN),
    resolver: ProductResolver = Depends(get_resolver),
):
    """Set a product's name and category by hand"""
    try:
        async with request_deadline():
            return await resolver.update_product(ean, payload.name, payload.category)
    except ProductNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PRODUCT_NOT_FOUND", "message": str(e)},
        )
