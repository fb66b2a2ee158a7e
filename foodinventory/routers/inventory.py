from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from foodinventory.core.dependencies import get_ledger, request_deadline
from foodinventory.core.errors import CatalogError, EntryNotFound
from foodinventory.schemas.inventory import InventoryAddRequest, InventoryEntryOut
from foodinventory.schemas.product import BARCODE_PATTERN
from foodinventory.services.ledger import InventoryLedger

router = APIRouter()


@router.get("", response_model=List[InventoryEntryOut])
async def list_inventory(ledger: InventoryLedger = Depends(get_ledger)):
    """List current stock ordered by product name"""
    async with request_deadline():
        return await ledger.list()


@router.post(
    "",
    response_model=InventoryEntryOut,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_200_OK: {"model": InventoryEntryOut, "description": "Quantity incremented"}},
)
async def add_to_inventory(
    payload: InventoryAddRequest,
    response: Response,
    ledger: InventoryLedger = Depends(get_ledger),
):
    """Add one unit; creates the entry on first add (201), otherwise increments (200)"""
    try:
        async with request_deadline():
            entry, created = await ledger.add(payload.barcode, payload.expiry_date)
    except CatalogError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "CATALOG_UNAVAILABLE", "message": str(e)},
        )
    if not created:
        response.status_code = status.HTTP_200_OK
    return entry


@router.delete(
    "/{ean}",
    response_model=InventoryEntryOut,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Last unit removed, entry deleted"}},
)
async def remove_from_inventory(
    ean: str = Path(..., pattern=BARCODE_PATTERN),
    ledger: InventoryLedger = Depends(get_ledger),
):
    """Remove one unit; 204 when the last unit is gone"""
    try:
        async with request_deadline():
            entry = await ledger.remove(ean)
    except EntryNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "INVENTORY_ENTRY_NOT_FOUND", "message": str(e)},
        )
    if entry is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return entry
