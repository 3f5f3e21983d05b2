from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
from localretail.core.dependencies import get_storage, get_sheet_close_service
from localretail.storage.base import StorageGateway
from localretail.services.sheet_close_service import SheetCloseService
from localretail.services.sheet_service import (
    check_sheet_exists,
    get_sheet_by_id,
    get_sheet_history,
    open_sheet,
    update_sheet_entries,
    delete_sheet
)
from localretail.schemas.sheet import (
    SheetCloseResult,
    SheetCreate,
    SheetEntriesUpdate,
    SheetExistsResponse,
    SheetListResponse,
    SheetRecord,
    SheetStatus
)
from localretail.logger_config import logger

router = APIRouter()


@router.get("", response_model=SheetListResponse)
async def get_sheets(
    route_id: Optional[str] = Query(None, alias="routeId"),
    sheet_status: Optional[SheetStatus] = Query(None, alias="status"),
    storage: StorageGateway = Depends(get_storage)
):
    sheets = await get_sheet_history(storage, route_id=route_id, status=sheet_status)
    return SheetListResponse(total=len(sheets), sheets=sheets)


@router.get("/exists", response_model=SheetExistsResponse)
async def sheet_exists(
    route_id: str = Query(..., alias="routeId", min_length=1),
    storage: StorageGateway = Depends(get_storage)
):
    """Whether the route already has the sheet it would get if opened now."""
    sheet = await check_sheet_exists(storage, route_id)
    return SheetExistsResponse(exists=sheet is not None, sheet=sheet)


@router.get("/{sheet_id}", response_model=SheetRecord)
async def get_sheet(sheet_id: str, storage: StorageGateway = Depends(get_storage)):
    return await get_sheet_by_id(storage, sheet_id)


@router.post("", response_model=SheetRecord, status_code=status.HTTP_201_CREATED)
async def open_route_sheet(sheet_data: SheetCreate, storage: StorageGateway = Depends(get_storage)):
    """Open an active sheet for a route with a snapshot of its customers."""
    try:
        return await open_sheet(storage, sheet_data)
    except ValueError as e:
        logger.error(f"Error opening sheet for route {sheet_data.route_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.put("/{sheet_id}/entries", response_model=SheetRecord)
async def update_entries(
    sheet_id: str,
    entries: SheetEntriesUpdate,
    storage: StorageGateway = Depends(get_storage)
):
    """Record deliveries and payments on an active sheet."""
    try:
        return await update_sheet_entries(storage, sheet_id, entries)
    except ValueError as e:
        logger.error(f"Error updating sheet {sheet_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post("/{sheet_id}/close", response_model=SheetCloseResult)
async def close_route_sheet(
    sheet_id: str,
    service: SheetCloseService = Depends(get_sheet_close_service)
):
    """
    Close a sheet: post invoices and ledger transactions for every customer
    with activity and update their outstanding balances.
    Fails without writing anything if any customer's figures do not add up.
    """
    return await service.close_sheet(sheet_id)


@router.delete("/{sheet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route_sheet(sheet_id: str, storage: StorageGateway = Depends(get_storage)):
    await delete_sheet(storage, sheet_id)
    return None
