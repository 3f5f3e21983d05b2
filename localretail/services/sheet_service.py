from datetime import datetime
from typing import List, Optional

from localretail.core.exceptions import AlreadyClosedError, NotFoundError
from localretail.logger_config import logger
from localretail.schemas.base import utc_now
from localretail.schemas.sheet import (
    PaymentSplit,
    SheetCreate,
    SheetEntriesUpdate,
    SheetRecord,
    SheetStatus,
)
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_sheet_id


async def get_sheet_by_id(storage: StorageGateway, sheet_id: str) -> SheetRecord:
    sheet = await storage.get_sheet(sheet_id)
    if sheet is None:
        raise NotFoundError("Sheet", sheet_id)
    return sheet


async def get_sheet_history(
    storage: StorageGateway,
    route_id: Optional[str] = None,
    status: Optional[SheetStatus] = None,
) -> List[SheetRecord]:
    return await storage.list_sheets(route_id=route_id, status=status)


async def check_sheet_exists(
    storage: StorageGateway, route_id: str, at: Optional[datetime] = None
) -> Optional[SheetRecord]:
    """The sheet a route would get at `at` (default now), if it has already been opened."""
    return await storage.get_sheet(generate_sheet_id(route_id, at))


async def open_sheet(storage: StorageGateway, data: SheetCreate) -> SheetRecord:
    """
    Start an active worksheet for a route.

    The route's customers are snapshotted with their prices, and the sheet
    records their combined outstanding balance at opening time.
    """
    now = utc_now()
    sheet_id = generate_sheet_id(data.route_id, now)
    if await storage.get_sheet(sheet_id) is not None:
        raise ValueError(f"Sheet {sheet_id} already exists")

    customers = await storage.list_customers(route=data.route_id)
    route_name = data.route_name
    if not route_name:
        route = await storage.get_route(data.route_id)
        route_name = route.name if route else data.route_id

    sheet = SheetRecord(
        id=sheet_id,
        route_id=data.route_id,
        route_name=route_name,
        customers=customers,
        status=SheetStatus.ACTIVE,
        route_outstanding=round(sum(c.outstanding_amount for c in customers), 2),
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    await storage.create_sheet(sheet)
    logger.info(
        f"Sheet opened: {sheet.id} with {len(customers)} customers, "
        f"route outstanding {sheet.route_outstanding}"
    )
    return sheet


async def update_sheet_entries(storage: StorageGateway, sheet_id: str, data: SheetEntriesUpdate) -> SheetRecord:
    """Replace the delivery and/or payment maps of an active sheet."""
    sheet = await get_sheet_by_id(storage, sheet_id)
    if sheet.is_closed:
        logger.error(f"Rejected entry update on closed sheet {sheet_id}")
        raise AlreadyClosedError(sheet_id)

    known = {customer.id for customer in sheet.customers}
    changes = {}

    if data.delivery_data is not None:
        unknown = set(data.delivery_data) - known
        if unknown:
            raise ValueError(f"Customers not on sheet {sheet_id}: {', '.join(sorted(unknown))}")
        changes["delivery_data"] = data.delivery_data

    if data.amount_received is not None:
        unknown = set(data.amount_received) - known
        if unknown:
            raise ValueError(f"Customers not on sheet {sheet_id}: {', '.join(sorted(unknown))}")
        changes["amount_received"] = {
            customer_id: PaymentSplit(cash=split.cash, upi=split.upi, total=split.total)
            for customer_id, split in data.amount_received.items()
        }

    if data.notes is not None:
        changes["notes"] = data.notes

    if changes:
        await storage.update_sheet(sheet_id, changes)
        logger.info(f"Sheet {sheet_id} entries updated ({', '.join(changes)})")
    return await get_sheet_by_id(storage, sheet_id)


async def delete_sheet(storage: StorageGateway, sheet_id: str) -> None:
    await storage.delete_sheet(sheet_id)
    logger.info(f"Sheet deleted: {sheet_id}")
