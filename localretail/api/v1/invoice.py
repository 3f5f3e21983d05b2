from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.ledger_service import create_manual_invoice, get_invoices, get_invoice_by_number
from localretail.schemas.invoice import Invoice, InvoiceCreate, InvoiceListResponse

router = APIRouter()


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    sheet_id: Optional[str] = Query(None, alias="sheetId"),
    storage: StorageGateway = Depends(get_storage)
):
    invoices = await get_invoices(storage, customer_id=customer_id, sheet_id=sheet_id)
    return InvoiceListResponse(
        total=len(invoices),
        total_amount=round(sum(invoice.total_amount for invoice in invoices), 2),
        invoices=invoices
    )


@router.post("", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(invoice_data: InvoiceCreate, storage: StorageGateway = Depends(get_storage)):
    """Raise an invoice outside a route sheet and post it to the customer's ledger."""
    return await create_manual_invoice(storage, invoice_data)


@router.get("/{invoice_number}", response_model=Invoice)
async def get_invoice(invoice_number: str, storage: StorageGateway = Depends(get_storage)):
    return await get_invoice_by_number(storage, invoice_number)
