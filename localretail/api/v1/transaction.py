from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.ledger_service import get_transactions, find_duplicate_payment_ids, record_payment
from localretail.schemas.transaction import (
    DuplicatePaymentReport,
    PaymentCreate,
    Transaction,
    TransactionListResponse,
    TransactionType
)

router = APIRouter()


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    sheet_id: Optional[str] = Query(None, alias="sheetId"),
    storage: StorageGateway = Depends(get_storage)
):
    transactions = await get_transactions(
        storage, customer_id=customer_id, type=transaction_type, sheet_id=sheet_id
    )
    return TransactionListResponse(
        total=len(transactions),
        total_balance_change=round(sum(t.balance_change for t in transactions), 2),
        transactions=transactions
    )


@router.post("/payments", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def add_payment(payment_data: PaymentCreate, storage: StorageGateway = Depends(get_storage)):
    return await record_payment(storage, payment_data)


@router.get("/duplicate-payments", response_model=DuplicatePaymentReport)
async def duplicate_payments(storage: StorageGateway = Depends(get_storage)):
    """Payment ids that occur on more than one payment transaction."""
    return await find_duplicate_payment_ids(storage)
