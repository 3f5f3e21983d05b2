from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import Optional
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.customer_service import (
    get_customer_by_id,
    get_all_customers,
    register_customer,
    update_customer,
    delete_customer
)
from localretail.services.ledger_service import get_customer_transactions
from localretail.schemas.customer import (
    Customer,
    CustomerCreate,
    CustomerUpdate,
    CustomerListResponse
)
from localretail.schemas.transaction import TransactionListResponse
from localretail.logger_config import logger

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
async def get_customers(
    route: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    storage: StorageGateway = Depends(get_storage)
):
    """
    Get all customers, optionally limited to one route and/or matching
    a search term on name, phone or id.
    """
    customers = await get_all_customers(storage, route=route, search=search)
    return CustomerListResponse(total=len(customers), customers=customers)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(customer_id: str, storage: StorageGateway = Depends(get_storage)):
    return await get_customer_by_id(storage, customer_id)


@router.get("/{customer_id}/transactions", response_model=TransactionListResponse)
async def get_customer_ledger(customer_id: str, storage: StorageGateway = Depends(get_storage)):
    """Ledger entries of one customer, newest first."""
    transactions = await get_customer_transactions(storage, customer_id)
    return TransactionListResponse(
        total=len(transactions),
        total_balance_change=round(sum(t.balance_change for t in transactions), 2),
        transactions=transactions
    )


@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def create_customer_route(
    customer_data: CustomerCreate,
    storage: StorageGateway = Depends(get_storage)
):
    """
    Register a new customer.
    A non-zero opening balance is posted as an adjustment transaction.
    """
    try:
        return await register_customer(storage, customer_data)
    except ValueError as e:
        logger.error(f"Error creating customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{customer_id}", response_model=Customer)
async def update_customer_route(
    customer_id: str,
    customer_data: CustomerUpdate,
    storage: StorageGateway = Depends(get_storage)
):
    try:
        return await update_customer(storage, customer_id, customer_data)
    except ValueError as e:
        logger.error(f"Error updating customer {customer_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer_route(customer_id: str, storage: StorageGateway = Depends(get_storage)):
    await delete_customer(storage, customer_id)
    return None
