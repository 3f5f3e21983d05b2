from typing import List, Optional

from localretail.core.exceptions import NotFoundError
from localretail.logger_config import logger
from localretail.schemas.customer import Customer, CustomerCreate, CustomerUpdate
from localretail.schemas.transaction import Transaction, TransactionType
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_custom_id, generate_opening_balance_id


async def get_customer_by_id(storage: StorageGateway, customer_id: str) -> Customer:
    """Get customer by id; raises NotFoundError when absent."""
    customer = await storage.get_customer(customer_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


async def get_all_customers(
    storage: StorageGateway,
    route: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Customer]:
    return await storage.list_customers(route=route, search=search)


async def register_customer(storage: StorageGateway, data: CustomerCreate) -> Customer:
    """
    Create a customer with the next sequential id.

    Outstanding starts at the opening balance; a non-zero opening balance is
    also posted to the ledger as an INITIAL-<id> adjustment.
    """
    async with storage.atomic():
        customer_id = await storage.next_customer_id()
        customer = Customer(
            id=customer_id,
            name=data.name,
            phone=data.phone,
            address=data.address,
            route=data.route,
            opening_balance=data.opening_balance,
            outstanding_amount=data.opening_balance,
            product_prices=data.product_prices,
        )
        await storage.create_customer(customer)

        if data.opening_balance != 0:
            await storage.create_transaction(Transaction(
                id=generate_custom_id("TXN", 12),
                customer_id=customer.id,
                customer_name=customer.name,
                type=TransactionType.ADJUSTMENT,
                balance_change=data.opening_balance,
                invoice_number=generate_opening_balance_id(customer.id),
            ))
            logger.info(f"Opening balance {data.opening_balance} posted for customer {customer.id}")

    logger.info(f"Customer registered: {customer.id} ({customer.name})")
    return customer


async def update_customer(storage: StorageGateway, customer_id: str, data: CustomerUpdate) -> Customer:
    """Update profile fields; balances only move through the ledger."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await storage.update_customer(customer_id, changes)
        logger.info(f"Customer updated: {customer_id} ({', '.join(changes)})")
    return await get_customer_by_id(storage, customer_id)


async def delete_customer(storage: StorageGateway, customer_id: str) -> None:
    await storage.delete_customer(customer_id)
    logger.info(f"Customer deleted: {customer_id}")


async def get_route_names(storage: StorageGateway) -> List[str]:
    """Distinct, sorted, non-empty route names assigned to customers."""
    customers = await storage.list_customers()
    return sorted({customer.route for customer in customers if customer.route})
