from collections import Counter
from typing import List, Optional

from localretail.core.exceptions import NotFoundError
from localretail.logger_config import logger
from localretail.schemas.base import utc_now
from localretail.schemas.invoice import Invoice, InvoiceCreate, InvoiceItem
from localretail.schemas.transaction import DuplicatePaymentReport, PaymentCreate, Transaction, TransactionType
from localretail.services.sheet_close_service import invoice_status
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_custom_id, generate_unique_transaction_id

MANUAL_ROUTE_ID = "MANUAL"
MANUAL_ROUTE_NAME = "No route"


async def get_invoices(
    storage: StorageGateway,
    customer_id: Optional[str] = None,
    sheet_id: Optional[str] = None,
) -> List[Invoice]:
    return await storage.list_invoices(customer_id=customer_id, sheet_id=sheet_id)


async def get_invoice_by_number(storage: StorageGateway, invoice_number: str) -> Invoice:
    invoice = await storage.get_invoice(invoice_number)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_number)
    return invoice


async def get_transactions(
    storage: StorageGateway,
    customer_id: Optional[str] = None,
    type: Optional[TransactionType] = None,
    sheet_id: Optional[str] = None,
) -> List[Transaction]:
    return await storage.list_transactions(customer_id=customer_id, type=type, sheet_id=sheet_id)


async def get_customer_transactions(storage: StorageGateway, customer_id: str) -> List[Transaction]:
    if await storage.get_customer(customer_id) is None:
        raise NotFoundError("Customer", customer_id)
    return await storage.list_transactions(customer_id=customer_id)


async def find_duplicate_payment_ids(storage: StorageGateway) -> DuplicatePaymentReport:
    """Report payment identifiers that appear on more than one payment transaction."""
    payments = await storage.list_transactions(type=TransactionType.PAYMENT)
    counts = Counter(payment.invoice_number for payment in payments)
    duplicates = sorted(payment_id for payment_id, count in counts.items() if count > 1)

    logger.info(f"Payment ID validation: found {len(duplicates)} duplicate payment IDs")
    if duplicates:
        logger.warning(f"Duplicate payment IDs found: {duplicates}")

    return DuplicatePaymentReport(duplicates_found=len(duplicates), duplicate_ids=duplicates)


# ==================== MANUAL ENTRIES ====================

async def record_payment(storage: StorageGateway, data: PaymentCreate) -> Transaction:
    """Post a payment collected outside a route sheet and lower the customer's outstanding."""
    async with storage.atomic():
        customer = await storage.get_customer(data.customer_id, for_update=True)
        if customer is None:
            raise NotFoundError("Customer", data.customer_id)

        received = data.total
        payment = Transaction(
            id=generate_custom_id("TXN", 12),
            customer_id=customer.id,
            customer_name=customer.name,
            type=TransactionType.PAYMENT,
            total_amount=0.0,
            amount_received=received,
            balance_change=-received,
            invoice_number=generate_unique_transaction_id("payment", customer.id),
            cash_amount=data.cash_amount,
            upi_amount=data.upi_amount,
        )
        await storage.create_transaction(payment)
        new_outstanding = round(customer.outstanding_amount - received, 2)
        await storage.update_customer(customer.id, {"outstanding_amount": new_outstanding})

    logger.info(
        f"Payment {payment.invoice_number} of {received} recorded for customer {customer.id}, "
        f"outstanding {customer.outstanding_amount} -> {new_outstanding}"
    )
    return payment


async def create_manual_invoice(storage: StorageGateway, data: InvoiceCreate) -> Invoice:
    """
    Raise an invoice outside a route sheet.

    The sale transaction carries the amount received with it, so the
    customer's outstanding moves by subtotal - received.
    """
    async with storage.atomic():
        customer = await storage.get_customer(data.customer_id, for_update=True)
        if customer is None:
            raise NotFoundError("Customer", data.customer_id)

        items = [
            InvoiceItem(
                product_name=item.product_name.strip(),
                quantity=item.quantity,
                price=item.price,
                total=round(item.quantity * item.price, 2),
            )
            for item in data.items
        ]
        subtotal = round(sum(item.total for item in items), 2)
        received = round(data.cash_amount + data.upi_amount, 2)
        balance_change = round(subtotal - received, 2)
        final_balance = round(customer.outstanding_amount + balance_change, 2)
        invoice_number = generate_unique_transaction_id("sale", customer.id)
        now = utc_now()

        invoice = Invoice(
            id=generate_custom_id("INV", 12),
            invoice_number=invoice_number,
            customer_id=customer.id,
            customer_name=customer.name,
            items=items,
            subtotal=subtotal,
            total_amount=subtotal,
            amount_received=received,
            balance_change=balance_change,
            status=invoice_status(subtotal, received),
            route_id=MANUAL_ROUTE_ID,
            route_name=MANUAL_ROUTE_NAME,
            cash_amount=data.cash_amount,
            upi_amount=data.upi_amount,
            customer_final_balance=final_balance,
            date=now,
            created_at=now,
        )
        await storage.create_invoice(invoice)
        await storage.create_transaction(Transaction(
            id=generate_custom_id("TXN", 12),
            customer_id=customer.id,
            customer_name=customer.name,
            type=TransactionType.SALE,
            items=items,
            total_amount=subtotal,
            amount_received=received,
            balance_change=balance_change,
            invoice_number=invoice_number,
            cash_amount=data.cash_amount,
            upi_amount=data.upi_amount,
            route_id=MANUAL_ROUTE_ID,
            route_name=MANUAL_ROUTE_NAME,
            date=now,
            created_at=now,
        ))
        await storage.update_customer(customer.id, {"outstanding_amount": final_balance})

    logger.info(
        f"Manual invoice {invoice_number} for customer {customer.id}: "
        f"subtotal {subtotal}, received {received}, status {invoice.status.value}"
    )
    return invoice
