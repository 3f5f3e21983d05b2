"""
Sheet closing / ledger reconciliation.

Closing a route sheet turns the day's delivery and payment entries into
invoices and ledger transactions, and moves each active customer's
outstanding balance by (purchases - payments).

The close runs in two phases inside one storage unit of work: every customer
on the sheet is validated first, and only then are records posted. Any error
leaves the store untouched and the sheet active.
"""

from datetime import datetime
from typing import Dict, List, NamedTuple

from localretail.core.exceptions import AlreadyClosedError, ConsistencyError, NotFoundError
from localretail.logger_config import logger
from localretail.schemas.base import utc_now
from localretail.schemas.customer import Customer
from localretail.schemas.invoice import Invoice, InvoiceItem, InvoiceStatus
from localretail.schemas.product import Product
from localretail.schemas.sheet import DeliveryLine, PaymentSplit, SheetCloseResult, SheetRecord, SheetStatus
from localretail.schemas.transaction import Transaction, TransactionType
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_custom_id, generate_unique_transaction_id


class CustomerPosting(NamedTuple):
    """Validated figures for one customer, ready to be posted."""
    customer: Customer
    current_outstanding: float
    items: List[InvoiceItem]
    purchase_total: float
    payment: PaymentSplit

    @property
    def received(self) -> float:
        return self.payment.total

    @property
    def has_activity(self) -> bool:
        return self.purchase_total > 0 or self.received > 0


def invoice_status(purchase_total: float, received: float) -> InvoiceStatus:
    if received >= purchase_total:
        return InvoiceStatus.PAID
    if received > 0:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.PENDING


class SheetCloseService:
    """Closes route sheets against an injected storage gateway."""

    def __init__(self, storage: StorageGateway, tolerance: float = 0.01):
        self.storage = storage
        self.tolerance = tolerance

    async def close_sheet(self, sheet_id: str) -> SheetCloseResult:
        async with self.storage.atomic():
            sheet = await self.storage.get_sheet(sheet_id, for_update=True)
            if sheet is None:
                logger.error(f"Cannot close sheet {sheet_id}: not found")
                raise NotFoundError("Sheet", sheet_id)
            if sheet.is_closed:
                logger.error(f"Cannot close sheet {sheet_id}: already closed")
                raise AlreadyClosedError(sheet_id)

            logger.info(
                f"Closing sheet {sheet.id} - route {sheet.route_name or sheet.route_id}, "
                f"{len(sheet.customers)} customers"
            )

            products = {product.id: product for product in await self.storage.list_products()}

            # Phase 1: validate every customer before anything is written
            postings = []
            for snapshot in sheet.customers:
                postings.append(await self._prepare_posting(sheet, snapshot, products))

            # Phase 2: post
            now = utc_now()
            result = SheetCloseResult(sheet_id=sheet.id, closed_at=now)
            for posting in postings:
                if not posting.has_activity:
                    result.customers_skipped.append(posting.customer.id)
                    continue
                await self._post(sheet, posting, now, result)

            await self.storage.update_sheet(
                sheet.id, {"status": SheetStatus.CLOSED, "closed_at": now}
            )

        logger.info(
            f"Sheet {sheet.id} closed: {len(result.invoice_numbers)} invoices, "
            f"{len(result.payment_ids)} payments, {len(result.customers_updated)} customers updated"
        )
        return result

    # ==================== VALIDATION ====================

    async def _prepare_posting(
        self,
        sheet: SheetRecord,
        snapshot: Customer,
        products: Dict[str, Product],
    ) -> CustomerPosting:
        current = await self.storage.get_customer(snapshot.id, for_update=True)
        if current is None:
            logger.error(f"Customer {snapshot.id} on sheet {sheet.id} no longer exists")
            raise NotFoundError("Customer", snapshot.id)

        payment = sheet.amount_received.get(snapshot.id) or PaymentSplit()
        self._check_payment_split(sheet.id, snapshot.id, payment)

        lines = sheet.delivery_data.get(snapshot.id) or {}
        items = self._validated_items(sheet.id, snapshot, lines, products)
        purchase_total = round(sum(item.total for item in items), 2)

        logger.debug(
            f"Customer {snapshot.id}: outstanding={current.outstanding_amount}, "
            f"purchases={purchase_total}, received={payment.total}"
        )
        return CustomerPosting(
            customer=snapshot,
            current_outstanding=current.outstanding_amount,
            items=items,
            purchase_total=purchase_total,
            payment=payment,
        )

    def _check_payment_split(self, sheet_id: str, customer_id: str, payment: PaymentSplit) -> None:
        expected = round(payment.cash + payment.upi, 2)
        if abs(payment.total - expected) > self.tolerance:
            logger.error(
                f"Payment total mismatch for customer {customer_id} on sheet {sheet_id}: "
                f"expected {expected}, got {payment.total}"
            )
            raise ConsistencyError(
                f"Payment total mismatch for customer {customer_id}",
                sheet_id=sheet_id,
                customer_id=customer_id,
                expected=expected,
                actual=payment.total,
            )

    def _validated_items(
        self,
        sheet_id: str,
        customer: Customer,
        lines: Dict[str, DeliveryLine],
        products: Dict[str, Product],
    ) -> List[InvoiceItem]:
        """Invoice items for delivered lines, each checked against quantity x unit price."""
        items = []
        expected_total = 0.0
        for product_id, line in lines.items():
            if line.quantity <= 0:
                continue
            product = products.get(product_id)
            if product is None:
                logger.error(f"Product {product_id} delivered on sheet {sheet_id} is not in the catalog")
                raise NotFoundError("Product", product_id)

            unit_price = customer.unit_price_for(product)
            # compared unrounded; only reported figures are rounded
            expected_amount = line.quantity * unit_price
            if abs(line.amount - expected_amount) > self.tolerance:
                logger.error(
                    f"Amount calculation error for customer {customer.id}, product {product_id}: "
                    f"expected {expected_amount}, got {line.amount}"
                )
                raise ConsistencyError(
                    f"Amount calculation error for customer {customer.id}, product {product_id}",
                    sheet_id=sheet_id,
                    customer_id=customer.id,
                    product_id=product_id,
                    expected=round(expected_amount, 4),
                    actual=line.amount,
                )
            expected_total += expected_amount
            items.append(InvoiceItem(
                product_name=product.name,
                quantity=line.quantity,
                price=unit_price,
                total=line.amount,
            ))

        # lines with zero quantity must not carry an amount either
        recorded_total = sum(line.amount for line in lines.values())
        if abs(recorded_total - expected_total) > self.tolerance:
            logger.error(
                f"Total calculation mismatch for customer {customer.id}: "
                f"expected {expected_total}, got {recorded_total}"
            )
            raise ConsistencyError(
                f"Total calculation mismatch for customer {customer.id}",
                sheet_id=sheet_id,
                customer_id=customer.id,
                expected=round(expected_total, 4),
                actual=round(recorded_total, 2),
            )
        return items

    # ==================== POSTING ====================

    async def _post(
        self,
        sheet: SheetRecord,
        posting: CustomerPosting,
        now: datetime,
        result: SheetCloseResult,
    ) -> None:
        customer = posting.customer
        balance_change = round(posting.purchase_total - posting.received, 2)
        final_balance = round(posting.current_outstanding + balance_change, 2)

        logger.info(
            f"Creating financial records for customer {customer.name} ({customer.id}): "
            f"purchases {posting.purchase_total}, received {posting.received}"
        )

        if posting.purchase_total > 0:
            invoice_number = generate_unique_transaction_id("sale", customer.id, sheet.id)
            await self.storage.create_invoice(Invoice(
                id=generate_custom_id("INV", 12),
                invoice_number=invoice_number,
                customer_id=customer.id,
                customer_name=customer.name,
                items=posting.items,
                subtotal=posting.purchase_total,
                total_amount=posting.purchase_total,
                amount_received=posting.received,
                balance_change=balance_change,
                status=invoice_status(posting.purchase_total, posting.received),
                route_id=sheet.route_id,
                route_name=sheet.route_name or "No route",
                sheet_id=sheet.id,
                cash_amount=posting.payment.cash,
                upi_amount=posting.payment.upi,
                customer_final_balance=final_balance,
                date=now,
                created_at=now,
            ))
            await self.storage.create_transaction(Transaction(
                id=generate_custom_id("TXN", 12),
                customer_id=customer.id,
                customer_name=customer.name,
                type=TransactionType.SALE,
                items=posting.items,
                total_amount=posting.purchase_total,
                amount_received=0.0,
                balance_change=posting.purchase_total,
                invoice_number=invoice_number,
                route_id=sheet.route_id,
                route_name=sheet.route_name,
                sheet_id=sheet.id,
                date=now,
                created_at=now,
            ))
            result.invoice_numbers.append(invoice_number)

        if posting.received > 0:
            payment_id = generate_unique_transaction_id("payment", customer.id, sheet.id)
            await self.storage.create_transaction(Transaction(
                id=generate_custom_id("TXN", 12),
                customer_id=customer.id,
                customer_name=customer.name,
                type=TransactionType.PAYMENT,
                total_amount=0.0,
                amount_received=posting.received,
                balance_change=-posting.received,
                invoice_number=payment_id,
                cash_amount=posting.payment.cash,
                upi_amount=posting.payment.upi,
                route_id=sheet.route_id,
                route_name=sheet.route_name,
                sheet_id=sheet.id,
                date=now,
                created_at=now,
            ))
            result.payment_ids.append(payment_id)

        await self.storage.update_customer(customer.id, {"outstanding_amount": final_balance})
        result.customers_updated.append(customer.id)
        logger.debug(f"Customer {customer.id} outstanding {posting.current_outstanding} -> {final_balance}")


