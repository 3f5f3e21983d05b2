"""
Persistence gateway contract.

Services depend only on this interface; the concrete backend (SQL database or
local JSON store) is chosen once at startup and injected.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any, Dict, List, Optional

from localretail.schemas.company import CompanySettings
from localretail.schemas.customer import Customer
from localretail.schemas.invoice import Invoice
from localretail.schemas.product import Product
from localretail.schemas.route import RouteInfo
from localretail.schemas.sheet import SheetRecord, SheetStatus
from localretail.schemas.transaction import Transaction, TransactionType


class StorageGateway(ABC):
    """
    Async CRUD over every entity type.

    `get_*` returns None when the record is absent. `update_*` and `delete_*`
    raise NotFoundError for a missing id. Any infrastructural failure is raised
    as BackendError carrying the operation name and the underlying cause.
    """

    backend_name: str = "abstract"

    async def init(self) -> None:
        """Prepare the backend (create tables / directories)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """
        Unit of work: writes made inside the block are committed together when
        it exits normally and discarded when it raises.
        """

    # ==================== CUSTOMERS ====================

    @abstractmethod
    async def get_customer(self, customer_id: str, for_update: bool = False) -> Optional[Customer]:
        ...

    @abstractmethod
    async def list_customers(self, route: Optional[str] = None, search: Optional[str] = None) -> List[Customer]:
        ...

    @abstractmethod
    async def create_customer(self, customer: Customer) -> Customer:
        ...

    @abstractmethod
    async def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete_customer(self, customer_id: str) -> None:
        ...

    @abstractmethod
    async def next_customer_id(self) -> str:
        """Next sequential 6-digit customer id."""

    # ==================== PRODUCTS ====================

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    async def list_products(self) -> List[Product]:
        ...

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        ...

    @abstractmethod
    async def update_product(self, product_id: str, changes: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete_product(self, product_id: str) -> None:
        ...

    # ==================== ROUTES ====================

    @abstractmethod
    async def get_route(self, route_id: str) -> Optional[RouteInfo]:
        ...

    @abstractmethod
    async def list_routes(self) -> List[RouteInfo]:
        ...

    @abstractmethod
    async def create_route(self, route: RouteInfo) -> RouteInfo:
        ...

    @abstractmethod
    async def update_route(self, route_id: str, changes: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete_route(self, route_id: str) -> None:
        ...

    # ==================== SHEETS ====================

    @abstractmethod
    async def get_sheet(self, sheet_id: str, for_update: bool = False) -> Optional[SheetRecord]:
        ...

    @abstractmethod
    async def list_sheets(
        self, route_id: Optional[str] = None, status: Optional[SheetStatus] = None
    ) -> List[SheetRecord]:
        ...

    @abstractmethod
    async def create_sheet(self, sheet: SheetRecord) -> SheetRecord:
        ...

    @abstractmethod
    async def update_sheet(self, sheet_id: str, changes: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete_sheet(self, sheet_id: str) -> None:
        ...

    # ==================== INVOICES ====================

    @abstractmethod
    async def get_invoice(self, invoice_number: str) -> Optional[Invoice]:
        ...

    @abstractmethod
    async def list_invoices(
        self, customer_id: Optional[str] = None, sheet_id: Optional[str] = None
    ) -> List[Invoice]:
        ...

    @abstractmethod
    async def create_invoice(self, invoice: Invoice) -> Invoice:
        ...

    # ==================== TRANSACTIONS ====================

    @abstractmethod
    async def list_transactions(
        self,
        customer_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
        sheet_id: Optional[str] = None,
    ) -> List[Transaction]:
        ...

    @abstractmethod
    async def create_transaction(self, transaction: Transaction) -> Transaction:
        ...

    # ==================== COMPANY SETTINGS ====================

    @abstractmethod
    async def get_company_settings(self) -> CompanySettings:
        ...

    @abstractmethod
    async def save_company_settings(self, company: CompanySettings) -> CompanySettings:
        ...
