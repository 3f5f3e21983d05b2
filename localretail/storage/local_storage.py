import asyncio
import copy
import json
import os
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Type

from pydantic import ValidationError

from localretail.core.exceptions import BackendError, NotFoundError
from localretail.logger_config import logger
from localretail.schemas.base import utc_now
from localretail.schemas.company import CompanySettings
from localretail.schemas.customer import Customer
from localretail.schemas.invoice import Invoice
from localretail.schemas.product import Product
from localretail.schemas.route import RouteInfo
from localretail.schemas.sheet import SheetRecord, SheetStatus
from localretail.schemas.transaction import Transaction, TransactionType
from localretail.storage.base import StorageGateway
from localretail.storage.mapping import merge_record, native_to_record, record_to_native

COMPANY_SETTINGS_KEY = "sales_app_company_settings"
CUSTOMER_COUNTER_KEY = "sales_app_customer_counter"


class _Namespace(NamedTuple):
    key: str
    record_cls: Type
    entity: str
    unique: Tuple[str, ...] = ("id",)


CUSTOMERS = _Namespace("sales_app_customers", Customer, "Customer")
PRODUCTS = _Namespace("sales_app_products", Product, "Product")
INVOICES = _Namespace("sales_app_invoices", Invoice, "Invoice", ("id", "invoice_number"))
TRANSACTIONS = _Namespace("sales_app_transactions", Transaction, "Transaction", ("id", "invoice_number"))
SHEETS = _Namespace("sales_app_sheets_history", SheetRecord, "Sheet")
ROUTES = _Namespace("sales_app_route_infos", RouteInfo, "Route")


def _newest_first(records: list) -> list:
    return sorted(records, key=lambda record: record.created_at, reverse=True)


class LocalStorage(StorageGateway):
    """
    On-device key/value store: one JSON document per namespace in a directory.

    Documents hold records in their native camelCase shape. Every write runs in
    a unit of work: `atomic()` holds the store-wide unit lock for the whole
    block, writes go to a per-task buffer that later reads in the block see,
    and the buffer is written to disk only when the block exits normally.
    Single writes outside a block open their own unit.
    """

    backend_name = "local"

    def __init__(self, path, customer_id_start: int = 100000):
        self.path = Path(path)
        self.customer_id_start = customer_id_start
        # _unit_lock serializes writers; _lock guards file I/O only
        self._unit_lock = asyncio.Lock()
        self._lock = asyncio.Lock()
        self._pending: ContextVar[Optional[Dict[str, Any]]] = ContextVar(
            f"local_pending_{id(self)}", default=None
        )

    async def init(self) -> None:
        try:
            await asyncio.to_thread(self.path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise BackendError("initialize local store", e) from e
        logger.info(f"Local store ready at {self.path}")

    @asynccontextmanager
    async def atomic(self):
        if self._pending.get() is not None:
            yield
            return

        async with self._unit_lock:
            pending: Dict[str, Any] = {}
            token = self._pending.set(pending)
            try:
                yield
            except Exception:
                logger.warning(f"Unit of work discarded ({len(pending)} pending document(s))")
                raise
            finally:
                self._pending.reset(token)
            if pending:
                await self._flush(pending, "commit unit of work")

    # ==================== FILE I/O ====================

    def _file(self, key: str) -> Path:
        return self.path / f"{key}.json"

    def _read_file(self, key: str) -> Any:
        file = self._file(key)
        if not file.exists():
            return None
        with open(file, "r", encoding="utf-8") as fh:
            return json.load(fh)

    def _write_files(self, documents: Dict[str, Any]) -> None:
        self.path.mkdir(parents=True, exist_ok=True)
        for key, value in documents.items():
            file = self._file(key)
            tmp = file.with_name(f"{file.name}.tmp")
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(value, fh, indent=2)
            os.replace(tmp, file)

    async def _read(self, key: str) -> Any:
        pending = self._pending.get()
        if pending is not None and key in pending:
            return copy.deepcopy(pending[key])
        try:
            async with self._lock:
                return await asyncio.to_thread(self._read_file, key)
        except (OSError, ValueError) as e:
            logger.error(f"Error reading '{key}' from local store: {str(e)}")
            raise BackendError(f"read {key}", e) from e

    async def _write(self, key: str, value: Any) -> None:
        async with self.atomic():
            self._pending.get()[key] = value

    async def _flush(self, documents: Dict[str, Any], operation: str) -> None:
        try:
            async with self._lock:
                await asyncio.to_thread(self._write_files, documents)
        except (OSError, TypeError) as e:
            logger.error(f"Error writing local store during '{operation}': {str(e)}")
            raise BackendError(operation, e) from e

    # ==================== GENERIC HELPERS ====================

    async def _load(self, namespace: _Namespace) -> list:
        raw = await self._read(namespace.key) or []
        try:
            return [native_to_record(namespace.record_cls, item) for item in raw]
        except ValidationError as e:
            logger.error(f"Corrupt record in '{namespace.key}': {str(e)}")
            raise BackendError(f"read {namespace.key}", e) from e

    async def _save(self, namespace: _Namespace, records: list) -> None:
        await self._write(namespace.key, [record_to_native(record) for record in records])

    async def _find(self, namespace: _Namespace, field: str, value: str):
        for record in await self._load(namespace):
            if getattr(record, field) == value:
                return record
        return None

    async def _filter(self, namespace: _Namespace, predicate: Callable[[Any], bool]) -> list:
        return [record for record in await self._load(namespace) if predicate(record)]

    # read-modify-write helpers run inside a unit so the document they load
    # cannot change before it is saved

    async def _insert(self, namespace: _Namespace, record):
        async with self.atomic():
            records = await self._load(namespace)
            for field in namespace.unique:
                value = getattr(record, field)
                if any(getattr(existing, field) == value for existing in records):
                    raise BackendError(
                        f"create {namespace.entity.lower()}",
                        ValueError(f"duplicate {field} '{value}' in {namespace.key}"),
                    )
            records.append(record)
            await self._save(namespace, records)
        logger.debug(f"Stored {namespace.entity.lower()} {record.id}")
        return record

    async def _update(self, namespace: _Namespace, record_id: str, changes: Dict[str, Any]) -> None:
        async with self.atomic():
            records = await self._load(namespace)
            for index, record in enumerate(records):
                if record.id == record_id:
                    changes = dict(changes)
                    if "updated_at" in namespace.record_cls.model_fields:
                        changes.setdefault("updated_at", utc_now())
                    try:
                        records[index] = merge_record(namespace.record_cls, record, changes)
                    except ValidationError as e:
                        raise BackendError(f"update {namespace.entity.lower()}", e) from e
                    await self._save(namespace, records)
                    return
            raise NotFoundError(namespace.entity, record_id)

    async def _delete(self, namespace: _Namespace, record_id: str) -> None:
        async with self.atomic():
            records = await self._load(namespace)
            remaining = [record for record in records if record.id != record_id]
            if len(remaining) == len(records):
                raise NotFoundError(namespace.entity, record_id)
            await self._save(namespace, remaining)

    # ==================== CUSTOMERS ====================

    async def get_customer(self, customer_id: str, for_update: bool = False) -> Optional[Customer]:
        return await self._find(CUSTOMERS, "id", customer_id)

    async def list_customers(self, route: Optional[str] = None, search: Optional[str] = None) -> List[Customer]:
        term = search.lower() if search else None

        def matches(customer: Customer) -> bool:
            if route and customer.route != route:
                return False
            if term and not any(term in value.lower() for value in (customer.name, customer.phone, customer.id)):
                return False
            return True

        return await self._filter(CUSTOMERS, matches)

    async def create_customer(self, customer: Customer) -> Customer:
        return await self._insert(CUSTOMERS, customer)

    async def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> None:
        await self._update(CUSTOMERS, customer_id, changes)

    async def delete_customer(self, customer_id: str) -> None:
        await self._delete(CUSTOMERS, customer_id)

    async def next_customer_id(self) -> str:
        async with self.atomic():
            current = await self._read(CUSTOMER_COUNTER_KEY)
            next_id = max(int(current or 0), self.customer_id_start) + 1
            await self._write(CUSTOMER_COUNTER_KEY, next_id)
        return str(next_id)

    # ==================== PRODUCTS ====================

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await self._find(PRODUCTS, "id", product_id)

    async def list_products(self) -> List[Product]:
        return await self._load(PRODUCTS)

    async def create_product(self, product: Product) -> Product:
        return await self._insert(PRODUCTS, product)

    async def update_product(self, product_id: str, changes: Dict[str, Any]) -> None:
        await self._update(PRODUCTS, product_id, changes)

    async def delete_product(self, product_id: str) -> None:
        await self._delete(PRODUCTS, product_id)

    # ==================== ROUTES ====================

    async def get_route(self, route_id: str) -> Optional[RouteInfo]:
        return await self._find(ROUTES, "id", route_id)

    async def list_routes(self) -> List[RouteInfo]:
        return _newest_first(await self._load(ROUTES))

    async def create_route(self, route: RouteInfo) -> RouteInfo:
        return await self._insert(ROUTES, route)

    async def update_route(self, route_id: str, changes: Dict[str, Any]) -> None:
        await self._update(ROUTES, route_id, changes)

    async def delete_route(self, route_id: str) -> None:
        await self._delete(ROUTES, route_id)

    # ==================== SHEETS ====================

    async def get_sheet(self, sheet_id: str, for_update: bool = False) -> Optional[SheetRecord]:
        return await self._find(SHEETS, "id", sheet_id)

    async def list_sheets(
        self, route_id: Optional[str] = None, status: Optional[SheetStatus] = None
    ) -> List[SheetRecord]:
        status = SheetStatus(status) if status else None
        sheets = await self._filter(
            SHEETS,
            lambda sheet: (not route_id or sheet.route_id == route_id) and (not status or sheet.status == status),
        )
        return _newest_first(sheets)

    async def create_sheet(self, sheet: SheetRecord) -> SheetRecord:
        return await self._insert(SHEETS, sheet)

    async def update_sheet(self, sheet_id: str, changes: Dict[str, Any]) -> None:
        await self._update(SHEETS, sheet_id, changes)

    async def delete_sheet(self, sheet_id: str) -> None:
        await self._delete(SHEETS, sheet_id)

    # ==================== INVOICES ====================

    async def get_invoice(self, invoice_number: str) -> Optional[Invoice]:
        return await self._find(INVOICES, "invoice_number", invoice_number)

    async def list_invoices(
        self, customer_id: Optional[str] = None, sheet_id: Optional[str] = None
    ) -> List[Invoice]:
        invoices = await self._filter(
            INVOICES,
            lambda invoice: (not customer_id or invoice.customer_id == customer_id)
            and (not sheet_id or invoice.sheet_id == sheet_id),
        )
        return _newest_first(invoices)

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        return await self._insert(INVOICES, invoice)

    # ==================== TRANSACTIONS ====================

    async def list_transactions(
        self,
        customer_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
        sheet_id: Optional[str] = None,
    ) -> List[Transaction]:
        type = TransactionType(type) if type else None
        transactions = await self._filter(
            TRANSACTIONS,
            lambda txn: (not customer_id or txn.customer_id == customer_id)
            and (not type or txn.type == type)
            and (not sheet_id or txn.sheet_id == sheet_id),
        )
        return _newest_first(transactions)

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        return await self._insert(TRANSACTIONS, transaction)

    # ==================== COMPANY SETTINGS ====================

    async def get_company_settings(self) -> CompanySettings:
        raw = await self._read(COMPANY_SETTINGS_KEY)
        if not raw:
            return CompanySettings()
        try:
            return native_to_record(CompanySettings, raw)
        except ValidationError as e:
            raise BackendError("get company settings", e) from e

    async def save_company_settings(self, company: CompanySettings) -> CompanySettings:
        company = company.model_copy(update={"updated_at": utc_now()})
        await self._write(COMPANY_SETTINGS_KEY, record_to_native(company))
        return company
