from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, Dict, List, Optional, Type

from pydantic import ValidationError
from sqlalchemy import Integer, cast, delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from localretail.core.database import Base, build_engine, build_session_factory
from localretail.core.exceptions import BackendError, NotFoundError
from localretail.logger_config import logger
from localretail.models import (
    CompanySettingsRow,
    CustomerRow,
    InvoiceRow,
    ProductRow,
    RouteInfoRow,
    RouteSheetRow,
    TransactionRow,
)
from localretail.schemas.base import utc_now
from localretail.schemas.company import CompanySettings
from localretail.schemas.customer import Customer
from localretail.schemas.invoice import Invoice
from localretail.schemas.product import Product
from localretail.schemas.route import RouteInfo
from localretail.schemas.sheet import SheetRecord, SheetStatus
from localretail.schemas.transaction import Transaction, TransactionType
from localretail.storage.base import StorageGateway
from localretail.storage.mapping import changes_to_columns, record_to_columns, row_to_record


class SqlStorage(StorageGateway):
    """
    Gateway over a relational database (Postgres/Supabase in production,
    SQLite in development) through SQLAlchemy's asyncio extension.

    Each call runs in its own session and commits, unless it is made inside
    `atomic()`, in which case it joins the unit's session and is only flushed.
    """

    backend_name = "sql"

    def __init__(self, database_url: str, echo: bool = False, customer_id_start: int = 100000):
        self.engine = build_engine(database_url, echo=echo)
        self.session_factory = build_session_factory(self.engine)
        self.customer_id_start = customer_id_start
        self._unit_session: ContextVar[Optional[AsyncSession]] = ContextVar(
            f"sql_unit_session_{id(self)}", default=None
        )

    async def init(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info(f"Database schema ready on {self.engine.url.render_as_string(hide_password=True)}")
        except SQLAlchemyError as e:
            logger.error(f"Error initializing database: {str(e)}")
            raise BackendError("initialize database", e) from e

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def atomic(self):
        if self._unit_session.get() is not None:
            # nested unit joins the outer one
            yield
            return

        session = self.session_factory()
        token = self._unit_session.set(session)
        try:
            yield
        except Exception:
            await session.rollback()
            logger.warning("Unit of work rolled back")
            raise
        else:
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Error committing unit of work: {str(e)}")
                raise BackendError("commit unit of work", e) from e
        finally:
            self._unit_session.reset(token)
            await session.close()

    @asynccontextmanager
    async def _session(self, operation: str):
        unit_session = self._unit_session.get()
        try:
            if unit_session is not None:
                yield unit_session
                await unit_session.flush()
            else:
                async with self.session_factory() as session:
                    yield session
                    await session.commit()
        except (SQLAlchemyError, ValidationError) as e:
            logger.error(f"Database error during '{operation}': {str(e)}")
            raise BackendError(operation, e) from e

    # ==================== GENERIC HELPERS ====================

    async def _get(self, model, record_cls: Type, key_column, value, operation: str, for_update: bool = False):
        async with self._session(operation) as session:
            stmt = select(model).where(key_column == value)
            if for_update:
                # ignored by SQLite, row lock on Postgres
                stmt = stmt.with_for_update()
            row = (await session.execute(stmt)).scalar_one_or_none()
            return row_to_record(record_cls, row) if row is not None else None

    async def _list(self, model, record_cls: Type, operation: str, conditions=(), order_by=None) -> list:
        async with self._session(operation) as session:
            stmt = select(model)
            for condition in conditions:
                stmt = stmt.where(condition)
            if order_by is not None:
                stmt = stmt.order_by(order_by)
            rows = (await session.execute(stmt)).scalars().all()
            return [row_to_record(record_cls, row) for row in rows]

    async def _insert(self, model, record, operation: str):
        async with self._session(operation) as session:
            session.add(model(**record_to_columns(record, model)))
        logger.debug(f"{operation}: {getattr(record, 'id', '')}")
        return record

    async def _update(self, model, key_column, value, changes: Dict[str, Any], entity: str, operation: str) -> None:
        columns = changes_to_columns(changes, model)
        if "updated_at" in model.__table__.columns and "updated_at" not in columns:
            columns["updated_at"] = utc_now()
        async with self._session(operation) as session:
            result = await session.execute(update(model).where(key_column == value).values(**columns))
            if result.rowcount == 0:
                raise NotFoundError(entity, value)

    async def _delete(self, model, key_column, value, entity: str, operation: str) -> None:
        async with self._session(operation) as session:
            result = await session.execute(delete(model).where(key_column == value))
            if result.rowcount == 0:
                raise NotFoundError(entity, value)

    # ==================== CUSTOMERS ====================

    async def get_customer(self, customer_id: str, for_update: bool = False) -> Optional[Customer]:
        return await self._get(
            CustomerRow, Customer, CustomerRow.id, customer_id, "get customer", for_update=for_update
        )

    async def list_customers(self, route: Optional[str] = None, search: Optional[str] = None) -> List[Customer]:
        conditions = []
        if route:
            conditions.append(CustomerRow.route == route)
        if search:
            search_term = f"%{search}%"
            conditions.append(
                or_(
                    CustomerRow.name.ilike(search_term),
                    CustomerRow.phone.ilike(search_term),
                    CustomerRow.id.ilike(search_term),
                )
            )
        return await self._list(
            CustomerRow, Customer, "list customers", conditions, CustomerRow.created_at.asc()
        )

    async def create_customer(self, customer: Customer) -> Customer:
        return await self._insert(CustomerRow, customer, "create customer")

    async def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> None:
        await self._update(CustomerRow, CustomerRow.id, customer_id, changes, "Customer", "update customer")

    async def delete_customer(self, customer_id: str) -> None:
        await self._delete(CustomerRow, CustomerRow.id, customer_id, "Customer", "delete customer")

    async def next_customer_id(self) -> str:
        async with self._session("generate customer id") as session:
            current = (await session.execute(select(func.max(cast(CustomerRow.id, Integer))))).scalar()
        return str(max(current or 0, self.customer_id_start) + 1)

    # ==================== PRODUCTS ====================

    async def get_product(self, product_id: str) -> Optional[Product]:
        return await self._get(ProductRow, Product, ProductRow.id, product_id, "get product")

    async def list_products(self) -> List[Product]:
        return await self._list(ProductRow, Product, "list products", order_by=ProductRow.created_at.asc())

    async def create_product(self, product: Product) -> Product:
        return await self._insert(ProductRow, product, "create product")

    async def update_product(self, product_id: str, changes: Dict[str, Any]) -> None:
        await self._update(ProductRow, ProductRow.id, product_id, changes, "Product", "update product")

    async def delete_product(self, product_id: str) -> None:
        await self._delete(ProductRow, ProductRow.id, product_id, "Product", "delete product")

    # ==================== ROUTES ====================

    async def get_route(self, route_id: str) -> Optional[RouteInfo]:
        return await self._get(RouteInfoRow, RouteInfo, RouteInfoRow.id, route_id, "get route info")

    async def list_routes(self) -> List[RouteInfo]:
        return await self._list(
            RouteInfoRow, RouteInfo, "list route infos", order_by=RouteInfoRow.created_at.desc()
        )

    async def create_route(self, route: RouteInfo) -> RouteInfo:
        return await self._insert(RouteInfoRow, route, "save route info")

    async def update_route(self, route_id: str, changes: Dict[str, Any]) -> None:
        await self._update(RouteInfoRow, RouteInfoRow.id, route_id, changes, "Route", "update route info")

    async def delete_route(self, route_id: str) -> None:
        await self._delete(RouteInfoRow, RouteInfoRow.id, route_id, "Route", "delete route info")

    # ==================== SHEETS ====================

    async def get_sheet(self, sheet_id: str, for_update: bool = False) -> Optional[SheetRecord]:
        return await self._get(
            RouteSheetRow, SheetRecord, RouteSheetRow.id, sheet_id, "get sheet", for_update=for_update
        )

    async def list_sheets(
        self, route_id: Optional[str] = None, status: Optional[SheetStatus] = None
    ) -> List[SheetRecord]:
        conditions = []
        if route_id:
            conditions.append(RouteSheetRow.route_id == route_id)
        if status:
            conditions.append(RouteSheetRow.status == SheetStatus(status).value)
        return await self._list(
            RouteSheetRow, SheetRecord, "get sheet history", conditions, RouteSheetRow.created_at.desc()
        )

    async def create_sheet(self, sheet: SheetRecord) -> SheetRecord:
        return await self._insert(RouteSheetRow, sheet, "save sheet history")

    async def update_sheet(self, sheet_id: str, changes: Dict[str, Any]) -> None:
        await self._update(RouteSheetRow, RouteSheetRow.id, sheet_id, changes, "Sheet", "update sheet record")

    async def delete_sheet(self, sheet_id: str) -> None:
        await self._delete(RouteSheetRow, RouteSheetRow.id, sheet_id, "Sheet", "delete sheet record")

    # ==================== INVOICES ====================

    async def get_invoice(self, invoice_number: str) -> Optional[Invoice]:
        return await self._get(InvoiceRow, Invoice, InvoiceRow.invoice_number, invoice_number, "get invoice")

    async def list_invoices(
        self, customer_id: Optional[str] = None, sheet_id: Optional[str] = None
    ) -> List[Invoice]:
        conditions = []
        if customer_id:
            conditions.append(InvoiceRow.customer_id == customer_id)
        if sheet_id:
            conditions.append(InvoiceRow.sheet_id == sheet_id)
        return await self._list(InvoiceRow, Invoice, "get invoices", conditions, InvoiceRow.created_at.desc())

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        return await self._insert(InvoiceRow, invoice, "add invoice")

    # ==================== TRANSACTIONS ====================

    async def list_transactions(
        self,
        customer_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
        sheet_id: Optional[str] = None,
    ) -> List[Transaction]:
        conditions = []
        if customer_id:
            conditions.append(TransactionRow.customer_id == customer_id)
        if type:
            conditions.append(TransactionRow.type == TransactionType(type).value)
        if sheet_id:
            conditions.append(TransactionRow.sheet_id == sheet_id)
        return await self._list(
            TransactionRow, Transaction, "get transactions", conditions, TransactionRow.created_at.desc()
        )

    async def create_transaction(self, transaction: Transaction) -> Transaction:
        return await self._insert(TransactionRow, transaction, "add transaction")

    # ==================== COMPANY SETTINGS ====================

    async def get_company_settings(self) -> CompanySettings:
        async with self._session("get company settings") as session:
            stmt = select(CompanySettingsRow).order_by(CompanySettingsRow.updated_at.desc()).limit(1)
            row = (await session.execute(stmt)).scalar_one_or_none()
            if row is None:
                return CompanySettings()
            return row_to_record(CompanySettings, row)

    async def save_company_settings(self, company: CompanySettings) -> CompanySettings:
        company = company.model_copy(update={"updated_at": utc_now()})
        columns = record_to_columns(company, CompanySettingsRow)
        async with self._session("save company settings") as session:
            row = (await session.execute(select(CompanySettingsRow).limit(1))).scalar_one_or_none()
            if row is None:
                session.add(CompanySettingsRow(**columns))
            else:
                for key, value in columns.items():
                    setattr(row, key, value)
        return company
