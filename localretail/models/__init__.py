# localretail/models/__init__.py
from .customer import CustomerRow
from .product import ProductRow
from .invoice import InvoiceRow
from .transaction import TransactionRow
from .route_sheet import RouteSheetRow
from .route_info import RouteInfoRow
from .company_settings import CompanySettingsRow
