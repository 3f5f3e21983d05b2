"""LocalRetail: route-delivery sales backend (customers, route sheets, invoices and ledger)."""

__version__ = "1.0.0"
