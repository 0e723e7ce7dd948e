from .invoices import InMemoryInvoiceStore
from .taxonomy import taxonomy_store

# Global instance (in production, use dependency injection)
invoice_store = InMemoryInvoiceStore()
