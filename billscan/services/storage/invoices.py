"""
In-memory invoice store (for demo purposes).
In production, use a database (SQL, Cosmos DB, etc.)
"""
from datetime import datetime, UTC
from typing import Dict, Optional
import uuid
from .invoice_store_base import InvoiceStoreBase


class InMemoryInvoiceStore(InvoiceStoreBase):
    def __init__(self):
        self._invoices: Dict[str, dict] = {}

    def create_invoice(self, invoice_data: dict) -> str:
        """Store an accepted invoice and return its ID"""
        invoice_id = str(uuid.uuid4())
        self._invoices[invoice_id] = {
            "id": invoice_id,
            "invoice_data": invoice_data,
            "created_at": datetime.now(UTC).isoformat()
        }
        return invoice_id

    def get_invoice(self, invoice_id: str) -> Optional[dict]:
        """Get a stored invoice by ID"""
        return self._invoices.get(invoice_id)

    def list_all(self) -> list:
        """List all invoices, newest first"""
        # Insertion order is creation order
        return list(reversed(self._invoices.values()))

    def last_item_price(self, description: str) -> Optional[dict]:
        """Unit price of the item the last time it was stored"""
        for record in self.list_all():
            invoice = record["invoice_data"]
            for item in invoice.get("items", []):
                if item.get("description") == description:
                    return {
                        "unit_price": item.get("unit_price", 0.0),
                        "invoice_date": invoice.get("invoice_date"),
                        "vendor_name": invoice.get("vendor_name"),
                    }
        return None

    def clear(self) -> None:
        self._invoices.clear()
