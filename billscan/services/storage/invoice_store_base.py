"""
Abstract base class for invoice store implementations.

Defines the interface the API and the price check rely on, so the
in-memory demo store can be swapped for a database-backed one.
"""

from abc import ABC, abstractmethod
from typing import Optional
from ...core.exceptions import InvoiceNotFoundError


class InvoiceStoreBase(ABC):
    """
    Abstract base class for storing reviewed invoices.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQL Server / PostgreSQL (for production)
    """

    @abstractmethod
    def create_invoice(self, invoice_data: dict) -> str:
        """
        Store a reviewed invoice and return its ID.

        Args:
            invoice_data: Dictionary of the accepted invoice (header fields and items)

        Returns:
            Invoice ID (unique identifier)
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[dict]:
        """
        Get a stored invoice by ID.

        Args:
            invoice_id: Unique invoice identifier

        Returns:
            Invoice dictionary with keys:
                - id: Invoice ID
                - invoice_data: The accepted invoice
                - created_at: ISO timestamp
            Returns None if not found.
        """
        pass

    @abstractmethod
    def list_all(self) -> list:
        """
        List all stored invoices, newest first.

        Returns:
            List of invoice dictionaries (same format as get_invoice)
        """
        pass

    @abstractmethod
    def last_item_price(self, description: str) -> Optional[dict]:
        """
        Most recently stored unit price for an item description.

        Args:
            description: Item description, matched exactly

        Returns:
            Dictionary with unit_price, invoice_date and vendor_name,
            or None if the item was never stored.
        """
        pass

    def require_invoice(self, invoice_id: str) -> dict:
        """Like get_invoice, but raises InvoiceNotFoundError for unknown IDs"""
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
        return invoice
