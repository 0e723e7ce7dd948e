from .categories import match_category, normalize_taxonomy
from .header_fields import VendorHeuristics, create_vendor_heuristics
from .invoice_parser import InvoiceTextParser, parse_invoice_text

__all__ = [
    "InvoiceTextParser",
    "VendorHeuristics",
    "create_vendor_heuristics",
    "match_category",
    "normalize_taxonomy",
    "parse_invoice_text",
]
