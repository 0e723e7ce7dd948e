"""
OCR invoice-text parser.

Turns the raw text of one scanned purchase invoice into an ``ExtractedInvoice``
for human review. Every stage has a fallback, so any input (including an empty
string) produces a complete result:

- invoice number: synthesized ``INV-<8 clock digits>`` placeholder
- invoice date: today
- vendor fields: empty strings
- items: one placeholder row built from the totals, or a zero-value row
- amounts: 0.0

The parser holds no state between calls; the taxonomy is passed in per call.
"""

from datetime import date
from typing import Any, Iterable
from loguru import logger
from ..invoice_types import ExtractedInvoice
from .categories import normalize_taxonomy
from .header_fields import (
    VendorHeuristics,
    extract_gstin,
    extract_invoice_number,
    extract_phone,
    extract_vendor_address,
    extract_vendor_name,
    synthesize_invoice_number,
    vendor_search_window,
)
from .dates import extract_invoice_date
from .line_items import apply_uniform_gst_rate, extract_line_items, fallback_line_item
from .text_utils import finite, segment_lines
from .totals import extract_totals


class InvoiceTextParser:
    """
    Heuristic parser for OCR text of Indian GST purchase invoices.

    Args:
        heuristics: Keyword lists for the positional vendor/address search
            (defaults to the built-in lists)
    """

    def __init__(self, heuristics: VendorHeuristics = None):
        self.heuristics = heuristics or VendorHeuristics()

    def parse(
        self,
        text: str,
        taxonomy: Iterable[Any] | None = None,
        today: date | None = None,
    ) -> ExtractedInvoice:
        """
        Parse OCR text into an invoice candidate.

        Args:
            text: Raw OCR output for one invoice image
            taxonomy: Categories with subcategories used to classify items;
                order decides ties
            today: Date used when no invoice date is found (default: today)

        Returns:
            ExtractedInvoice; never raises for malformed text
        """
        text = text or ""
        lines = segment_lines(text)
        categories = normalize_taxonomy(taxonomy)

        vendor_gstin = extract_gstin(text)
        vendor_phone = extract_phone(text)

        invoice_number = extract_invoice_number(text)
        number_synthesized = not invoice_number
        if number_synthesized:
            invoice_number = synthesize_invoice_number()

        window = vendor_search_window(lines, self.heuristics)
        vendor_name = extract_vendor_name(window, self.heuristics)
        vendor_address = extract_vendor_address(window, self.heuristics)

        invoice_date = extract_invoice_date(text, today=today)

        totals = extract_totals(text)
        items = extract_line_items(lines, categories)
        parsed_rows = len(items)
        apply_uniform_gst_rate(items, totals)
        if not items:
            items = [fallback_line_item(totals, vendor_name)]

        items_subtotal = finite(sum(item.quantity * item.unit_price for item in items))

        logger.info(
            "Parsed invoice text",
            text_chars=len(text),
            lines=len(lines),
            item_rows=parsed_rows,
            invoice_number_synthesized=number_synthesized,
            has_vendor=bool(vendor_name),
            declared_total=totals.total,
        )

        return ExtractedInvoice(
            invoice_number=invoice_number,
            invoice_number_synthesized=number_synthesized,
            invoice_date=invoice_date,
            vendor_name=vendor_name,
            vendor_gstin=vendor_gstin,
            vendor_phone=vendor_phone,
            vendor_address=vendor_address,
            items=items,
            subtotal=totals.subtotal or items_subtotal,
            cgst=totals.cgst,
            sgst=totals.sgst,
            cess=totals.cess,
            total_amount=totals.total or items_subtotal,
            raw_text=text,
            items_subtotal=items_subtotal,
            declared_total=totals.total,
        )


_default_parser = InvoiceTextParser()


def parse_invoice_text(
    text: str,
    taxonomy: Iterable[Any] | None = None,
    *,
    today: date | None = None,
    heuristics: VendorHeuristics | None = None,
) -> ExtractedInvoice:
    """Parse OCR text with the default heuristics (or the ones given)."""
    parser = InvoiceTextParser(heuristics) if heuristics is not None else _default_parser
    return parser.parse(text, taxonomy, today=today)
