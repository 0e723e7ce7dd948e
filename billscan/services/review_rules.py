"""
Acceptance checks for an invoice after human review.

The parser never rejects input; this is where a reviewed invoice is judged
fit to store. Totals that disagree with the items are reported so the
reviewer can look again, but they are never corrected automatically.
"""

from loguru import logger
from typing import Dict, Any
from pydantic import BaseModel
from ..models.invoice import ReviewedInvoice, ReviewedLineItem


class ReviewDecision(BaseModel):
    """Result of the acceptance checks with explanation"""
    accepted: bool
    reason: str
    checks: Dict[str, bool]
    warnings: list[str] = []
    metadata: Dict[str, Any] = {}


class ReviewRulesConfig(BaseModel):
    """Configuration for review rules (loaded from environment)"""
    total_mismatch_tolerance: float = 1.0


def valid_items(items: list[ReviewedLineItem]) -> list[ReviewedLineItem]:
    """Items worth storing: a description, a positive quantity and a non-negative price."""
    return [
        item for item in items
        if item.description.strip() and item.quantity > 0 and item.unit_price >= 0
    ]


def items_total(items: list[ReviewedLineItem]) -> tuple[float, float]:
    """(subtotal, GST) over the given items, GST computed per item from its rate."""
    subtotal = sum(item.quantity * item.unit_price for item in items)
    gst = sum(item.quantity * item.unit_price * item.gst_rate / 100 for item in items)
    return subtotal, gst


class InvoiceReviewRules:
    """
    Decides whether a reviewed invoice can be stored.

    Blocking checks:
    - invoice number present
    - at least one valid item
    - every valid item has a GST rate between 0 and 100

    Non-blocking check (reported as a warning):
    - items subtotal plus GST and cess agrees with the printed grand total
    """

    def __init__(self, config: ReviewRulesConfig = None):
        self.config = config or ReviewRulesConfig()

    def evaluate(self, invoice: ReviewedInvoice) -> ReviewDecision:
        checks = {}
        reasons = []
        warnings = []

        number_ok = bool(invoice.invoice_number.strip())
        checks["invoice_number_present"] = number_ok
        if not number_ok:
            reasons.append("Invoice number is required")

        items = valid_items(invoice.items)
        items_ok = len(items) > 0
        checks["has_valid_item"] = items_ok
        if not items_ok:
            reasons.append("Please add at least one item with description and quantity")

        rates_ok = all(0 <= item.gst_rate <= 100 for item in items)
        checks["gst_rates_in_range"] = rates_ok
        if not rates_ok:
            reasons.append("GST rate must be between 0 and 100")

        subtotal, gst = items_total(items)
        computed_total = subtotal + gst + invoice.cess
        totals_ok = True
        if invoice.declared_total > 0:
            totals_ok = abs(computed_total - invoice.declared_total) <= self.config.total_mismatch_tolerance
            if not totals_ok:
                warnings.append(
                    f"Items total {computed_total:.2f} differs from invoice total {invoice.declared_total:.2f}"
                )
        checks["totals_match"] = totals_ok

        accepted = number_ok and items_ok and rates_ok

        if accepted:
            reason = f"Accepted: {len(items)} item(s), total {computed_total:.2f}"
        else:
            reason = "Requires correction: " + "; ".join(reasons)

        logger.info(
            "Invoice review decision",
            accepted=accepted,
            invoice_number=invoice.invoice_number,
            valid_items=len(items),
            checks=checks
        )

        return ReviewDecision(
            accepted=accepted,
            reason=reason,
            checks=checks,
            warnings=warnings,
            metadata={
                "valid_item_count": len(items),
                "dropped_item_count": len(invoice.items) - len(items),
                "items_subtotal": round(subtotal, 2),
                "items_gst": round(gst, 2),
                "computed_total": round(computed_total, 2),
                "declared_total": invoice.declared_total,
                "config": self.config.model_dump()
            }
        )


def create_review_rules(total_mismatch_tolerance: float = None) -> InvoiceReviewRules:
    """
    Factory function to create review rules with optional overrides.

    Uses environment variables as defaults, can be overridden per request.
    """
    from ..core.config import settings

    config = ReviewRulesConfig(
        total_mismatch_tolerance=total_mismatch_tolerance if total_mismatch_tolerance is not None else settings.total_mismatch_tolerance,
    )
    return InvoiceReviewRules(config)
