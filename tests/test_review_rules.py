"""
Unit tests for review_rules module.

Tests the acceptance checks applied to an invoice after human review.
"""

import pytest
from billscan.models.invoice import ReviewedInvoice, ReviewedLineItem
from billscan.services.review_rules import (
    InvoiceReviewRules,
    ReviewRulesConfig,
    create_review_rules,
    items_total,
    valid_items,
)


def make_invoice(**overrides) -> ReviewedInvoice:
    data = {
        "invoice_number": "1042",
        "invoice_date": "2026-03-05",
        "vendor_name": "Sharma Traders",
        "items": [
            {"category": "Grains", "description": "Rice (Basmati)", "quantity": 10, "unit_price": 80, "gst_rate": 5},
            {"category": "Oils", "description": "Cooking Oil", "quantity": 2, "unit_price": 150, "gst_rate": 5},
        ],
        "cgst": 27.5,
        "sgst": 27.5,
        "declared_total": 1155,
    }
    data.update(overrides)
    return ReviewedInvoice(**data)


class TestValidItems:
    def test_filters_incomplete_rows(self):
        items = [
            ReviewedLineItem(description="Rice", quantity=1, unit_price=80),
            ReviewedLineItem(description="  ", quantity=1, unit_price=80),
            ReviewedLineItem(description="Oil", quantity=0, unit_price=150),
            ReviewedLineItem(description="Sugar", quantity=1, unit_price=-5),
            ReviewedLineItem(description="Free sample", quantity=1, unit_price=0),
        ]
        assert [item.description for item in valid_items(items)] == ["Rice", "Free sample"]

    def test_items_total_applies_each_rate(self):
        items = [
            ReviewedLineItem(description="Rice", quantity=10, unit_price=80, gst_rate=5),
            ReviewedLineItem(description="Soap", quantity=1, unit_price=100, gst_rate=18),
        ]
        subtotal, gst = items_total(items)
        assert subtotal == 900
        assert gst == pytest.approx(58)


class TestInvoiceReviewRules:
    def test_complete_invoice_is_accepted(self):
        decision = InvoiceReviewRules().evaluate(make_invoice())

        assert decision.accepted is True
        assert decision.reason == "Accepted: 2 item(s), total 1155.00"
        assert all(decision.checks.values())
        assert decision.warnings == []
        assert decision.metadata["computed_total"] == 1155

    def test_missing_invoice_number(self):
        decision = InvoiceReviewRules().evaluate(make_invoice(invoice_number="  "))

        assert decision.accepted is False
        assert decision.checks["invoice_number_present"] is False
        assert decision.reason.startswith("Requires correction:")
        assert "Invoice number is required" in decision.reason

    def test_no_valid_items(self):
        invoice = make_invoice(items=[{"description": "", "quantity": 1, "unit_price": 10}])
        decision = InvoiceReviewRules().evaluate(invoice)

        assert decision.accepted is False
        assert decision.checks["has_valid_item"] is False
        assert decision.metadata["dropped_item_count"] == 1

    def test_gst_rate_out_of_range(self):
        invoice = make_invoice(items=[{"description": "Rice", "quantity": 1, "unit_price": 10, "gst_rate": 180}])
        decision = InvoiceReviewRules().evaluate(invoice)

        assert decision.accepted is False
        assert decision.checks["gst_rates_in_range"] is False

    def test_total_mismatch_is_a_warning_only(self):
        decision = InvoiceReviewRules().evaluate(make_invoice(declared_total=1500))

        assert decision.accepted is True
        assert decision.checks["totals_match"] is False
        assert decision.warnings == ["Items total 1155.00 differs from invoice total 1500.00"]

    def test_mismatch_within_tolerance(self):
        decision = InvoiceReviewRules(ReviewRulesConfig(total_mismatch_tolerance=5)).evaluate(
            make_invoice(declared_total=1159)
        )
        assert decision.checks["totals_match"] is True

    def test_no_declared_total_skips_comparison(self):
        decision = InvoiceReviewRules().evaluate(make_invoice(declared_total=0))
        assert decision.checks["totals_match"] is True

    def test_factory_overrides_settings(self):
        rules = create_review_rules(total_mismatch_tolerance=10)
        assert rules.config.total_mismatch_tolerance == 10


def test_parse_result_and_review_share_mismatch_tolerance(monkeypatch):
    from billscan.core.config import settings
    from billscan.services.invoice_types import ExtractedInvoice

    monkeypatch.setattr(settings, "total_mismatch_tolerance", 50.0)
    parsed = ExtractedInvoice(
        invoice_number="1042",
        invoice_date="2026-03-05",
        items=[],
        items_subtotal=1100,
        cgst=27.5,
        sgst=27.5,
        declared_total=1185,
    )
    decision = create_review_rules().evaluate(make_invoice(declared_total=1185))

    assert parsed.has_total_mismatch is False
    assert decision.checks["totals_match"] is True

    monkeypatch.setattr(settings, "total_mismatch_tolerance", 1.0)
    assert parsed.has_total_mismatch is True
    assert create_review_rules().evaluate(make_invoice(declared_total=1185)).checks["totals_match"] is False
