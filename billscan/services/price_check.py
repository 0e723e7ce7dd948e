"""
Price-change detection for reviewed items against previously stored invoices.
"""

from loguru import logger
from pydantic import BaseModel
from ..models.invoice import PriceCheckItem
from .storage.invoice_store_base import InvoiceStoreBase


class PriceChange(BaseModel):
    item_name: str
    old_price: float
    new_price: float
    last_date: str | None = None
    last_vendor: str = "-"
    change: float
    change_percent: float


def _round2(value: float) -> float:
    return round(value * 100) / 100


def find_price_changes(
    items: list[PriceCheckItem],
    store: InvoiceStoreBase,
    tolerance: float = 0.01,
) -> list[PriceChange]:
    """
    Compare each item's unit price with the last stored price for the same description.

    Items without a description or a positive price are ignored. A change is reported
    when the prices differ by more than ``tolerance``.
    """
    changes = []
    for item in items:
        if not item.description or not item.unit_price or item.unit_price <= 0:
            continue

        last = store.last_item_price(item.description)
        if last is None:
            continue

        old_price = last["unit_price"] or 0.0
        if abs(old_price - item.unit_price) <= tolerance:
            continue

        change = item.unit_price - old_price
        change_percent = change / old_price * 100 if old_price > 0 else 0.0
        changes.append(PriceChange(
            item_name=item.description,
            old_price=old_price,
            new_price=item.unit_price,
            last_date=last.get("invoice_date"),
            last_vendor=last.get("vendor_name") or "-",
            change=_round2(change),
            change_percent=_round2(change_percent),
        ))

    logger.info("Price check complete", checked=len(items), changes=len(changes))
    return changes
