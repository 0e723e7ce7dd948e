"""
Line-item extraction from the item table of an OCR'd invoice.

The table is bounded by a header row (an "item"/"particular" column next to
"qty", "rate", "amount" or "total") and the first totals/footer line after it.
Without a header the whole document is scanned, which can pick up numeric
address or footer lines as items; the reviewer sees and removes those.

Each candidate line runs through ``ITEM_RULES`` in order until one yields an
item. A rule whose pattern matches but whose numbers do not add up hands the
line on to the next rule; any match uses up the pending name.
Short text-only lines are held as a pending name and prefixed to the next
item, since OCR often wraps long product names onto a line of their own.
"""

import re
from typing import Any, Callable, Iterable, NamedTuple
from loguru import logger
from ..invoice_types import ExtractedLineItem
from .categories import OTHER, match_category, normalize_taxonomy
from .text_utils import AMOUNT, QUANTITY, compile_ci, finite, round_half_up, to_amount
from .totals import InvoiceTotals

HEADER_NAME_TOKENS = ("item", "particular")
HEADER_COLUMN_TOKENS = ("qty", "rate", "amount", "total")

TABLE_END_PATTERNS = (
    compile_ci(r"^total\s*items"),
    compile_ci(r"^total\s*quantity"),
    compile_ci(r"^sub[\s\-]*total"),
    compile_ci(r"^\s*cgst"),
    compile_ci(r"^\s*sgst"),
    compile_ci(r"^grand\s*total"),
    compile_ci(r"^thank"),
)
BARE_TOTAL = compile_ci(r"^total\s")
TOTAL_WITH_NUMBER = compile_ci(r"^total\s+\d")

# Column headings and footer rows that are never items
ITEM_SKIP = compile_ci(
    r"^(?:s\.?no|sr|#|item|description|particular|hsn|qty|quantity|rate|amount|"
    r"total\s*items|total\s*qty|sub[\s\-]*total|grand|cgst|sgst|igst|cess|tax|net|gross|"
    r"discount|round|balance|thank|page|bill\s*to|bill\s*no|created|date|invoice|"
    r"receipt|address|phone|tel|mob|gst\s*num|billing)"
)

# Descriptions that are really totals rows read as "name qty amount"
TOTALS_LABEL = compile_ci(r"^(?:total|sub|grand|cgst|sgst|igst|cess|tax|balance|round)")

SERIAL_PREFIX = r"\d+[.)]\s*"

MULTI_DIGIT = re.compile(r"\d{2,}")
STARTS_WITH_LETTER = re.compile(r"^[a-zA-Z]")
MAX_PENDING_LINE = 40


class ItemCandidate(NamedTuple):
    description: str
    quantity: float
    unit_price: float
    ambiguous: bool = False


class ItemRule(NamedTuple):
    name: str
    pattern: re.Pattern
    build: Callable[[re.Match, str], ItemCandidate | None]
    needs_pending: bool = False


def _join(pending: str, name: str) -> str:
    return f"{pending} {name}".strip()


def _wide_columns(match: re.Match, pending: str) -> ItemCandidate | None:
    description = _join(pending, match.group(1))
    quantity = to_amount(match.group(2))
    rate = to_amount(match.group(3))
    if len(description) >= 2 and quantity > 0 and rate > 0:
        return ItemCandidate(description, quantity, rate)
    return None


def _consistent_columns(match: re.Match, pending: str) -> ItemCandidate | None:
    description = _join(pending, match.group(1))
    quantity = to_amount(match.group(2))
    rate = to_amount(match.group(3))
    total = to_amount(match.group(4))
    # 15% + 1 of slack for misread digits
    if len(description) >= 2 and quantity > 0 and rate > 0 and abs(quantity * rate - total) <= total * 0.15 + 1:
        return ItemCandidate(description, quantity, rate)
    return None


def _quantity_and_amount(match: re.Match, pending: str) -> ItemCandidate | None:
    description = _join(pending, match.group(1))
    first = to_amount(match.group(2))
    second = to_amount(match.group(3))
    if len(description) < 2 or first <= 0 or second <= 0 or TOTALS_LABEL.search(description):
        return None
    # Two numbers cannot say which is the price. A larger second number is
    # read as the line total; otherwise the pair is taken as quantity and price.
    if first < second:
        return ItemCandidate(description, first, round_half_up(second / first, 2), ambiguous=True)
    return ItemCandidate(description, first, second, ambiguous=True)


def _pending_name_numbers(match: re.Match, pending: str) -> ItemCandidate | None:
    quantity = to_amount(match.group(1))
    rate = to_amount(match.group(2))
    if len(pending) >= 2 and quantity > 0 and rate > 0:
        return ItemCandidate(pending, quantity, rate)
    return None


ITEM_RULES = (
    # Quantity, rate and total on a line of their own, below a wrapped name
    ItemRule(
        "pending_name_numbers",
        compile_ci(r"^(" + QUANTITY + r")\s+(" + AMOUNT + r")\s+(" + AMOUNT + r")\s*$"),
        _pending_name_numbers,
        needs_pending=True,
    ),
    ItemRule(
        "wide_columns",
        compile_ci(r"^(.+?)\s{2,}(" + QUANTITY + r")\s*[/\-]?\s*(" + AMOUNT + r")\s+(" + AMOUNT + r")\s*$"),
        _wide_columns,
    ),
    ItemRule(
        "consistent_columns",
        # Serial-numbered rows are left to the next rule so the "1." is dropped
        compile_ci(r"^(?!" + SERIAL_PREFIX + r")(.+?)\s+(" + QUANTITY + r")\s+(" + AMOUNT + r")\s+(" + AMOUNT + r")\s*$"),
        _consistent_columns,
    ),
    ItemRule(
        "serial_numbered",
        compile_ci(r"^" + SERIAL_PREFIX + r"(.+?)\s+(" + QUANTITY + r")\s+(" + AMOUNT + r")\s+(" + AMOUNT + r")\s*$"),
        _wide_columns,
    ),
    ItemRule(
        "quantity_and_amount",
        compile_ci(r"^(.+?)\s+(" + QUANTITY + r")\s+(" + AMOUNT + r")\s*$"),
        _quantity_and_amount,
    ),
)


def _is_header_row(line: str) -> bool:
    low = line.lower()
    return any(t in low for t in HEADER_NAME_TOKENS) and any(t in low for t in HEADER_COLUMN_TOKENS)


def _is_table_end(line: str) -> bool:
    low = line.lower()
    if any(p.search(low) for p in TABLE_END_PATTERNS):
        return True
    return bool(BARE_TOTAL.search(low)) and not TOTAL_WITH_NUMBER.search(low)


def find_item_region(lines: list[str]) -> list[str]:
    """Lines between the item-table header and the first footer line, or all lines."""
    start = -1
    end = len(lines)
    for index, line in enumerate(lines):
        if start > -1 and _is_table_end(line):
            end = index
            break
        if _is_header_row(line):
            start = index + 1

    if start == -1:
        logger.debug("No item table header found, scanning the whole document")
        return list(lines)
    return lines[start:end]


def extract_line_items(lines: list[str], taxonomy: Iterable[Any] | None = None) -> list[ExtractedLineItem]:
    """
    Parse item rows from the document lines. May return an empty list;
    ``fallback_line_item`` supplies the placeholder row in that case.
    """
    categories = normalize_taxonomy(taxonomy)
    items = []
    pending = ""

    for line in find_item_region(lines):
        line = line.strip()
        if ITEM_SKIP.search(line):
            continue

        consumed = False
        for rule in ITEM_RULES:
            if rule.needs_pending and not pending:
                continue
            match = rule.pattern.search(line)
            if not match:
                continue
            candidate = rule.build(match, pending)
            pending = ""
            if candidate is None:
                continue
            consumed = True
            logger.debug("Item row matched", rule=rule.name, description=candidate.description)
            items.append(
                ExtractedLineItem(
                    category=match_category(candidate.description, categories),
                    description=candidate.description,
                    quantity=finite(candidate.quantity),
                    unit_price=finite(candidate.unit_price),
                    gst_rate=0.0,
                    ambiguous=candidate.ambiguous,
                )
            )
            break

        if consumed:
            continue

        if not MULTI_DIGIT.search(line) and STARTS_WITH_LETTER.search(line) and len(line) < MAX_PENDING_LINE:
            pending = _join(pending, line)

    return items


def fallback_line_item(totals: InvoiceTotals, vendor_name: str) -> ExtractedLineItem:
    """Single row standing in for the whole invoice when no item row was recognized."""
    if totals.total > 0:
        base = totals.subtotal if totals.subtotal > 0 else totals.total
        gst_rate = 0.0
        if totals.subtotal > 0 and totals.total > totals.subtotal:
            gst_rate = round_half_up((totals.total - totals.subtotal) / totals.subtotal * 100)
        description = f"Purchase from {vendor_name}" if vendor_name else "Purchase (enter details manually)"
        return ExtractedLineItem(
            category=OTHER,
            description=description,
            quantity=1.0,
            unit_price=base,
            gst_rate=gst_rate,
        )

    return ExtractedLineItem(
        category=OTHER,
        description="Item (enter details manually)",
        quantity=1.0,
        unit_price=0.0,
        gst_rate=0.0,
    )


def infer_gst_rate(totals: InvoiceTotals) -> float | None:
    """One GST percentage for the whole invoice from (CGST + SGST) / sub total."""
    if totals.subtotal > 0 and totals.gst > 0:
        return round_half_up(totals.gst / totals.subtotal * 100)
    return None


def apply_uniform_gst_rate(items: list[ExtractedLineItem], totals: InvoiceTotals) -> list[ExtractedLineItem]:
    rate = infer_gst_rate(totals)
    if rate is None:
        return items
    for item in items:
        item.gst_rate = rate
    return items
