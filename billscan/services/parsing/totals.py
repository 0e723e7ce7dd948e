"""
Aggregate totals printed at the foot of an invoice: sub total, CGST, SGST,
CESS and the grand total. Each is optional and reads as 0.0 when absent.

Labels and their amounts must sit on the same line; OCR output of table
headers ("Item  Qty  Rate  Total") would otherwise pair a label with the
first number of the next row.
"""

import re
from dataclasses import dataclass
from loguru import logger
from .text_utils import AMOUNT, CURRENCY, compile_ci, to_amount

_H = r"[^\S\n]*"  # horizontal whitespace only
_COLON = _H + r"[:\-]?" + _H
_VALUE = CURRENCY + _H + "(" + AMOUNT + ")"

# "@ 9%", "@9", "9%" between a tax label and its amount
_INLINE_RATE = r"(?:" + _H + r"(?:@" + _H + r"\d+(?:\.\d+)?" + _H + r"%?|\d+(?:\.\d+)?" + _H + r"%))?"

SUBTOTAL_PATTERN = compile_ci(r"sub" + _H + r"-?" + _H + r"total" + _COLON + _VALUE)
CGST_PATTERN = compile_ci(r"cgst" + _INLINE_RATE + _COLON + _VALUE)
SGST_PATTERN = compile_ci(r"sgst" + _INLINE_RATE + _COLON + _VALUE)
CESS_PATTERN = compile_ci(r"cess" + _INLINE_RATE + _COLON + _VALUE)

# Grand total cascade, first positive amount wins
GRAND_TOTAL_PATTERNS = (
    compile_ci(r"(?:grand" + _H + r"total|total" + _H + r"(?:amount|amt)?)" + _COLON + _VALUE),
    compile_ci(r"^Total" + _H + "(" + AMOUNT + ")", re.MULTILINE),
    compile_ci(r"balance" + _COLON + _VALUE),
)

# Text before a "total" label that makes it a sub total ("Sub  Total", "Sub-Total")
SUB_LABEL_PREFIX = compile_ci(r"sub[\s\-]*$")


@dataclass
class InvoiceTotals:
    subtotal: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    cess: float = 0.0
    total: float = 0.0

    @property
    def gst(self) -> float:
        return self.cgst + self.sgst


def _amount(pattern: re.Pattern, text: str) -> float:
    match = pattern.search(text)
    return to_amount(match.group(1)) if match else 0.0


def _is_sub_total(text: str, match: re.Match) -> bool:
    line_start = text.rfind("\n", 0, match.start()) + 1
    return bool(SUB_LABEL_PREFIX.search(text[line_start:match.start()]))


def extract_grand_total(text: str) -> float:
    total = 0.0
    for pattern in GRAND_TOTAL_PATTERNS:
        match = next((m for m in pattern.finditer(text) if not _is_sub_total(text, m)), None)
        if match:
            total = to_amount(match.group(1))
            if total > 0:
                break
    return total


def extract_totals(text: str) -> InvoiceTotals:
    totals = InvoiceTotals(
        subtotal=_amount(SUBTOTAL_PATTERN, text),
        cgst=_amount(CGST_PATTERN, text),
        sgst=_amount(SGST_PATTERN, text),
        cess=_amount(CESS_PATTERN, text),
        total=extract_grand_total(text),
    )
    logger.debug(
        "Aggregate totals extracted",
        subtotal=totals.subtotal,
        cgst=totals.cgst,
        sgst=totals.sgst,
        cess=totals.cess,
        total=totals.total,
    )
    return totals
