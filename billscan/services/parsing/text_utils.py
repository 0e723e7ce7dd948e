"""
Shared helpers for the OCR text parser: line segmentation and number handling.
"""

import math
import re

# Amounts as OCR prints them: optional thousands separators, up to 2 decimals
AMOUNT = r"\d[\d,]*(?:\.\d{1,2})?"
QUANTITY = r"\d+(?:\.\d+)?"

# Optional rupee prefix in front of an amount
CURRENCY = r"(?:₹|Rs\.?|INR)?"


def segment_lines(text: str) -> list[str]:
    """Split OCR text into trimmed, non-blank lines, keeping document order."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def to_amount(raw: str | None) -> float:
    """Parse an OCR number such as "1,250.50"; unparseable or non-finite values become 0.0."""
    if not raw:
        return 0.0
    try:
        value = float(raw.replace(",", ""))
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def round_half_up(value: float, places: int = 0) -> float:
    """Round halves away from zero for positive values (round() would use banker's rounding)."""
    if not math.isfinite(value):
        return 0.0
    factor = 10 ** places
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled) / factor


def finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def first_match(patterns, text: str):
    """Return the first match of the first pattern in ``patterns`` that matches ``text``."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def compile_ci(pattern: str, flags: int = 0) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE | flags)
