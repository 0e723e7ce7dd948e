"""
Header field extraction: GSTIN, phone, invoice number, vendor name and address.

Vendor name and address are positional rather than labelled: they are looked
for in the lines above the invoice-number label. The keyword lists that decide
which of those lines are noise live in ``VendorHeuristics`` so they can be
extended from configuration without touching the matching code.
"""

import re
import time
from loguru import logger
from pydantic import BaseModel
from .text_utils import compile_ci

# 2 digits, 5 letters, 4 digits, letter, alphanumeric, letter, alphanumeric
GSTIN_PATTERN = compile_ci(r"([0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][0-9A-Z][A-Z][0-9A-Z])")

PHONE_PATTERN = compile_ci(
    r"(?:Ph(?:one)?|Tel|Mob(?:ile)?|Contact)?\s*[:\-]?\s*(?:\+91[\s\-]?)?([6-9]\d{9})"
)

# Tried in order: digit-leading numbers first, then any alphanumeric token
INVOICE_NUMBER_PATTERNS = (
    compile_ci(r"(?:Bill|Invoice|Receipt)\s*(?:#|No\.?|Num(?:ber)?)\s*[:\-]?\s*(\d[\w\-/.]*)"),
    compile_ci(r"(?:Bill|Invoice|Receipt)\s*(?:#|No\.?|Num(?:ber)?)\s*[:\-]?\s*([A-Z0-9][\w\-/.]+)"),
)

INVOICE_LABEL_PATTERN = compile_ci(r"(?:bill|invoice|receipt)\s*(?:#|no\.?|num)")

NEVER = re.compile(r"(?!)")

DIGITS_ONLY = re.compile(r"^\d+$")
GSTIN_PREFIX = re.compile(r"^[0-9]{2}[A-Z]{5}")
MOBILE_ONLY = re.compile(r"^[6-9]\d{9}$")
PIN_CODE = re.compile(r"\d{6}")
TRAILING_DIGITS = re.compile(r"\s*\d{4,}$")
AFTER_PIPE = re.compile(r"[|].*$")
NON_LETTERS = re.compile(r"[^a-zA-Z\s]")

DEFAULT_STOP_WORDS = (
    "tax", "invoice", r"bill\s*to", r"bill\s*no", "receipt", "date", "gst", "gstin",
    r"no\.?", "ref", "created", "phone", "tel", "mob", "fax", "email", "address",
    "billing", "ship", "hsn", "sac", r"s\.?no", "item", "description", "particular",
    "qty", "quantity", "rate", "amount", "total", "sub", "grand", "cgst", "sgst",
    "igst", "cess", "discount", "net", "gross", "round", "balance", "thank", "page",
    "www", "http",
)

DEFAULT_VENDOR_NOISE = ("volant", "panjim", "goa", "mumbai", "delhi", "address")

DEFAULT_CITY_TOKENS = (
    "goa", "mumbai", "delhi", "pune", "bangalore", "chennai", "kolkata", "hyderabad",
)


class VendorHeuristics(BaseModel):
    """Keyword data for the positional vendor/address search."""
    stop_words: tuple[str, ...] = DEFAULT_STOP_WORDS  # Regex fragments, matched as line prefixes
    vendor_noise: tuple[str, ...] = DEFAULT_VENDOR_NOISE  # Address-ish line starts that are never the vendor
    city_tokens: tuple[str, ...] = DEFAULT_CITY_TOKENS  # Mark a line as the address
    fallback_window: int = 6  # Lines searched when no invoice-number label is found

    model_config = {"frozen": True}

    def stop_pattern(self) -> re.Pattern:
        if not self.stop_words:
            return NEVER
        return compile_ci(r"^(?:" + "|".join(self.stop_words) + ")")

    def noise_pattern(self) -> re.Pattern:
        if not self.vendor_noise:
            return NEVER
        return compile_ci(r"^(?:" + "|".join(re.escape(t) for t in self.vendor_noise) + ")")

    def city_pattern(self) -> re.Pattern:
        if not self.city_tokens:
            return NEVER
        return compile_ci("|".join(re.escape(t) for t in self.city_tokens))


def create_vendor_heuristics(extra_stop_words=None, extra_city_tokens=None) -> VendorHeuristics:
    """
    Build heuristics from the defaults plus configured extensions.

    Extra city tokens are treated both as address markers and as vendor noise.
    """
    from ...core.config import settings

    if extra_stop_words is None:
        extra_stop_words = settings.csv(settings.vendor_extra_stop_words)
    if extra_city_tokens is None:
        extra_city_tokens = settings.csv(settings.vendor_extra_city_tokens)

    return VendorHeuristics(
        stop_words=DEFAULT_STOP_WORDS + tuple(re.escape(w.lower()) for w in extra_stop_words),
        vendor_noise=DEFAULT_VENDOR_NOISE + tuple(t.lower() for t in extra_city_tokens),
        city_tokens=DEFAULT_CITY_TOKENS + tuple(t.lower() for t in extra_city_tokens),
    )


def extract_gstin(text: str) -> str:
    match = GSTIN_PATTERN.search(text)
    return match.group(1).upper() if match else ""


def extract_phone(text: str) -> str:
    match = PHONE_PATTERN.search(text)
    return match.group(1) if match else ""


def extract_invoice_number(text: str) -> str:
    """Labelled invoice/bill/receipt number, or "" when no label pattern matches."""
    for pattern in INVOICE_NUMBER_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1).strip()
    return ""


def synthesize_invoice_number(now_ms: int | None = None) -> str:
    """Placeholder number from the clock; the reviewer is expected to replace it."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"INV-{str(now_ms)[-8:]}"


def find_invoice_label_line(lines: list[str]) -> int:
    for index, line in enumerate(lines):
        if INVOICE_LABEL_PATTERN.search(line):
            return index
    return -1


def vendor_search_window(lines: list[str], heuristics: VendorHeuristics) -> list[str]:
    """Lines above the invoice-number label, or the first few lines if there is none."""
    label_index = find_invoice_label_line(lines)
    if label_index > 0:
        return lines[:label_index]
    return lines[:heuristics.fallback_window]


def _is_vendor_candidate(line: str, clean: str, stop: re.Pattern, noise: re.Pattern) -> bool:
    return (
        len(clean) >= 3
        and not stop.search(clean)
        and not DIGITS_ONLY.search(line)
        and not GSTIN_PREFIX.search(line)
        and not MOBILE_ONLY.search(re.sub(r"\D", "", line))
        and not noise.search(clean)
        and not PIN_CODE.search(line)
    )


def extract_vendor_name(window: list[str], heuristics: VendorHeuristics) -> str:
    stop = heuristics.stop_pattern()
    noise = heuristics.noise_pattern()

    for line in window:
        clean = NON_LETTERS.sub("", line).strip()
        if not _is_vendor_candidate(line, clean, stop, noise):
            continue
        name = AFTER_PIPE.sub("", line).strip()
        name = TRAILING_DIGITS.sub("", name).strip()
        if len(name) >= 2:
            logger.debug("Vendor name candidate accepted", vendor=name)
            return name
    return ""


def extract_vendor_address(window: list[str], heuristics: VendorHeuristics) -> str:
    city = heuristics.city_pattern()
    for line in window:
        if PIN_CODE.search(line) or city.search(line):
            return line.strip()
    return ""
