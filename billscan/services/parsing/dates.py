"""
Invoice date extraction.

Labelled dates ("Invoice Date: 05/03/2026", "Date 5 Mar 2026") are tried
first; only if none yields a real calendar date are unlabelled numeric dates
considered. Day-month-year order is assumed for slash dates, as printed on
Indian invoices. Output is always YYYY-MM-DD.
"""

from datetime import date
from loguru import logger
from .text_utils import compile_ci

MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_LABEL = r"(?:Created\s*On|Invoice\s*Date|Bill\s*Date|Date)\s*[:\-]?\s*"
_SEP = r"\s*[/\-.]\s*"

LABELLED_NUMERIC = compile_ci(_LABEL + r"(\d{1,2})" + _SEP + r"(\d{1,2})" + _SEP + r"(\d{2,4})")
LABELLED_MONTH_NAME = compile_ci(
    _LABEL + r"(\d{1,2})\s+(" + "|".join(MONTHS) + r")\w*\s+(\d{2,4})"
)

# (?<!\d) keeps "2025-11-30" from being read as 25-11-30
UNLABELLED_DMY_LONG = compile_ci(r"(?<!\d)(\d{1,2})" + _SEP + r"(\d{1,2})" + _SEP + r"(\d{4})")
UNLABELLED_DMY_SHORT = compile_ci(r"(?<!\d)(\d{1,2})" + _SEP + r"(\d{1,2})" + _SEP + r"(\d{2})\b")
UNLABELLED_ISO = compile_ci(r"(\d{4})\s*-\s*(\d{1,2})\s*-\s*(\d{1,2})")


def _full_year(year: int) -> int:
    return year + 2000 if year < 100 else year


def _calendar_date(year: int, month: int, day: int) -> date | None:
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    try:
        return date(year, month, day)
    except ValueError:
        # 31/02 and friends
        return None


def _from_day_month_year(match) -> date | None:
    day, month, year = match.groups()
    return _calendar_date(_full_year(int(year)), int(month), int(day))


def _from_day_month_name(match) -> date | None:
    day, month_name, year = match.groups()
    month = MONTHS.index(month_name[:3].lower()) + 1
    full_year = _full_year(int(year))
    if full_year <= 2000:
        return None
    return _calendar_date(full_year, month, int(day))


def _from_year_month_day(match) -> date | None:
    year, month, day = match.groups()
    return _calendar_date(int(year), int(month), int(day))


# (pattern, converter) pairs; first converter to return a date wins
LABELLED_DATE_RULES = (
    (LABELLED_NUMERIC, _from_day_month_year),
    (LABELLED_MONTH_NAME, _from_day_month_name),
)

UNLABELLED_DATE_RULES = (
    (UNLABELLED_DMY_LONG, _from_day_month_year),
    (UNLABELLED_DMY_SHORT, _from_day_month_year),
    (UNLABELLED_ISO, _from_year_month_day),
)


def _first_valid_date(text: str, rules) -> date | None:
    for pattern, convert in rules:
        match = pattern.search(text)
        if not match:
            continue
        try:
            found = convert(match)
        except (ValueError, OverflowError):
            found = None
        if found:
            return found
    return None


def extract_invoice_date(text: str, today: date | None = None) -> str:
    """Invoice date as YYYY-MM-DD, falling back to ``today`` when nothing parses."""
    found = _first_valid_date(text, LABELLED_DATE_RULES)
    if found is None:
        found = _first_valid_date(text, UNLABELLED_DATE_RULES)
    if found is None:
        logger.debug("No invoice date found, defaulting to today")
        found = today or date.today()
    return found.isoformat()
