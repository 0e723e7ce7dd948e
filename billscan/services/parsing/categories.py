"""
Soft matching of free-text item descriptions against the caller's taxonomy.

A description belongs to the first category (in taxonomy order) that has a
subcategory whose name equals it, contains it, or is contained by it,
ignoring case. Names that only differ in word order or punctuation, such as
"Rice (Basmati)" and "Basmati Rice 5kg", also match when every word of one
appears in the other. There is no edit-distance matching.
"""

import re
from typing import Any, Iterable
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from ..invoice_types import TaxonomyCategory

OTHER = "Other"

_category_adapter = TypeAdapter(TaxonomyCategory)
_WORD = re.compile(r"[a-z0-9]+")


def normalize_taxonomy(taxonomy: Iterable[Any] | None) -> list[TaxonomyCategory]:
    """Validate taxonomy records, dropping any that are malformed."""
    categories = []
    for entry in taxonomy or ():
        if isinstance(entry, TaxonomyCategory):
            categories.append(entry)
            continue
        try:
            categories.append(_category_adapter.validate_python(entry))
        except ValidationError as e:
            logger.warning("Skipping malformed taxonomy entry", error_count=e.error_count())
    return categories


def _words(text: str) -> set[str]:
    return set(_WORD.findall(text))


def _names_match(description: str, subcategory: str) -> bool:
    if subcategory == description or subcategory in description or description in subcategory:
        return True
    sub_words = _words(subcategory)
    desc_words = _words(description)
    if not sub_words or not desc_words:
        return False
    return sub_words <= desc_words or desc_words <= sub_words


def match_category(description: str, taxonomy: Iterable[Any] | None) -> str:
    name = (description or "").lower().strip()
    if not name:
        return OTHER

    for category in normalize_taxonomy(taxonomy):
        for subcategory in category.subcategories:
            sub_name = subcategory.name.lower().strip()
            if sub_name and _names_match(name, sub_name):
                return category.name
    return OTHER
