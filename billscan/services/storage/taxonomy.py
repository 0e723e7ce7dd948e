"""
In-memory category taxonomy (for demo purposes).

Supplies the category/subcategory vocabulary the parser classifies items
against. Categories and subcategories are kept sorted by name, which is the
order the parser's first-match rule sees them in.
"""
from ..invoice_types import Subcategory, TaxonomyCategory

DEMO_TAXONOMY = {
    "Dairy": ["Butter", "Milk"],
    "Grains": ["Rice (Basmati)", "Sugar", "Wheat Flour"],
    "Oils": ["Cooking Oil", "Mustard Oil"],
    "Packaging": ["Cardboard Boxes (12x12)", "Plastic Bags"],
    "Vegetables": ["Onion", "Potato"],
}


def _sorted(categories: list[TaxonomyCategory]) -> list[TaxonomyCategory]:
    return [
        TaxonomyCategory(
            name=category.name,
            subcategories=sorted(category.subcategories, key=lambda s: s.name.lower()),
        )
        for category in sorted(categories, key=lambda c: c.name.lower())
    ]


class TaxonomyStore:
    def __init__(self, seed: dict[str, list[str]] | None = None):
        self._categories: list[TaxonomyCategory] = []
        if seed:
            self.replace([
                TaxonomyCategory(name=name, subcategories=[Subcategory(name=s) for s in subs])
                for name, subs in seed.items()
            ])

    def list_categories(self) -> list[TaxonomyCategory]:
        """Current taxonomy, as a fresh copy"""
        return [category.model_copy(deep=True) for category in self._categories]

    def replace(self, categories: list[TaxonomyCategory]) -> list[TaxonomyCategory]:
        self._categories = _sorted(categories)
        return self.list_categories()

    def learn(self, category: str, description: str) -> bool:
        """
        Record a saved item's description as a subcategory of its category,
        creating the category if needed. Names compare case-insensitively.

        Returns:
            True if the taxonomy grew
        """
        category = (category or "").strip() or "Other"
        description = (description or "").strip()
        grew = False

        existing = next((c for c in self._categories if c.name.lower() == category.lower()), None)
        if existing is None:
            existing = TaxonomyCategory(name=category)
            self._categories.append(existing)
            grew = True

        if description and all(s.name.lower() != description.lower() for s in existing.subcategories):
            existing.subcategories.append(Subcategory(name=description))
            grew = True

        if grew:
            self._categories = _sorted(self._categories)
        return grew


# Global instance (in production, use dependency injection)
taxonomy_store = TaxonomyStore(seed=DEMO_TAXONOMY)
