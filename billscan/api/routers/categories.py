from fastapi import APIRouter
from ...services.invoice_types import TaxonomyCategory
from ...services.storage import taxonomy_store

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[TaxonomyCategory])
async def list_categories():
    """Current category taxonomy, sorted by name"""
    return taxonomy_store.list_categories()


@router.put("", response_model=list[TaxonomyCategory])
async def replace_categories(categories: list[TaxonomyCategory]):
    """Replace the whole taxonomy; subsequent scans classify items against it"""
    return taxonomy_store.replace(categories)
