
from pydantic import AliasChoices, BaseModel, Field, computed_field
from ..core.config import settings

class OcrResult(BaseModel):
    text: str = ""
    confidence: float = 0.0  # Mean word confidence, 0-1; display only
    file_size_bytes: int = 0

class Subcategory(BaseModel):
    name: str

class TaxonomyCategory(BaseModel):
    # Records from the storage layer say "name"; UI payloads sometimes say "category"
    name: str = Field(validation_alias=AliasChoices("name", "category", "categoryName"))
    subcategories: list[Subcategory] = []

class ExtractedLineItem(BaseModel):
    category: str = "Other"
    description: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0
    gst_rate: float = 0.0
    ambiguous: bool = False  # Quantity/price came from the two-number tie-break

    @computed_field
    @property
    def amount(self) -> float:
        return self.quantity * self.unit_price

class ExtractedInvoice(BaseModel):
    invoice_number: str
    invoice_number_synthesized: bool = False  # Placeholder number; reviewer must confirm
    invoice_date: str  # YYYY-MM-DD
    vendor_name: str = ""
    vendor_gstin: str = ""
    vendor_phone: str = ""
    vendor_address: str = ""
    items: list[ExtractedLineItem]
    subtotal: float = 0.0
    cgst: float = 0.0
    sgst: float = 0.0
    cess: float = 0.0
    total_amount: float = 0.0
    raw_text: str = ""  # Full OCR text, kept for audit
    items_subtotal: float = 0.0  # Sum of quantity x unit price over items
    declared_total: float = 0.0  # Grand total as printed on the invoice, 0 if not found

    @computed_field
    @property
    def has_total_mismatch(self) -> bool:
        if self.declared_total <= 0:
            return False
        expected = self.items_subtotal + self.cgst + self.sgst + self.cess
        return abs(self.declared_total - expected) > settings.total_mismatch_tolerance
