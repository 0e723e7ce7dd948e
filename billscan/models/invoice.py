
from pydantic import BaseModel, Field
from ..services.invoice_types import TaxonomyCategory

class ReviewedLineItem(BaseModel):
    category: str = Field(default="Other")
    description: str = Field(default="")
    quantity: float = Field(default=0.0)
    unit_price: float = Field(default=0.0)
    gst_rate: float = Field(default=0.0)

class ReviewedInvoice(BaseModel):
    """Invoice as corrected by the reviewer, before acceptance checks"""
    invoice_number: str = Field(default="")
    invoice_date: str = Field(default="")
    vendor_name: str | None = Field(default=None)
    vendor_gstin: str | None = Field(default=None)
    vendor_phone: str | None = Field(default=None)
    vendor_address: str | None = Field(default=None)
    items: list[ReviewedLineItem] = Field(default_factory=list)
    cgst: float = Field(default=0.0)
    sgst: float = Field(default=0.0)
    cess: float = Field(default=0.0)
    declared_total: float = Field(default=0.0)

class ParseRequest(BaseModel):
    text: str = Field(default="")
    taxonomy: list[TaxonomyCategory] | None = Field(default=None)

class CategorizeRequest(BaseModel):
    descriptions: list[str] = Field(default_factory=list)

class CategorizeResponse(BaseModel):
    categories: list[str]

class PriceCheckItem(BaseModel):
    description: str = Field(default="")
    unit_price: float | None = Field(default=None)

class PriceCheckRequest(BaseModel):
    items: list[PriceCheckItem]
