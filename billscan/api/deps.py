
from pydantic import BaseModel
from ..services.invoice_types import ExtractedInvoice
from ..services.price_check import PriceChange

class ScanResponse(BaseModel):
    invoice: ExtractedInvoice
    confidence: float = 0.0  # OCR engine confidence, 0-1
    file_size_bytes: int = 0  # Size of the uploaded file

class PriceCheckResponse(BaseModel):
    changes: list[PriceChange] = []

class SaveInvoiceResponse(BaseModel):
    invoice_id: str
    warnings: list[str] = []
