from fastapi import APIRouter, UploadFile, File, HTTPException
from loguru import logger
from ..deps import PriceCheckResponse, SaveInvoiceResponse, ScanResponse
from ...core.config import settings
from ...core.exceptions import (
    InvoiceNotFoundError,
    OcrEngineError,
    OcrTextTooShortError,
    UploadRejectedError,
)
from ...models.invoice import (
    CategorizeRequest,
    CategorizeResponse,
    ParseRequest,
    PriceCheckRequest,
    ReviewedInvoice,
)
from ...services.events.event_publisher import InvoiceSavedEvent, get_event_publisher
from ...services.invoice_types import ExtractedInvoice
from ...services.ocr import recognize_text
from ...services.parsing import create_vendor_heuristics, match_category, parse_invoice_text
from ...services.price_check import find_price_changes
from ...services.review_rules import ReviewDecision, create_review_rules, items_total, valid_items
from ...services.storage import invoice_store, taxonomy_store
from ...services.uploads import check_ocr_text, check_upload

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post("/scan", response_model=ScanResponse)
async def scan(file: UploadFile = File(...)):
    """
    Scan an uploaded invoice image or PDF into an invoice candidate.

    Steps:
    1. Check MIME type and size (JPEG, PNG, WebP, GIF or PDF up to 10MB)
    2. OCR the file
    3. Reject OCR output too short to parse
    4. Parse the text against the current category taxonomy

    The result is meant for human review; nothing is stored.
    """
    content = await file.read()
    try:
        check_upload(file.content_type, len(content))
        ocr = recognize_text(content)
        text = check_ocr_text(ocr.text)
    except UploadRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OcrTextTooShortError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except OcrEngineError as e:
        raise HTTPException(status_code=502, detail=str(e))

    # Taxonomy is read fresh for every scan
    invoice = parse_invoice_text(
        text,
        taxonomy_store.list_categories(),
        heuristics=create_vendor_heuristics(),
    )
    logger.info(
        "Invoice scanned",
        filename=file.filename,
        confidence=ocr.confidence,
        items=len(invoice.items)
    )
    return ScanResponse(invoice=invoice, confidence=ocr.confidence, file_size_bytes=ocr.file_size_bytes)


@router.post("/parse", response_model=ExtractedInvoice)
async def parse(req: ParseRequest):
    """
    Parse OCR text that was recognized elsewhere.

    Uses the taxonomy in the request when given, otherwise the stored one.
    """
    taxonomy = req.taxonomy if req.taxonomy is not None else taxonomy_store.list_categories()
    return parse_invoice_text(req.text, taxonomy, heuristics=create_vendor_heuristics())


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(req: CategorizeRequest):
    """Re-categorize item descriptions after the reviewer edited them"""
    taxonomy = taxonomy_store.list_categories()
    return CategorizeResponse(
        categories=[match_category(description, taxonomy) for description in req.descriptions]
    )


@router.post("/validate", response_model=ReviewDecision)
async def validate(invoice: ReviewedInvoice):
    """
    Check a reviewed invoice before saving.

    Example response:
    {
        "accepted": true,
        "reason": "Accepted: 2 item(s), total 1155.00",
        "checks": {
            "invoice_number_present": true,
            "has_valid_item": true,
            "gst_rates_in_range": true,
            "totals_match": true
        },
        "warnings": [],
        "metadata": {...}
    }
    """
    return create_review_rules().evaluate(invoice)


@router.post("/price-check", response_model=PriceCheckResponse)
async def price_check(req: PriceCheckRequest):
    """Report unit prices that changed since the item was last bought"""
    changes = find_price_changes(req.items, invoice_store, tolerance=settings.price_change_tolerance)
    return PriceCheckResponse(changes=changes)


@router.post("", response_model=SaveInvoiceResponse, status_code=201)
async def create_invoice(invoice: ReviewedInvoice):
    """
    Store a reviewed invoice.

    Only valid items are stored. Invoices failing the acceptance checks are
    rejected with 400; total mismatches are returned as warnings.
    Each stored item is added to the category taxonomy.
    """
    decision = create_review_rules().evaluate(invoice)
    if not decision.accepted:
        raise HTTPException(status_code=400, detail=decision.reason)

    items = valid_items(invoice.items)
    subtotal, gst = items_total(items)
    data = invoice.model_dump()
    data["items"] = [item.model_dump() for item in items]
    data["subtotal"] = round(subtotal, 2)
    data["total_amount"] = round(subtotal + gst + invoice.cess, 2)

    invoice_id = invoice_store.create_invoice(data)

    # Reviewed descriptions extend the vocabulary later scans are matched against
    learned = sum(taxonomy_store.learn(item.category, item.description) for item in items)
    if learned:
        logger.info("Taxonomy extended from saved invoice", invoice_id=invoice_id, new_entries=learned)

    try:
        get_event_publisher().publish_invoice_saved(InvoiceSavedEvent(
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            vendor=invoice.vendor_name or "Unknown",
            invoice_date=invoice.invoice_date,
            item_count=len(items),
            total=data["total_amount"]
        ))
    except Exception as e:
        # Don't fail the save if event publishing fails
        logger.warning(f"Failed to publish event: {e}")

    return SaveInvoiceResponse(invoice_id=invoice_id, warnings=decision.warnings)


@router.get("")
async def list_invoices():
    """List stored invoices, newest first"""
    return {"invoices": invoice_store.list_all()}


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str):
    try:
        return invoice_store.require_invoice(invoice_id)
    except InvoiceNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
