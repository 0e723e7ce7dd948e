
from loguru import logger
from azure.ai.documentintelligence import DocumentIntelligenceClient
from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import AzureError
from .invoice_types import OcrResult
from ..core.config import settings
from ..core.exceptions import OcrEngineError

MOCK_INVOICE_TEXT = """Sharma Traders
Shop 12, Market Road, Panjim 403001
GSTIN: 30ABCDE1234F1Z5
Phone: 9876543210
Invoice No: 1042
Invoice Date: 05/03/2026
Item  Qty  Rate  Amount
Rice (Basmati)  10  80  800
Cooking Oil  2  150  300
Sub Total: 1100
CGST @ 2.5%: 27.50
SGST @ 2.5%: 27.50
Grand Total: 1155
Thank you for your business"""


def _mean_word_confidence(result) -> float:
    confidences = [
        word.confidence
        for page in (getattr(result, "pages", None) or [])
        for word in (getattr(page, "words", None) or [])
        if getattr(word, "confidence", None) is not None
    ]
    if not confidences:
        return 0.0
    return sum(confidences) / len(confidences)


def recognize_text(file_bytes: bytes) -> OcrResult:
    """
    Run OCR over an uploaded invoice image or PDF.

    Uses Azure Document Intelligence when configured, otherwise returns a
    fixed sample invoice so the scan flow can be exercised locally.
    """
    if settings.az_di_endpoint and settings.az_di_api_key:
        logger.info(
            "Using Azure Document Intelligence for OCR",
            endpoint=settings.az_di_endpoint[:50] + "..." if len(settings.az_di_endpoint) > 50 else settings.az_di_endpoint,
            model=settings.ocr_model_id
        )

        try:
            client = DocumentIntelligenceClient(
                endpoint=settings.az_di_endpoint,
                credential=AzureKeyCredential(settings.az_di_api_key)
            )

            logger.info(f"Recognizing document of size {len(file_bytes)} bytes")

            poller = client.begin_analyze_document(
                settings.ocr_model_id,
                body=file_bytes,
                content_type="application/octet-stream"
            )
            result = poller.result()

            text = result.content if getattr(result, "content", None) else ""
            confidence = _mean_word_confidence(result)

            logger.info(
                "OCR complete",
                text_chars=len(text),
                confidence=confidence
            )

            return OcrResult(
                text=text,
                confidence=confidence,
                file_size_bytes=len(file_bytes)
            )

        except AzureError as e:
            logger.error(f"Azure DI recognition failed: {str(e)}")
            raise OcrEngineError(f"OCR failed: {str(e)}") from e

    else:
        logger.warning(
            "Azure Document Intelligence not configured - using MOCK OCR text. "
            "Set AZ_DI_ENDPOINT and AZ_DI_API_KEY to use real recognition."
        )

        text_len = len(file_bytes or b"")
        conf = 0.92 if text_len > 0 else 0.0

        logger.info(
            "Returning mock OCR result",
            file_size_bytes=text_len,
            confidence=conf
        )

        return OcrResult(
            text=MOCK_INVOICE_TEXT if text_len > 0 else "",
            confidence=conf,
            file_size_bytes=text_len
        )
