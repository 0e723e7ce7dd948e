"""
Checks applied around the OCR pass: what may be uploaded, and how much
recognized text is needed before the parser is worth running.
"""

from loguru import logger
from ..core.config import settings
from ..core.exceptions import OcrTextTooShortError, UploadRejectedError


def allowed_upload_types() -> list[str]:
    return settings.csv(settings.allowed_upload_types)


def check_upload(content_type: str | None, size: int) -> None:
    """Raise UploadRejectedError for unsupported types or files over the size limit."""
    allowed = allowed_upload_types()
    if (content_type or "").lower() not in allowed:
        logger.warning("Upload rejected: unsupported type", content_type=content_type)
        raise UploadRejectedError("Invalid file type. Supported: JPEG, PNG, WebP, GIF, PDF")

    if size > settings.max_upload_bytes:
        logger.warning("Upload rejected: too large", size=size, limit=settings.max_upload_bytes)
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise UploadRejectedError(f"File too large. Maximum size: {limit_mb}MB")

    if size == 0:
        raise UploadRejectedError("No file provided")


def check_ocr_text(text: str | None) -> str:
    """Return the OCR text if it is long enough to parse, else raise OcrTextTooShortError."""
    if not text or len(text.strip()) < settings.min_ocr_text_length:
        raise OcrTextTooShortError(
            "Could not extract text from the image. Please try a clearer image."
        )
    return text
