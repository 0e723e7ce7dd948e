"""
Domain exceptions raised by the services around the OCR parser.

The parser itself never raises; these cover the upload gate, the OCR
collaborator and the invoice store. The API layer maps them to HTTP errors.
"""


class BillscanError(Exception):
    """Base class for billscan service errors"""


class UploadRejectedError(BillscanError):
    """Uploaded file has an unsupported type or exceeds the size limit"""


class OcrTextTooShortError(BillscanError):
    """OCR returned too little text to be worth parsing"""


class OcrEngineError(BillscanError):
    """The OCR engine failed to recognize the document"""


class InvoiceNotFoundError(BillscanError):
    """No stored invoice with the requested ID"""
