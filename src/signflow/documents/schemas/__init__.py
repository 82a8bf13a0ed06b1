from .document_schemas import (
    ValidationPayload, QrRequest, QrResponse, DocumentResponse, UploadResponse,
    SignRequest, SignResponse, BatchSignRequest, BatchSignResponse,
    SigningEventView, PublicDocument, ValidationView, AccessCodeRequest,
    VerifyResponse, CleanupResponse
)

__all__ = [
    'ValidationPayload', 'QrRequest', 'QrResponse', 'DocumentResponse', 'UploadResponse',
    'SignRequest', 'SignResponse', 'BatchSignRequest', 'BatchSignResponse',
    'SigningEventView', 'PublicDocument', 'ValidationView', 'AccessCodeRequest',
    'VerifyResponse', 'CleanupResponse'
]
