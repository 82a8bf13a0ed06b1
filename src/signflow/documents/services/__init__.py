from .cleanup import ExpiryCleanupScheduler, CleanupReport, delete_expired_documents
from .document_service import DocumentService
from .hash_engine import HashEngine, hash_engine
from .qr_encoder import QrPayloadEncoder, build_validation_url, to_data_url, to_png_bytes
from .signer import PdfMetadataSigner, SignatureMaterial
from .validation_service import ValidationService, VerificationResult
from .batch_signing import (
    BatchSigningOrchestrator, BatchProgress, BatchSignResult, BatchSuccess, BatchFailure
)

__all__ = [
    'ExpiryCleanupScheduler', 'CleanupReport', 'delete_expired_documents',
    'DocumentService', 'HashEngine', 'hash_engine',
    'QrPayloadEncoder', 'build_validation_url', 'to_data_url', 'to_png_bytes',
    'PdfMetadataSigner', 'SignatureMaterial',
    'ValidationService', 'VerificationResult',
    'BatchSigningOrchestrator', 'BatchProgress', 'BatchSignResult', 'BatchSuccess', 'BatchFailure',
]
