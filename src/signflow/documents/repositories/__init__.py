from .document_repository import DocumentRepository
from .file_store import FileStore, LocalFileStore
from .document_store import (
    DocumentStore, ARTIFACT_KEYS, ORIGINAL_PDF, SIGNED_PDF, QR_IMAGE, SIGNATURE_IMAGE
)

__all__ = [
    'DocumentRepository', 'FileStore', 'LocalFileStore', 'DocumentStore',
    'ARTIFACT_KEYS', 'ORIGINAL_PDF', 'SIGNED_PDF', 'QR_IMAGE', 'SIGNATURE_IMAGE'
]
