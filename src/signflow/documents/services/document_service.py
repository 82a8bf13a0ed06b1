import io
import os
from datetime import datetime, timedelta
from typing import Optional

from PyPDF2 import PdfReader

from signflow.config import Config
from signflow.documents.exceptions import (
    AccessDeniedError, DocumentNotFoundError, InvalidInputError, StorageFailureError
)
from signflow.documents.models.document import Document, DocumentStatus, utcnow
from signflow.documents.repositories.document_store import ORIGINAL_PDF, DocumentStore
from signflow.logging import get_logger

logger = get_logger(__name__)


class DocumentService:

    @staticmethod
    def get_owned_document(store: DocumentStore, document_id: str, owner_id: str) -> Document:
        """
        Obtiene un documento del usuario; los documentos ajenos se reportan como inexistentes
        """
        document = store.get(document_id)
        if document.owner_id != owner_id:
            raise DocumentNotFoundError(document_id)
        return document

    @staticmethod
    def upload_document(
        store: DocumentStore,
        owner_id: str,
        file_contents: bytes,
        filename: str,
        content_type: str,
        expires_in_days: Optional[int] = None,
        validation_code: Optional[str] = None,
        max_file_size: int = Config.MAX_FILE_SIZE,
    ) -> Document:
        """
        Procesa y guarda un documento pendiente de firma:
        - Valida el archivo
        - Crea registro en BD
        - Guarda el original en el almacenamiento
        """
        DocumentService._validate_file(file_contents, filename, content_type, max_file_size)

        expires_at = None
        if expires_in_days is not None:
            if expires_in_days <= 0:
                raise InvalidInputError("expires_in_days must be positive")
            expires_at = utcnow() + timedelta(days=expires_in_days)

        document = store.create_pending(
            owner_id,
            original_name=os.path.basename(filename),
            expires_at=expires_at,
            validation_code=(validation_code or "").strip() or None,
        )
        try:
            store.put_artifact(document.id, ORIGINAL_PDF, file_contents)
        except StorageFailureError:
            store.delete_record(document.id)
            raise

        logger.info("Document %s uploaded by %s", document.id, owner_id)
        return document

    @staticmethod
    def _validate_file(file_contents: bytes, filename: str, content_type: str, max_file_size: int):
        """Valida el archivo subido"""

        if content_type != "application/pdf":
            raise InvalidInputError("El archivo debe ser un PDF")

        if not (filename or "").lower().endswith(".pdf"):
            raise InvalidInputError("La extensión debe ser .pdf")

        if not file_contents:
            raise InvalidInputError("El archivo está vacío")

        if len(file_contents) > max_file_size:
            raise InvalidInputError(f"El tamaño máximo es {max_file_size // (1024*1024)} MB")

        # Validar integridad del PDF
        try:
            reader = PdfReader(io.BytesIO(file_contents))
            _ = reader.pages
        except Exception as e:
            raise InvalidInputError("PDF inválido o dañado") from e

    @staticmethod
    def update_expiry(
        store: DocumentStore,
        document_id: str,
        owner_id: str,
        expires_at: Optional[datetime],
    ) -> Document:
        DocumentService.get_owned_document(store, document_id, owner_id)
        return store.set_expiry(document_id, expires_at)

    @staticmethod
    def delete_document(
        store: DocumentStore,
        document_id: str,
        owner_id: str,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Elimina un documento pendiente o expirado. Los documentos firmados vigentes no se eliminan.
        """
        document = DocumentService.get_owned_document(store, document_id, owner_id)

        if document.status == DocumentStatus.SIGNED and not document.is_expired(now):
            raise AccessDeniedError("Cannot delete signed documents")

        try:
            store.delete_artifacts(document_id)
        except StorageFailureError as e:
            logger.warning("Storage deletion failed for %s: %s", document_id, e)

        store.delete_record(document_id)
        logger.info("Document %s deleted by %s", document_id, owner_id)
