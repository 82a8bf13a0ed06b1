import hmac
from datetime import datetime
from enum import Enum
from typing import Optional

from signflow.documents.exceptions import AccessDeniedError
from signflow.documents.models.document import Document, DocumentStatus, utcnow
from signflow.documents.repositories.document_store import DocumentStore
from signflow.documents.schemas.document_schemas import (
    PublicDocument, SigningEventView, ValidationView
)
from signflow.documents.services.hash_engine import HashEngine, hash_engine as default_hash_engine


class VerificationResult(str, Enum):
    VALID = "valid"
    TAMPERED = "tampered"
    UNSIGNED = "unsigned"
    EXPIRED = "expired"


class ValidationService:
    """Read-only authenticity checks against the stored fingerprint.

    Outcomes are computed on every call and never written back, so the
    stored hash stays the single source of truth.
    """

    def __init__(self, store: DocumentStore, hash_engine: Optional[HashEngine] = None):
        self.store = store
        self.hash_engine = hash_engine or default_hash_engine

    def validate(
        self,
        document_id: str,
        candidate: Optional[bytes] = None,
        now: Optional[datetime] = None,
    ) -> VerificationResult:
        """
        Determine the authenticity status of ``document_id``.

        Without ``candidate`` bytes the answer relies on the stored status
        alone; callers needing cryptographic proof must supply the file.

        Raises:
            DocumentNotFoundError: unknown or purged document
        """
        document = self.store.get(document_id)

        if not document.hash:
            return VerificationResult.UNSIGNED

        # Artifacts of expired documents may already be purged
        if document.is_expired(now or utcnow()):
            return VerificationResult.EXPIRED

        if candidate is None:
            return VerificationResult.VALID

        if self.hash_engine.matches(document.hash, candidate):
            return VerificationResult.VALID
        return VerificationResult.TAMPERED

    def describe(
        self,
        document_id: str,
        access_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ValidationView:
        """
        Public view of a document for the validation page.

        Protected documents reveal nothing until the access code is supplied.

        Raises:
            DocumentNotFoundError: unknown or purged document
            AccessDeniedError: wrong access code
        """
        document = self.store.get(document_id)

        if document.protected:
            if access_code is None:
                return ValidationView(requires_code=True)
            if not _codes_match(access_code, document.validation_code):
                raise AccessDeniedError("Invalid validation code")

        events = [SigningEventView.model_validate(e) for e in self.store.list_events(document_id)]
        return ValidationView(
            requires_code=False,
            document=self._public_document(document, now or utcnow()),
            events=events,
        )

    @staticmethod
    def _public_document(document: Document, now: datetime) -> PublicDocument:
        expired = document.is_expired(now)
        status = DocumentStatus.EXPIRED if expired else document.status
        # Artifacts of expired documents may already be purged
        signed = document.status == DocumentStatus.SIGNED and not expired
        return PublicDocument(
            id=document.id,
            status=status.value,
            original_name=document.original_name,
            created_at=document.created_at,
            signed_at=document.signed_at,
            signed_pdf_url=document.signed_pdf_url if signed else None,
            qr_code_url=document.qr_code_url if signed else None,
            hash=document.hash,
        )


def _codes_match(supplied: str, expected: str) -> bool:
    return hmac.compare_digest(
        supplied.strip().upper().encode("utf-8"),
        expected.strip().upper().encode("utf-8"),
    )
