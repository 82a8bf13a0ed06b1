"""The narrow storage interface consumed by the integrity services.

Combines the relational repository with the blob store so services only
depend on one injected object.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from signflow.documents.exceptions import PartialFailureError
from signflow.documents.models.document import Document
from signflow.documents.models.signing_event import SigningEvent
from signflow.documents.repositories.document_repository import DocumentRepository
from signflow.documents.repositories.file_store import FileStore

ORIGINAL_PDF = "original.pdf"
SIGNED_PDF = "signed.pdf"
QR_IMAGE = "qr.png"
SIGNATURE_IMAGE = "signature"

# Every artifact a document can own; the cleanup sweep removes exactly these
ARTIFACT_KEYS = (ORIGINAL_PDF, SIGNED_PDF, QR_IMAGE, SIGNATURE_IMAGE)


def artifact_key(document_id: str, name: str) -> str:
    return f"{document_id}/{name}"


class DocumentStore:

    def __init__(self, repository: DocumentRepository, file_store: FileStore):
        self.repository = repository
        self.file_store = file_store

    def create_pending(
        self,
        owner_id: str,
        original_name: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        validation_code: Optional[str] = None,
    ) -> Document:
        return self.repository.create_pending(owner_id, original_name, expires_at, validation_code)

    def attach_signed_artifact(
        self,
        document_id: str,
        sha256_hash: str,
        artifact_ref: str,
        qr_ref: Optional[str] = None,
        event: Optional[SigningEvent] = None,
    ) -> Document:
        """Atomically mark ``document_id`` signed with ``sha256_hash``.

        ``artifact_ref`` and ``qr_ref`` are file store keys; they are stored as
        public URLs.
        """
        qr_code_url = self.file_store.url_for(qr_ref) if qr_ref else None
        return self.repository.attach_signed_artifact(
            document_id,
            sha256_hash,
            self.file_store.url_for(artifact_ref),
            qr_code_url,
            event,
        )

    def get(self, document_id: str) -> Document:
        return self.repository.get(document_id)

    def list_expired(self, now: datetime) -> List[Document]:
        return self.repository.list_expired(now)

    def delete_expired(self, now: datetime) -> int:
        return self.repository.delete_expired(now)

    def delete_record(self, document_id: str) -> None:
        self.repository.delete_record(document_id)

    def set_expiry(self, document_id: str, expires_at: Optional[datetime]) -> Document:
        return self.repository.set_expiry(document_id, expires_at)

    def list_events(self, document_id: str) -> List[SigningEvent]:
        return self.repository.list_events(document_id)

    def put_artifact(self, document_id: str, name: str, data: bytes) -> str:
        return self.file_store.put(artifact_key(document_id, name), data)

    def read_artifact(self, document_id: str, name: str) -> bytes:
        return self.file_store.get(artifact_key(document_id, name))

    def delete_artifacts(self, document_id: str, names: Iterable[str] = ARTIFACT_KEYS) -> None:
        """Remove artifacts; missing objects are not errors.

        Raises:
            PartialFailureError: if some artifacts could not be removed
        """
        failed = self.file_store.delete([artifact_key(document_id, name) for name in names])
        if failed:
            raise PartialFailureError(document_id, failed)
