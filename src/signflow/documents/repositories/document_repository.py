import uuid
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from signflow.documents.exceptions import DocumentNotFoundError, StorageFailureError
from signflow.documents.models.document import Document, DocumentStatus, to_naive_utc, utcnow
from signflow.documents.models.signing_event import SigningEvent


class DocumentRepository:
    """Relational side of the document store.

    Every method opens and closes its own session so the repository can be
    shared by concurrent requests and by the worker threads of a batch.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def create_pending(
        self,
        owner_id: str,
        original_name: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        validation_code: Optional[str] = None,
    ) -> Document:
        document_id = str(uuid.uuid4())
        document = Document(
            id=document_id,
            owner_id=owner_id,
            original_name=original_name,
            status=DocumentStatus.PENDING,
            storage_path=f"{document_id}/",
            validation_code=validation_code or None,
            created_at=utcnow(),
            expires_at=to_naive_utc(expires_at),
        )
        with self._session_factory() as session:
            try:
                session.add(document)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageFailureError(f"Could not create document record: {e}") from e
            session.refresh(document)
        return document

    def attach_signed_artifact(
        self,
        document_id: str,
        sha256_hash: str,
        signed_pdf_url: str,
        qr_code_url: Optional[str] = None,
        event: Optional[SigningEvent] = None,
    ) -> Document:
        """Persist hash, artifact pointer and SIGNED status as one unit.

        The conditional UPDATE only matches a pending row without a hash, so a
        document is never signed twice and never left signed without a hash.
        """
        signed_at = utcnow()
        with self._session_factory() as session:
            try:
                result = session.execute(
                    update(Document)
                    .where(
                        Document.id == document_id,
                        Document.status == DocumentStatus.PENDING,
                        Document.hash.is_(None),
                    )
                    .values(
                        hash=sha256_hash,
                        signed_pdf_url=signed_pdf_url,
                        qr_code_url=qr_code_url,
                        status=DocumentStatus.SIGNED,
                        signed_at=signed_at,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    session.rollback()
                    if session.get(Document, document_id) is None:
                        raise DocumentNotFoundError(document_id)
                    raise StorageFailureError(f"Document {document_id} is not pending")

                if event is not None:
                    event.document_id = document_id
                    event.sha256_hash = sha256_hash
                    event.signed_at = signed_at
                    session.add(event)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageFailureError(f"Could not attach signed artifact to {document_id}: {e}") from e

            document = session.get(Document, document_id)
            session.refresh(document)
        return document

    def get(self, document_id: str) -> Document:
        with self._session_factory() as session:
            document = session.get(Document, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def list_expired(self, now: datetime) -> List[Document]:
        with self._session_factory() as session:
            return (
                session.query(Document)
                .filter(Document.expires_at.isnot(None), Document.expires_at < to_naive_utc(now))
                .order_by(Document.expires_at)
                .all()
            )

    def delete_expired(self, now: datetime) -> int:
        """Delete every record whose horizon is before ``now``; returns the row count."""
        cutoff = to_naive_utc(now)
        expired_ids = select(Document.id).where(Document.expires_at < cutoff)
        with self._session_factory() as session:
            try:
                session.execute(
                    delete(SigningEvent)
                    .where(SigningEvent.document_id.in_(expired_ids))
                    .execution_options(synchronize_session=False)
                )
                result = session.execute(
                    delete(Document)
                    .where(Document.expires_at < cutoff)
                    .execution_options(synchronize_session=False)
                )
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageFailureError(f"Could not delete expired documents: {e}") from e
        return result.rowcount

    def delete_record(self, document_id: str) -> None:
        with self._session_factory() as session:
            document = session.get(Document, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            try:
                session.delete(document)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageFailureError(f"Could not delete document {document_id}: {e}") from e

    def set_expiry(self, document_id: str, expires_at: Optional[datetime]) -> Document:
        with self._session_factory() as session:
            document = session.get(Document, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            document.expires_at = to_naive_utc(expires_at)
            session.commit()
            session.refresh(document)
        return document

    def list_events(self, document_id: str) -> List[SigningEvent]:
        with self._session_factory() as session:
            return (
                session.query(SigningEvent)
                .filter(SigningEvent.document_id == document_id)
                .order_by(SigningEvent.signed_at.asc())
                .all()
            )
