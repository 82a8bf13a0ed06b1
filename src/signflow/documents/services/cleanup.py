from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from signflow.documents.exceptions import StorageFailureError
from signflow.documents.models.document import utcnow
from signflow.documents.repositories.document_store import ARTIFACT_KEYS, DocumentStore
from signflow.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    removed: int


class ExpiryCleanupScheduler:
    """Purges documents whose retention horizon has passed.

    Artifact removal is best effort: failures are logged and the record is
    deleted anyway, so an orphaned blob may remain but never a reachable
    record. Re-running a sweep after a crash is safe because missing
    artifacts are skipped.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def sweep(self, now: Optional[datetime] = None) -> CleanupReport:
        now = now or utcnow()

        expired = self.store.list_expired(now)
        for document in expired:
            try:
                self.store.delete_artifacts(document.id, ARTIFACT_KEYS)
            except StorageFailureError as e:
                logger.error("Error deleting artifacts of %s: %s", document.id, e)

        # Predicate re-evaluated: documents whose expiry moved since the listing are kept
        removed = self.store.delete_expired(now)
        if expired or removed:
            logger.info("Cleanup sweep removed %d expired document(s)", removed)
        return CleanupReport(removed=removed)


def delete_expired_documents(store: DocumentStore, now: Optional[datetime] = None) -> int:
    return ExpiryCleanupScheduler(store).sweep(now).removed
