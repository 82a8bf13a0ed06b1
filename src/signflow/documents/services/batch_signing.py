"""Concurrent signing of several documents with per-item outcomes.

Each document runs through the same pipeline (load, sign, fingerprint,
store artifacts, attach atomically). Failures are captured per document and
never affect siblings, so callers always receive a full accounting.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from signflow.config import Config
from signflow.documents.exceptions import DocumentNotFoundError, InvalidInputError
from signflow.documents.models.document import Document, DocumentStatus
from signflow.documents.models.signing_event import SigningEvent
from signflow.documents.repositories.document_store import (
    DocumentStore, ORIGINAL_PDF, QR_IMAGE, SIGNATURE_IMAGE, SIGNED_PDF
)
from signflow.documents.services.hash_engine import HashEngine, hash_engine as default_hash_engine
from signflow.documents.services.qr_encoder import QrPayloadEncoder, build_validation_url, to_png_bytes
from signflow.documents.services.signer import DEFAULT_SIGNER_NAME, PdfMetadataSigner, SignatureMaterial
from signflow.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "BatchSigningOrchestrator", "BatchProgress", "BatchSignResult",
    "BatchSuccess", "BatchFailure",
]


@dataclass
class BatchSuccess:
    document_id: str
    signed_pdf_url: Optional[str]
    validate_url: str


@dataclass
class BatchFailure:
    document_id: str
    error: str


@dataclass
class BatchSignResult:
    """Aggregate outcome; both lists keep the input order."""
    total: int
    successes: List[BatchSuccess] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return len(self.successes)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "results": {
                "successful": [
                    {"documentId": s.document_id, "signedPdfUrl": s.signed_pdf_url, "validateUrl": s.validate_url}
                    for s in self.successes
                ],
                "failed": [{"documentId": f.document_id, "error": f.error} for f in self.failures],
            },
        }


ProgressListener = Callable[["BatchProgress"], None]


class BatchProgress:
    """Completed/total counter of a running batch.

    Advanced once per item reaching a terminal state; callers may poll
    ``ratio`` or subscribe to be notified after every completion.
    """

    def __init__(self, total: int = 0):
        self.total = total
        self.completed = 0
        self._listeners: List[ProgressListener] = []

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total

    @property
    def done(self) -> bool:
        return self.total > 0 and self.completed >= self.total

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def start(self, total: int) -> None:
        self.total = total
        self.completed = 0

    def advance(self) -> None:
        self.completed = min(self.completed + 1, self.total)
        for listener in self._listeners:
            listener(self)


class BatchSigningOrchestrator:
    """Runs signing operations under a fixed concurrency budget.

    Attributes:
        store: Document store shared by every item
        signer: Signing step applied to each original PDF
        encoder: QR payload encoder
        hash_engine: Fingerprint implementation
        max_concurrent: Maximum number of items in flight
        max_documents: Maximum number of ids per batch
    """

    def __init__(
        self,
        store: DocumentStore,
        signer: Optional[PdfMetadataSigner] = None,
        encoder: Optional[QrPayloadEncoder] = None,
        hash_engine: Optional[HashEngine] = None,
        max_concurrent: int = Config.BATCH_MAX_CONCURRENT,
        max_documents: int = Config.BATCH_MAX_DOCUMENTS,
    ) -> None:
        self.store = store
        self.signer = signer or PdfMetadataSigner()
        self.encoder = encoder or QrPayloadEncoder()
        self.hash_engine = hash_engine or default_hash_engine
        self.max_concurrent = max_concurrent
        self.max_documents = max_documents

    async def run_batch(
        self,
        document_ids: Sequence[str],
        material: SignatureMaterial,
        owner_id: Optional[str] = None,
        progress: Optional[BatchProgress] = None,
    ) -> BatchSignResult:
        """Sign every document of ``document_ids``.

        Returns only once every item succeeded or recorded a failure.
        Duplicate ids are processed independently.

        Raises:
            InvalidInputError: if the id list is empty or above the batch limit
        """
        ids = list(document_ids)
        if not ids:
            raise InvalidInputError("Lista de documentos inválida")
        if len(ids) > self.max_documents:
            raise InvalidInputError(f"Máximo de {self.max_documents} documentos por lote")

        progress = progress or BatchProgress()
        progress.start(len(ids))
        semaphore = asyncio.Semaphore(self.max_concurrent)
        # Repeated ids run one after another so they never write the same artifact concurrently
        locks = defaultdict(asyncio.Lock)

        outcomes = await asyncio.gather(
            *(
                self._run_item(semaphore, locks[document_id], document_id, material, owner_id, progress)
                for document_id in ids
            )
        )

        result = BatchSignResult(total=len(ids))
        for outcome in outcomes:
            if isinstance(outcome, BatchSuccess):
                result.successes.append(outcome)
            else:
                result.failures.append(outcome)

        logger.info(
            "Batch signing finished: %d total, %d signed, %d failed",
            result.total, result.successful, result.failed,
        )
        return result

    async def sign_document(
        self,
        document_id: str,
        material: SignatureMaterial,
        owner_id: Optional[str] = None,
    ) -> Tuple[Document, str]:
        """Sign a single document, raising instead of recording failures.

        Returns:
            The signed document and its public validation URL
        """
        return await self._sign(document_id, material, owner_id)

    async def _run_item(
        self,
        semaphore: asyncio.Semaphore,
        lock: asyncio.Lock,
        document_id: str,
        material: SignatureMaterial,
        owner_id: Optional[str],
        progress: BatchProgress,
    ):
        async with semaphore, lock:
            try:
                document, validate_url = await self._sign(document_id, material, owner_id)
                return BatchSuccess(document_id, document.signed_pdf_url, validate_url)
            except Exception as e:
                logger.warning("Batch item %s failed: %s", document_id, e)
                return BatchFailure(document_id, str(e) or e.__class__.__name__)
            finally:
                progress.advance()

    async def _sign(
        self,
        document_id: str,
        material: SignatureMaterial,
        owner_id: Optional[str],
    ) -> Tuple[Document, str]:
        document = await asyncio.to_thread(self.store.get, document_id)
        if owner_id is not None and document.owner_id != owner_id:
            raise DocumentNotFoundError(document_id)
        if document.status != DocumentStatus.PENDING:
            raise InvalidInputError(f"Document {document_id} is already signed")

        signature_image = material.image_bytes()
        original = await asyncio.to_thread(self.store.read_artifact, document_id, ORIGINAL_PDF)

        validate_url = build_validation_url(document_id)
        signed_pdf = self.signer.sign(original, material, validate_url)
        digest = self.hash_engine.fingerprint(signed_pdf)
        _, qr_image = self.encoder.encode(document_id, validate_url, digest, document.protected)

        signed_key = await asyncio.to_thread(self.store.put_artifact, document_id, SIGNED_PDF, signed_pdf)
        qr_key = await asyncio.to_thread(self.store.put_artifact, document_id, QR_IMAGE, to_png_bytes(qr_image))
        if signature_image:
            await asyncio.to_thread(self.store.put_artifact, document_id, SIGNATURE_IMAGE, signature_image)

        event = SigningEvent(
            signer_name=material.signer_name or DEFAULT_SIGNER_NAME,
            signer_info=material.signer_info,
        )
        # The write runs to completion in its thread even if the caller gives up
        signed = await asyncio.shield(asyncio.to_thread(
            self.store.attach_signed_artifact, document_id, digest, signed_key, qr_key, event
        ))
        return signed, validate_url
