from fastapi import Depends

from database import SessionLocal
from signflow.config import Config
from signflow.documents.repositories import DocumentRepository, DocumentStore, LocalFileStore
from signflow.documents.services.batch_signing import BatchSigningOrchestrator
from signflow.documents.services.validation_service import ValidationService
from signflow.rate_limit import InMemoryRateLimiter, RateLimit

validation_limiter = InMemoryRateLimiter(
    limit=RateLimit(Config.VALIDATION_RATE_LIMIT, Config.VALIDATION_RATE_WINDOW_SECONDS)
)


def build_document_store() -> DocumentStore:
    return DocumentStore(
        DocumentRepository(SessionLocal),
        LocalFileStore(Config.STORAGE_ROOT, Config.PUBLIC_BASE_URL),
    )


def get_document_store() -> DocumentStore:
    return build_document_store()


def get_validation_service(store: DocumentStore = Depends(get_document_store)) -> ValidationService:
    return ValidationService(store)


def get_batch_orchestrator(store: DocumentStore = Depends(get_document_store)) -> BatchSigningOrchestrator:
    return BatchSigningOrchestrator(store)


def get_validation_limiter() -> InMemoryRateLimiter:
    return validation_limiter
