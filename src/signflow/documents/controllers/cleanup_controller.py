import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from signflow.config import Config
from signflow.documents.controllers.errors import http_error
from signflow.documents.dependencies import get_document_store
from signflow.documents.exceptions import DocumentError
from signflow.documents.repositories.document_store import DocumentStore
from signflow.documents.schemas.document_schemas import CleanupResponse
from signflow.documents.services.cleanup import ExpiryCleanupScheduler

router = APIRouter(
    tags=["maintenance"]
)


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    expected = f"Bearer {Config.CRON_SECRET}"
    if not Config.CRON_SECRET or not hmac.compare_digest((authorization or "").encode(), expected.encode()):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")


@router.get("/cleanup", response_model=CleanupResponse, dependencies=[Depends(verify_cron_secret)])
def cleanup(store: DocumentStore = Depends(get_document_store)):
    """Elimina los documentos expirados; se puede invocar repetidamente."""
    try:
        report = ExpiryCleanupScheduler(store).sweep()
    except DocumentError as e:
        raise http_error(e) from e
    return CleanupResponse(ok=True, removed=report.removed)
