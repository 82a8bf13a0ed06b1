from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from signflow.documents.controllers.errors import http_error
from signflow.documents.dependencies import get_validation_limiter, get_validation_service
from signflow.documents.exceptions import AccessDeniedError, DocumentError, DocumentNotFoundError
from signflow.documents.schemas.document_schemas import (
    AccessCodeRequest, ValidationView, VerifyResponse
)
from signflow.documents.services.validation_service import ValidationService
from signflow.logging import get_logger
from signflow.rate_limit import InMemoryRateLimiter

logger = get_logger(__name__)


def limit_validation_attempts(
    request: Request,
    limiter: InMemoryRateLimiter = Depends(get_validation_limiter),
) -> None:
    """Máximo de intentos de validación por cliente en la ventana configurada."""
    client = request.client.host if request.client else "unknown"
    if not limiter.allow(f"validate:{client}"):
        logger.warning("Validation rate limit exceeded for client %s on %s", client, request.url.path)
        raise HTTPException(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Demasiados intentos de validación. Intente nuevamente en unos minutos.",
            headers={"Retry-After": str(limiter.limit.window_seconds)},
        )


router = APIRouter(
    prefix="/validate",
    tags=["validation"],
    dependencies=[Depends(limit_validation_attempts)],
)


def _rejected(document_id: str, exc: DocumentError) -> HTTPException:
    if isinstance(exc, DocumentNotFoundError):
        logger.warning("Validation lookup for unknown document %s", document_id)
    elif isinstance(exc, AccessDeniedError):
        logger.warning("Validation of %s rejected: %s", document_id, exc)
    return http_error(exc)


@router.get("/{document_id}", response_model=ValidationView)
def get_validation(document_id: str, validator: ValidationService = Depends(get_validation_service)):
    """Vista pública de un documento; los protegidos solo indican que requieren código."""
    try:
        return validator.describe(document_id)
    except DocumentError as e:
        raise _rejected(document_id, e) from e


@router.post("/{document_id}", response_model=ValidationView)
def unlock_validation(
    document_id: str,
    payload: AccessCodeRequest,
    validator: ValidationService = Depends(get_validation_service),
):
    try:
        return validator.describe(document_id, access_code=payload.code or "")
    except DocumentError as e:
        raise _rejected(document_id, e) from e


@router.post("/{document_id}/verify", response_model=VerifyResponse)
async def verify_file(
    document_id: str,
    file: UploadFile = File(...),
    validator: ValidationService = Depends(get_validation_service),
):
    """Compara el hash del archivo presentado con el registrado."""
    contents = await file.read()
    try:
        outcome = validator.validate(document_id, contents)
    except DocumentError as e:
        raise _rejected(document_id, e) from e
    return VerifyResponse(document_id=document_id, status=outcome.value)
