# src/signflow/documents/controllers/signature_controller.py
from fastapi import APIRouter, Depends, HTTPException, Response

from signflow.auth.dependencies import get_current_user_id
from signflow.documents.controllers.errors import http_error
from signflow.documents.dependencies import (
    get_batch_orchestrator, get_document_store, get_validation_service
)
from signflow.documents.exceptions import DocumentError
from signflow.documents.repositories.document_store import SIGNED_PDF, DocumentStore
from signflow.documents.schemas.document_schemas import (
    BatchSignRequest, BatchSignResponse, SignRequest, SignResponse
)
from signflow.documents.services.batch_signing import BatchSigningOrchestrator
from signflow.documents.services.document_service import DocumentService
from signflow.documents.services.signer import SignatureMaterial
from signflow.documents.services.validation_service import ValidationService, VerificationResult

router = APIRouter(
    tags=["signatures"]
)


def _material(payload: SignRequest) -> SignatureMaterial:
    return SignatureMaterial(
        signature_image=payload.signature_image,
        signer_name=payload.signer_name,
        signer_info=payload.signer_info,
    )


@router.post("/documents/{document_id}/sign", response_model=SignResponse)
async def sign_document(
    document_id: str,
    payload: SignRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: BatchSigningOrchestrator = Depends(get_batch_orchestrator),
):
    """
    Firma un documento pendiente y guarda su sha256.
    """
    try:
        document, validate_url = await orchestrator.sign_document(document_id, _material(payload), user_id)
    except DocumentError as e:
        raise http_error(e) from e
    return SignResponse(
        message="Firma añadida",
        document_id=document.id,
        sha256_hash=document.hash,
        signed_pdf_url=document.signed_pdf_url,
        validate_url=validate_url,
    )


@router.post("/batch-sign", response_model=BatchSignResponse)
async def batch_sign(
    payload: BatchSignRequest,
    user_id: str = Depends(get_current_user_id),
    orchestrator: BatchSigningOrchestrator = Depends(get_batch_orchestrator),
):
    """
    Firma varios documentos; cada fallo se informa por documento sin abortar el lote.
    """
    try:
        result = await orchestrator.run_batch(payload.document_ids, _material(payload), user_id)
    except DocumentError as e:
        raise http_error(e) from e
    return result.to_dict()


@router.get("/documents/{document_id}/download")
def download_and_validate(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
    validator: ValidationService = Depends(get_validation_service),
):
    """
    Devuelve el PDF firmado si el hash coincide con el registrado.
    """
    try:
        DocumentService.get_owned_document(store, document_id, user_id)
        outcome = validator.validate(document_id)
        if outcome == VerificationResult.UNSIGNED:
            raise HTTPException(400, "Aún no tiene firmas")
        if outcome == VerificationResult.EXPIRED:
            raise HTTPException(410, "El documento expiró")

        data = store.read_artifact(document_id, SIGNED_PDF)
        if validator.validate(document_id, data) != VerificationResult.VALID:
            raise HTTPException(400, "Integridad comprometida: hash no coincide")
        document = store.get(document_id)
    except DocumentError as e:
        raise http_error(e) from e

    return Response(
        content=data,
        media_type="application/pdf",
        headers={"X-Document-Hash": document.hash},
    )
