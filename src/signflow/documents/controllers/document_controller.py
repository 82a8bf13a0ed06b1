from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from pydantic import BaseModel

from signflow.auth.dependencies import get_current_user_id
from signflow.documents.controllers.errors import http_error
from signflow.documents.dependencies import get_document_store
from signflow.documents.exceptions import DocumentError
from signflow.documents.models.document import DocumentStatus
from signflow.documents.repositories.document_store import QR_IMAGE, SIGNED_PDF, DocumentStore
from signflow.documents.schemas.document_schemas import (
    DocumentResponse, QrRequest, QrResponse, UploadResponse
)
from signflow.documents.services.document_service import DocumentService
from signflow.documents.services.qr_encoder import QrPayloadEncoder, to_data_url
from signflow.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    tags=["documents"]
)

# Artifacts reachable through their public URL
PUBLIC_ARTIFACTS = {SIGNED_PDF: "application/pdf", QR_IMAGE: "image/png"}


class ExpiryUpdate(BaseModel):
    expires_at: Optional[datetime] = None


@router.post("/upload", response_model=UploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    expires_in_days: Optional[int] = Form(None),
    validation_code: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    contents = await file.read()
    try:
        doc = DocumentService.upload_document(
            store, user_id, contents, file.filename or "", file.content_type or "",
            expires_in_days=expires_in_days, validation_code=validation_code,
        )
    except DocumentError as e:
        raise http_error(e) from e
    return UploadResponse(message="Documento subido correctamente", document_id=doc.id)


@router.post("/generate-qr", response_model=QrResponse)
def generate_qr(payload: QrRequest):
    """
    Genera el código QR de validación con los datos del documento.
    """
    try:
        data, image = QrPayloadEncoder().encode(
            payload.document_id, payload.validation_url, payload.hash, payload.require_code
        )
    except DocumentError as e:
        raise http_error(e) from e
    return QrResponse(success=True, qr_code=to_data_url(image), data=data)


@router.get("/files/{document_id}/{name}")
def get_artifact(document_id: str, name: str, store: DocumentStore = Depends(get_document_store)):
    media_type = PUBLIC_ARTIFACTS.get(name)
    if media_type is None:
        raise HTTPException(404, "Archivo no encontrado")
    try:
        document = store.get(document_id)
        if document.status != DocumentStatus.SIGNED:
            raise HTTPException(404, "Archivo no encontrado")
        data = store.read_artifact(document_id, name)
    except DocumentError as e:
        raise http_error(e) from e
    return Response(content=data, media_type=media_type)


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    try:
        document = DocumentService.get_owned_document(store, document_id, user_id)
    except DocumentError as e:
        raise http_error(e) from e
    return DocumentResponse.from_document(document)


@router.patch("/{document_id}/expiry", response_model=DocumentResponse)
def update_expiry(
    document_id: str,
    payload: ExpiryUpdate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    try:
        document = DocumentService.update_expiry(store, document_id, user_id, payload.expires_at)
    except DocumentError as e:
        raise http_error(e) from e
    return DocumentResponse.from_document(document)


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_document_store),
):
    try:
        DocumentService.delete_document(store, document_id, user_id)
    except DocumentError as e:
        raise http_error(e) from e
    return {"success": True, "message": "Document deleted successfully"}
