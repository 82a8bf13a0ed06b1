from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts both the wire (camelCase) and the Python field names."""

    model_config = ConfigDict(populate_by_name=True)


class ValidationPayload(CamelModel):
    """Data embedded in the validation QR code."""

    url: str
    document_id: str = Field(alias="documentId")
    hash: Optional[str] = None
    timestamp: str
    protected: bool = False

    def serialize(self) -> str:
        """Compact JSON text, the exact string encoded into the QR symbol."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def parse(cls, text: str) -> "ValidationPayload":
        return cls.model_validate_json(text)


class QrRequest(CamelModel):
    # Optional on purpose: absent fields are reported by the encoder as MissingFieldError
    document_id: Optional[str] = Field(default=None, alias="documentId")
    validation_url: Optional[str] = Field(default=None, alias="validationUrl")
    hash: Optional[str] = None
    require_code: bool = Field(default=False, alias="requireCode")


class QrResponse(CamelModel):
    success: bool
    qr_code: str = Field(alias="qrCode")
    data: ValidationPayload


class DocumentResponse(BaseModel):
    id: str
    owner_id: str
    original_name: Optional[str] = None
    status: str
    hash: Optional[str] = None
    signed_pdf_url: Optional[str] = None
    qr_code_url: Optional[str] = None
    protected: bool = False
    created_at: datetime
    signed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_document(cls, document) -> "DocumentResponse":
        return cls(
            id=document.id,
            owner_id=document.owner_id,
            original_name=document.original_name,
            status=document.status.value,
            hash=document.hash,
            signed_pdf_url=document.signed_pdf_url,
            qr_code_url=document.qr_code_url,
            protected=document.protected,
            created_at=document.created_at,
            signed_at=document.signed_at,
            expires_at=document.expires_at,
        )


class UploadResponse(BaseModel):
    message: str
    document_id: str


class SignRequest(CamelModel):
    signature_image: Optional[str] = Field(default=None, alias="signatureImage")
    signer_name: Optional[str] = Field(default=None, alias="signerName")
    signer_info: Optional[str] = Field(default=None, alias="signerInfo")


class SignResponse(BaseModel):
    message: str
    document_id: str
    sha256_hash: str
    signed_pdf_url: str
    validate_url: str


class BatchSignRequest(SignRequest):
    document_ids: List[str] = Field(alias="documentIds")


class BatchSuccessItem(CamelModel):
    document_id: str = Field(alias="documentId")
    signed_pdf_url: Optional[str] = Field(default=None, alias="signedPdfUrl")
    validate_url: str = Field(alias="validateUrl")


class BatchFailureItem(CamelModel):
    document_id: str = Field(alias="documentId")
    error: str


class BatchResults(CamelModel):
    successful: List[BatchSuccessItem]
    failed: List[BatchFailureItem]


class BatchSignResponse(CamelModel):
    success: bool
    total: int
    successful: int
    failed: int
    results: BatchResults


class SigningEventView(BaseModel):
    id: int
    document_id: str
    signer_name: str
    signer_info: Optional[str] = None
    signed_at: datetime
    sha256_hash: str

    model_config = ConfigDict(from_attributes=True)


class PublicDocument(BaseModel):
    id: str
    status: str
    original_name: Optional[str] = None
    created_at: datetime
    signed_at: Optional[datetime] = None
    signed_pdf_url: Optional[str] = None
    qr_code_url: Optional[str] = None
    hash: Optional[str] = None


class ValidationView(BaseModel):
    requires_code: bool
    document: Optional[PublicDocument] = None
    events: List[SigningEventView] = []


class AccessCodeRequest(BaseModel):
    code: Optional[str] = None


class VerifyResponse(BaseModel):
    document_id: str
    status: str


class CleanupResponse(BaseModel):
    ok: bool
    removed: int
