import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.orm import relationship

from database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DocumentStatus(PyEnum):
    PENDING = "pending"
    SIGNED = "signed"
    # Presentation-only values: never written to the documents table
    INVALID = "invalid"
    EXPIRED = "expired"


class Document(Base):
    __tablename__ = 'documents'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(255), nullable=False, index=True)
    original_name = Column(String(255), nullable=True)
    status = Column(Enum(DocumentStatus), nullable=False, default=DocumentStatus.PENDING)
    hash = Column(String(64), nullable=True)
    storage_path = Column(String(255), nullable=False)
    signed_pdf_url = Column(String(1024), nullable=True)
    qr_code_url = Column(String(1024), nullable=True)
    validation_code = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    signed_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True, index=True)

    # Relación con eventos de firma
    events = relationship(
        "SigningEvent",
        back_populates="document",
        order_by="SigningEvent.signed_at",
        cascade="all, delete-orphan",
    )

    @property
    def protected(self) -> bool:
        return bool(self.validation_code)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utcnow())
