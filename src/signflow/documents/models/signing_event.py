# src/signflow/documents/models/signing_event.py

from sqlalchemy import Column, Integer, ForeignKey, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from signflow.documents.models.document import utcnow


class SigningEvent(Base):
    __tablename__ = "signing_events"

    id          = Column(Integer, primary_key=True)
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    signer_name = Column(String(255), nullable=False)
    signer_info = Column(String(255), nullable=True)
    signed_at   = Column(DateTime, default=utcnow, nullable=False)
    sha256_hash = Column(String(64), nullable=False)

    document = relationship("Document", back_populates="events")
