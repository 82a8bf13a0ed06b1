from .document import Document, DocumentStatus, utcnow
from .signing_event import SigningEvent

__all__ = ['Document', 'DocumentStatus', 'SigningEvent', 'utcnow']
