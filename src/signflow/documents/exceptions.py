"""Exceptions raised by the document integrity services.

Controllers translate these into HTTP errors; batch signing records them
per item instead of letting them escape.
"""

from typing import Iterable

__all__ = [
    "DocumentError",
    "DocumentNotFoundError",
    "InvalidInputError",
    "MissingFieldError",
    "EncodingError",
    "StorageFailureError",
    "PartialFailureError",
    "AccessDeniedError",
]


class DocumentError(Exception):
    """Base class for every document integrity error."""
    pass


class DocumentNotFoundError(DocumentError):
    """Raised when a document id is unknown or was already purged."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")


class InvalidInputError(DocumentError):
    """Raised for malformed payloads handed to the hash engine or signer."""
    pass


class MissingFieldError(InvalidInputError):
    """Raised when a required field of a QR payload is absent."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is required")


class EncodingError(DocumentError):
    """Raised when a validation payload does not fit in a QR symbol."""
    pass


class StorageFailureError(DocumentError):
    """Raised when an artifact or record write/delete fails."""
    pass


class PartialFailureError(StorageFailureError):
    """Raised when only some artifacts of a document could be removed."""

    def __init__(self, document_id: str, failed_keys: Iterable[str]):
        self.document_id = document_id
        self.failed_keys = list(failed_keys)
        super().__init__(
            f"Could not delete {len(self.failed_keys)} artifact(s) of document "
            f"{document_id}: {', '.join(self.failed_keys)}"
        )


class AccessDeniedError(DocumentError):
    """Raised when a caller may not see or modify a document."""
    pass
