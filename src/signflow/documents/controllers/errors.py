from fastapi import HTTPException, status

from signflow.documents.exceptions import (
    AccessDeniedError, DocumentError, DocumentNotFoundError, EncodingError,
    InvalidInputError, StorageFailureError
)

# Most specific classes first
_STATUS_CODES = (
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (EncodingError, 422),
    (StorageFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def http_error(exc: DocumentError) -> HTTPException:
    for error_class, status_code in _STATUS_CODES:
        if isinstance(exc, error_class):
            return HTTPException(status_code, str(exc))
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
