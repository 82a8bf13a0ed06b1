"""SHA-256 fingerprints of signed PDFs.

The digest is taken over the exact stored bytes. Re-encoding a PDF changes
its bytes, so callers must never hash a re-rendered copy.
"""

import hashlib
import hmac

from signflow.documents.exceptions import InvalidInputError

__all__ = ["HashEngine", "hash_engine"]

PDF_MAGIC = b"%PDF-"


class HashEngine:

    @staticmethod
    def _check(data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidInputError(f"Expected PDF bytes, got {type(data).__name__}")
        if not data:
            raise InvalidInputError("Cannot fingerprint an empty payload")
        if not bytes(data[:len(PDF_MAGIC)]) == PDF_MAGIC:
            raise InvalidInputError("Payload is not a PDF document")

    @staticmethod
    def fingerprint(data: bytes) -> str:
        """Return the lowercase hex SHA-256 digest of ``data``.

        Raises:
            InvalidInputError: if ``data`` is empty or lacks a PDF header
        """
        HashEngine._check(data)
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def matches(stored_hash: str, data: bytes) -> bool:
        """Compare the SHA-256 of ``data`` with ``stored_hash``.

        Any candidate is hashed as is; bytes that differ from the signed
        artifact, header included, simply do not match.
        """
        if not stored_hash:
            return False
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidInputError(f"Expected PDF bytes, got {type(data).__name__}")
        candidate = hashlib.sha256(data).hexdigest()
        return hmac.compare_digest(candidate, stored_hash.lower())


hash_engine = HashEngine()
