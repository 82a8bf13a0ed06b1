"""Signing step applied to a document's original PDF.

Visual placement of signatures happens upstream; this step stamps the
signer identity and validation link into the PDF's document information
so the signed artifact carries its own pointer back to the validation route.
"""

import base64
import binascii
import io
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from PyPDF2 import PdfReader, PdfWriter

from signflow.documents.exceptions import InvalidInputError
from signflow.documents.models.document import utcnow

__all__ = ["SignatureMaterial", "PdfMetadataSigner"]

DEFAULT_SIGNER_NAME = "SignFlow user"


@dataclass
class SignatureMaterial:
    """Signature data shared by every document of a signing request."""
    signature_image: Optional[str] = None
    signer_name: Optional[str] = None
    signer_info: Optional[str] = None

    def image_bytes(self) -> Optional[bytes]:
        """Decode ``signature_image`` (base64 or ``data:`` URL) into raw bytes."""
        if not self.signature_image:
            return None
        encoded = self.signature_image
        if encoded.startswith("data:"):
            encoded = encoded.split(",", 1)[-1]
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidInputError("Signature image is not valid base64") from e


class PdfMetadataSigner:

    def sign(
        self,
        pdf_bytes: bytes,
        material: SignatureMaterial,
        validate_url: str,
        signed_at: Optional[datetime] = None,
    ) -> bytes:
        """Return a signed copy of ``pdf_bytes``.

        Raises:
            InvalidInputError: if ``pdf_bytes`` is not a readable PDF
        """
        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)
        except Exception as e:
            raise InvalidInputError("PDF inválido o dañado") from e

        writer.add_metadata({
            "/SignedBy": material.signer_name or DEFAULT_SIGNER_NAME,
            "/SignerInfo": material.signer_info or "",
            "/ValidationURL": validate_url,
            "/SignedAt": (signed_at or utcnow()).isoformat() + "Z",
        })

        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()
