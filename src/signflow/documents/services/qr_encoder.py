"""Validation payloads and their QR code rendering.

The payload points to the public validation route and carries the stored
fingerprint. It is rendered with high error correction and a fixed pixel
footprint so printed copies scan reliably.
"""

import base64
import io
from datetime import datetime, timezone
from typing import Optional, Tuple

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage
from PIL import Image

from signflow.config import Config
from signflow.documents.exceptions import EncodingError, MissingFieldError
from signflow.documents.schemas.document_schemas import ValidationPayload

__all__ = ["QrPayloadEncoder", "build_validation_url", "to_png_bytes", "to_data_url"]


def build_validation_url(document_id: str, base_url: str = Config.PUBLIC_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/validate/{document_id}"


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(image: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(to_png_bytes(image)).decode("ascii")


class QrPayloadEncoder:
    """Builds validation payloads and renders them as QR images.

    Attributes:
        size: Width and height of the rendered image in pixels
        border: Quiet zone around the symbol, in modules
        max_payload_bytes: Upper bound for the serialized payload
    """

    def __init__(
        self,
        size: int = Config.QR_SIZE,
        border: int = Config.QR_BORDER,
        max_payload_bytes: int = Config.QR_MAX_PAYLOAD_BYTES,
    ) -> None:
        self.size = size
        self.border = border
        self.max_payload_bytes = max_payload_bytes

    def build_payload(
        self,
        document_id: Optional[str],
        validation_url: Optional[str],
        hash: Optional[str] = None,
        protected: bool = False,
        now: Optional[datetime] = None,
    ) -> ValidationPayload:
        if not document_id:
            raise MissingFieldError("documentId")
        if not validation_url:
            raise MissingFieldError("validationUrl")

        generated_at = now or datetime.now(timezone.utc)
        return ValidationPayload(
            url=validation_url,
            document_id=document_id,
            hash=hash or None,
            timestamp=generated_at.isoformat(timespec="milliseconds"),
            protected=bool(protected),
        )

    def render(self, payload: ValidationPayload) -> Image.Image:
        """Render ``payload`` as a ``size`` x ``size`` grayscale QR image.

        Raises:
            EncodingError: if the serialized payload does not fit
        """
        data = payload.serialize()
        if len(data.encode("utf-8")) > self.max_payload_bytes:
            raise EncodingError(
                f"Validation payload is {len(data.encode('utf-8'))} bytes; "
                f"the limit is {self.max_payload_bytes}"
            )

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_H,
            box_size=10,
            border=self.border,
            image_factory=PilImage,
        )
        qr.add_data(data)
        try:
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            raise EncodingError("Validation payload exceeds QR symbol capacity") from e

        image = qr.make_image(fill_color="black", back_color="white").get_image()
        return image.convert("L").resize((self.size, self.size), Image.Resampling.NEAREST)

    def encode(
        self,
        document_id: Optional[str],
        validation_url: Optional[str],
        hash: Optional[str] = None,
        protected: bool = False,
        now: Optional[datetime] = None,
    ) -> Tuple[ValidationPayload, Image.Image]:
        """Build the payload for a document and render it.

        Identical inputs produce identical images when ``now`` is fixed; only
        the timestamp varies between calls otherwise.

        Raises:
            MissingFieldError: if ``document_id`` or ``validation_url`` is empty
            EncodingError: if the payload exceeds the QR capacity
        """
        payload = self.build_payload(document_id, validation_url, hash, protected, now)
        return payload, self.render(payload)
