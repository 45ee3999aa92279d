"""
QR code generation for label codes.
"""

import io

import qrcode
from qrcode.image.pil import PilImage
from PIL import Image

from label_service.config import settings
from label_service.errors import ValidationError
from label_service.logger import get_logger

logger = get_logger(__name__)

# L ~7%, M ~15%, Q ~25%, H ~30% of modules recoverable
ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


class QRGenerator:
    """Generates PNG QR codes for issued label codes."""

    def __init__(
        self,
        error_correction: str | None = None,
        size: int | None = None,
        border: int | None = None
    ):
        self.error_correction = error_correction or settings.qr_error_correction
        self.size = size if size is not None else settings.qr_pixel_size
        self.border = border if border is not None else settings.qr_border

    def encode(
        self,
        text: str,
        error_correction: str | None = None,
        size: int | None = None,
        border: int | None = None
    ) -> bytes:
        """
        Encode text as a square PNG QR code.

        Args:
            text: Data to encode (a label code such as T-000042)
            error_correction: One of L, M, Q, H
            size: Output image side in pixels
            border: Quiet zone in QR modules

        Returns:
            PNG image bytes

        Identical input and library versions produce identical bytes.
        """
        level = (error_correction or self.error_correction).upper()
        size = size if size is not None else self.size
        border = border if border is not None else self.border

        if level not in ERROR_CORRECTION_LEVELS:
            raise ValidationError(
                f"Unknown error correction level: {level!r}",
                error_code="INVALID_ERROR_CORRECTION",
                details={"error_correction": level, "allowed": sorted(ERROR_CORRECTION_LEVELS)}
            )
        if size < 21 or border < 0:
            raise ValidationError(
                "QR size must be at least 21 pixels and border non-negative",
                error_code="INVALID_QR_SIZE",
                details={"size": size, "border": border}
            )
        if not text:
            raise ValidationError("Cannot encode empty text", error_code="EMPTY_QR_TEXT")

        qr = qrcode.QRCode(
            version=None,  # Auto-determine version
            error_correction=ERROR_CORRECTION_LEVELS[level],
            box_size=10,
            border=border
        )

        qr.add_data(text)
        qr.make(fit=True)

        img: PilImage = qr.make_image(fill_color="black", back_color="white")

        # Nearest-neighbour keeps module edges sharp for scanners
        img = img.resize((size, size), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        buffer.seek(0)

        logger.debug("QR code encoded", extra={
            "text": text,
            "error_correction": level,
            "size": size,
            "version": qr.version
        })

        return buffer.getvalue()

    def encode_batch(self, codes: list[str]) -> dict[str, bytes]:
        """
        Encode several codes with this generator's defaults.

        Returns:
            Dict mapping code to PNG bytes, in input order
        """
        qr_codes = {}
        for code in codes:
            qr_codes[code] = self.encode(code)

        logger.info("Batch QR generation complete", extra={
            "total_items": len(codes),
            "error_correction": self.error_correction
        })

        return qr_codes
