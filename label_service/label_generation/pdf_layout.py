"""
PDF label sheet rendering with QR codes.
Places codes on a fixed label grid and draws calibration sheets for the same grid.
"""

import io
from dataclasses import dataclass, replace

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from label_service.config import settings
from label_service.errors import LabelServiceError, RenderError, ValidationError
from label_service.label_generation.geometry import SheetLayout, get_layout
from label_service.label_generation.qr_generator import QRGenerator
from label_service.logger import get_logger

logger = get_logger(__name__)

GRID_LINE_WIDTH = 0.5
CROSSHAIR_HALF_LENGTH = 6.0
GRID_NUMBER_FONT_SIZE = 10


@dataclass(frozen=True)
class LabelStyle:
    """How a single code is composed inside its label cell."""

    top_padding: float = 2.0
    text_band: float = 12.0
    text_gap: float = 4.0
    bottom_padding: float = 3.0
    show_text: bool = True
    font_name: str = "Helvetica"
    font_size: float = 9.0
    x_offset: float = 0.0
    y_offset: float = 0.0
    error_correction: str = "M"
    qr_pixel_size: int = 256
    qr_border: int = 0

    @classmethod
    def from_settings(cls) -> "LabelStyle":
        return cls(
            show_text=settings.show_code_text,
            font_name=settings.font_name,
            font_size=settings.font_size,
            x_offset=settings.label_x_offset,
            y_offset=settings.label_y_offset,
            error_correction=settings.qr_error_correction,
            qr_pixel_size=settings.qr_pixel_size,
            qr_border=settings.qr_border,
        )

    def qr_side(self, layout: SheetLayout) -> float:
        """Side of the QR square: the cell height left after paddings and the text band."""
        side = (
            layout.label_height
            - self.top_padding
            - self.text_band
            - self.text_gap
            - self.bottom_padding
        )
        if side <= 0:
            raise ValidationError(
                "Label is too small for the configured paddings",
                error_code="INVALID_LABEL_STYLE",
                details={"label_height": layout.label_height, "qr_side": side}
            )
        return side


class SheetRenderer:
    """Renders allocated codes onto label sheets."""

    def __init__(
        self,
        layout: SheetLayout | None = None,
        style: LabelStyle | None = None,
        qr_generator: QRGenerator | None = None,
        invariant: bool = False
    ):
        self.layout = layout or get_layout(settings.label_profile)
        self.style = style or LabelStyle.from_settings()
        self.qr_generator = qr_generator or QRGenerator(
            error_correction=self.style.error_correction,
            size=self.style.qr_pixel_size,
            border=self.style.qr_border
        )
        # Invariant mode pins creation dates and IDs so output is byte-stable
        self.invariant = invariant

    def with_offsets(self, x_offset: float, y_offset: float) -> "SheetRenderer":
        return SheetRenderer(
            layout=self.layout,
            style=replace(self.style, x_offset=x_offset, y_offset=y_offset),
            qr_generator=self.qr_generator,
            invariant=self.invariant
        )

    def _new_canvas(self, buffer: io.BytesIO, title: str) -> canvas.Canvas:
        c = canvas.Canvas(buffer, pagesize=self.layout.page_size, invariant=int(self.invariant))
        c.setTitle(title)
        return c

    def render_sheet(self, codes: list[str], start_position: int = 1) -> bytes:
        """
        Render codes onto as many sheets as needed.

        Args:
            codes: Codes in print order
            start_position: 1-based label slot on the first sheet (skips
                slots already used on a partially printed sheet)

        Returns:
            PDF bytes

        Raises:
            ValidationError: Empty code list or start position off the sheet
            RenderError: QR or PDF generation failed

        Pagination: the i-th code goes to global index (start_position - 1) + i;
        a new page begins whenever that index lands on position 0 of a page.
        """
        if not codes:
            raise ValidationError("No codes provided", error_code="EMPTY_CODES")

        per_page = self.layout.labels_per_page
        if (
            not isinstance(start_position, int)
            or isinstance(start_position, bool)
            or not 1 <= start_position <= per_page
        ):
            raise ValidationError(
                f"Start position must be between 1 and {per_page}",
                error_code="INVALID_START_POSITION",
                details={"start_position": start_position, "labels_per_page": per_page}
            )

        try:
            qr_images = self.qr_generator.encode_batch(codes)

            buffer = io.BytesIO()
            c = self._new_canvas(buffer, "Label sheet")

            offset = start_position - 1
            pages = 1
            for i, code in enumerate(codes):
                _, position = self.layout.locate(offset + i)

                if i > 0 and position == 0:
                    c.showPage()
                    pages += 1

                self._draw_label(c, code, qr_images[code], position)

            c.save()

        except LabelServiceError:
            raise
        except Exception as e:
            logger.error("Label sheet generation failed", extra={
                "code_count": len(codes),
                "start_position": start_position,
                "error": str(e)
            }, exc_info=True)
            raise RenderError(
                "Failed to generate label sheet",
                details={"error": str(e)}
            ) from e

        logger.info("Label sheet PDF generated", extra={
            "layout": self.layout.name,
            "code_count": len(codes),
            "start_position": start_position,
            "pages": pages
        })

        return buffer.getvalue()

    def _draw_label(self, c: canvas.Canvas, code: str, qr_png: bytes, position: int) -> None:
        """Draw one QR code, with its code text above it, into a label cell."""
        layout = self.layout
        style = self.style

        x, y = layout.position_to_xy(position)
        x += style.x_offset
        y += style.y_offset

        qr_size = style.qr_side(layout)
        qr_x = x + (layout.label_width - qr_size) / 2
        qr_y = y + style.bottom_padding

        c.drawImage(ImageReader(io.BytesIO(qr_png)), qr_x, qr_y, qr_size, qr_size)

        if style.show_text:
            text_width = pdfmetrics.stringWidth(code, style.font_name, style.font_size)
            text_x = x + (layout.label_width - text_width) / 2
            text_y = qr_y + qr_size + style.text_gap
            c.setFont(style.font_name, style.font_size)
            c.drawString(text_x, text_y, code)

    def render_calibration_grid(self) -> bytes:
        """
        Render one sheet showing every label cell.

        Each cell gets its outline, a crosshair at the center and its
        1-based position number. Printing this on blank paper and holding it
        against the label stock shows whether margins, gaps and offsets match.

        Returns:
            PDF bytes (single page)
        """
        layout = self.layout
        style = self.style

        try:
            buffer = io.BytesIO()
            c = self._new_canvas(buffer, f"Calibration grid {layout.name}")
            c.setLineWidth(GRID_LINE_WIDTH)
            c.setStrokeColorRGB(0, 0, 0)
            c.setFont(style.font_name, GRID_NUMBER_FONT_SIZE)

            for position in range(layout.labels_per_page):
                x, y = layout.position_to_xy(position)
                x += style.x_offset
                y += style.y_offset

                c.rect(x, y, layout.label_width, layout.label_height, stroke=1, fill=0)

                cx, cy = layout.cell_center(position)
                cx += style.x_offset
                cy += style.y_offset
                c.line(cx - CROSSHAIR_HALF_LENGTH, cy, cx + CROSSHAIR_HALF_LENGTH, cy)
                c.line(cx, cy - CROSSHAIR_HALF_LENGTH, cx, cy + CROSSHAIR_HALF_LENGTH)

                c.drawCentredString(cx, cy - GRID_NUMBER_FONT_SIZE / 2, str(position + 1))

            c.save()

        except Exception as e:
            logger.error("Calibration grid generation failed", extra={
                "layout": layout.name,
                "error": str(e)
            }, exc_info=True)
            raise RenderError(
                "Failed to generate calibration grid",
                details={"error": str(e)}
            ) from e

        logger.info("Calibration grid PDF generated", extra={
            "layout": layout.name,
            "labels_per_page": layout.labels_per_page,
            "x_offset": style.x_offset,
            "y_offset": style.y_offset
        })

        return buffer.getvalue()
