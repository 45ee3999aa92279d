"""
Label generation handler.
Coordinates code allocation against the ledger and PDF/QR rendering.
"""

from fastapi.concurrency import run_in_threadpool

from label_service.allocation import CodeAllocator
from label_service.database import LabelStore
from label_service.label_generation import QRGenerator, SheetRenderer, get_layout
from label_service.logger import get_logger

logger = get_logger(__name__)


class LabelGenerationHandler:
    """
    Handles allocation and rendering requests.

    Only allocation and ledger reads use the store. Rendering works purely on
    the codes it is given, so a handler built without a store can still draw
    sheets and calibration grids.
    """

    def __init__(self, store: LabelStore | None = None, renderer: SheetRenderer | None = None):
        self.allocator = CodeAllocator(store) if store is not None else None
        self._renderer = renderer

    @property
    def renderer(self) -> SheetRenderer:
        # Built on first use so allocation never depends on the layout settings
        if self._renderer is None:
            self._renderer = SheetRenderer()
        return self._renderer

    @property
    def qr_generator(self) -> QRGenerator:
        return self.renderer.qr_generator

    def _require_allocator(self) -> CodeAllocator:
        if self.allocator is None:
            raise RuntimeError("LabelGenerationHandler was created without a ledger store")
        return self.allocator

    async def allocate_batch(self, prefix: str, count: int) -> list[str]:
        """
        Reserve the next `count` codes for `prefix`.

        Returns:
            Ordered list of codes
        """
        allocator = self._require_allocator()

        logger.info("Allocating batch", extra={"prefix": prefix, "count": count})

        # SQLite blocks while another writer holds the lock; keep the event loop free
        return await run_in_threadpool(allocator.allocate, prefix, count)

    async def next_code(self, prefix: str) -> str:
        allocator = self._require_allocator()
        return await run_in_threadpool(allocator.peek_next, prefix)

    async def list_issued(self, prefix: str | None = None, limit: int = 100) -> list[dict]:
        allocator = self._require_allocator()
        return await run_in_threadpool(allocator.list_issued, prefix, limit)

    async def generate_sheet_pdf(self, codes: list[str], start_position: int = 1) -> bytes:
        """
        Render already-issued codes onto label sheets.

        Args:
            codes: Codes in print order
            start_position: 1-based first label slot

        Returns:
            PDF bytes
        """
        logger.info("Generating label sheet PDF", extra={
            "code_count": len(codes),
            "start_position": start_position
        })

        return await run_in_threadpool(self.renderer.render_sheet, codes, start_position)

    async def generate_test_grid_pdf(
        self,
        profile: str | None = None,
        x_offset: float | None = None,
        y_offset: float | None = None
    ) -> bytes:
        """
        Render the calibration grid for the configured (or named) layout.

        Args:
            profile: Layout profile name (configured layout if None)
            x_offset: Trial horizontal offset, replacing the configured one
            y_offset: Trial vertical offset, replacing the configured one

        Returns:
            PDF bytes (single page)
        """
        renderer = self.renderer
        if profile:
            renderer = SheetRenderer(
                layout=get_layout(profile),
                style=renderer.style,
                qr_generator=renderer.qr_generator,
                invariant=renderer.invariant
            )
        if x_offset is not None or y_offset is not None:
            renderer = renderer.with_offsets(
                renderer.style.x_offset if x_offset is None else x_offset,
                renderer.style.y_offset if y_offset is None else y_offset
            )

        logger.info("Generating calibration grid", extra={
            "layout": renderer.layout.name,
            "x_offset": renderer.style.x_offset,
            "y_offset": renderer.style.y_offset
        })

        return await run_in_threadpool(renderer.render_calibration_grid)

    async def generate_qr_png(
        self,
        code: str,
        error_correction: str | None = None,
        size: int | None = None
    ) -> bytes:
        """Encode a single code as a PNG QR image."""
        return await run_in_threadpool(self.qr_generator.encode, code, error_correction, size)

