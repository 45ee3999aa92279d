"""
Label generation routes.
Handles code allocation, label sheet PDFs, calibration grids and single QR images.

Errors raised by the core (validation, exhaustion, persistence, render) are
translated to responses by the exception handler in main.py.
"""

import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Response, status

from label_service.database import LabelStore, get_store
from label_service.handlers.label_generation_handler import LabelGenerationHandler
from label_service.label_generation import SheetRenderer
from label_service.logger import get_logger
from label_service.models.common import (
    AllocateRequest,
    AllocateResponse,
    ErrorResponse,
    GenerateSheetRequest,
    IssuedCodesResponse,
    NextCodeResponse,
)

logger = get_logger(__name__)

router = APIRouter()


def get_renderer() -> SheetRenderer:
    """Renderer built from the current settings."""
    return SheetRenderer()


def inline_disposition(filename: str) -> str:
    """
    Content-Disposition for a generated file.

    Header values must be Latin-1, so the plain `filename` is reduced to safe
    ASCII and the exact name travels percent-encoded in `filename*` (RFC 5987).
    """
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.post(
    "/allocate-batch",
    response_model=AllocateResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid prefix or count"},
        409: {"model": ErrorResponse, "description": "Code space exhausted for prefix"},
        500: {"model": ErrorResponse, "description": "Ledger failure"}
    },
    summary="Allocate a batch of codes",
    description="""
    Reserve the next contiguous block of codes for a prefix.

    - Numbering is per prefix and per code width, starting at 1
    - Codes are never reused, even if the batch is never printed
    - The batch is committed atomically or not at all
    """
)
async def allocate_batch(
    request: AllocateRequest,
    store: LabelStore = Depends(get_store)
):
    handler = LabelGenerationHandler(store=store)

    codes = await handler.allocate_batch(request.prefix, request.count)

    return AllocateResponse(codes=codes)


@router.post(
    "/generate-sheet",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "No codes or invalid start position"},
        500: {"model": ErrorResponse, "description": "Generation failed"}
    },
    summary="Generate label sheet PDF",
    description="""
    Render codes as QR labels on the configured sheet layout.

    `startIndex` (1-based) skips label slots already used on a partially
    printed first sheet. Returns a multi-page PDF ready for printing at
    actual size.
    """
)
async def generate_sheet(
    request: GenerateSheetRequest,
    renderer: SheetRenderer = Depends(get_renderer)
):
    handler = LabelGenerationHandler(renderer=renderer)

    pdf_bytes = await handler.generate_sheet_pdf(request.codes, request.start_index)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": inline_disposition(f"labels_{request.codes[0]}_{len(request.codes)}.pdf")
        }
    )


@router.get(
    "/test-grid",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown layout profile"},
        500: {"model": ErrorResponse, "description": "Generation failed"}
    },
    summary="Generate calibration grid PDF",
    description="""
    Single page with every label cell outlined, a center crosshair and the
    position number. Print on plain paper and hold against the label stock
    to check margins, gaps and offsets before a bulk run.

    `x_offset` / `y_offset` (points) replace the configured printer offsets
    for this grid only, so a correction can be tried before it is saved in
    the environment.
    """
)
async def generate_test_grid(
    profile: str | None = Query(None, description="Layout profile name"),
    x_offset: float | None = Query(None, description="Trial horizontal offset in points"),
    y_offset: float | None = Query(None, description="Trial vertical offset in points"),
    renderer: SheetRenderer = Depends(get_renderer)
):
    handler = LabelGenerationHandler(renderer=renderer)

    pdf_bytes = await handler.generate_test_grid_pdf(profile, x_offset, y_offset)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'inline; filename="test_grid.pdf"'
        }
    )


@router.get(
    "/codes",
    response_model=IssuedCodesResponse,
    status_code=status.HTTP_200_OK,
    summary="List issued codes",
)
async def list_codes(
    prefix: str | None = Query(None, description="Only this prefix"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum rows"),
    store: LabelStore = Depends(get_store)
):
    handler = LabelGenerationHandler(store=store)

    records = await handler.list_issued(prefix, limit)

    return IssuedCodesResponse(codes=records, count=len(records))


@router.get(
    "/codes/next",
    response_model=NextCodeResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid prefix"},
        409: {"model": ErrorResponse, "description": "Code space exhausted for prefix"}
    },
    summary="Preview the next code",
)
async def next_code(
    prefix: str = Query(..., description="Code prefix"),
    store: LabelStore = Depends(get_store)
):
    handler = LabelGenerationHandler(store=store)

    code = await handler.next_code(prefix)

    return NextCodeResponse(prefix=prefix.strip().upper(), next_code=code)


@router.get(
    "/qr/{code}",
    response_class=Response,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid error correction or size"},
        500: {"model": ErrorResponse, "description": "Generation failed"}
    },
    summary="Generate QR code PNG",
)
async def generate_qr(
    code: str,
    error_correction: str | None = Query(None, description="L, M, Q or H"),
    size: int | None = Query(None, description="Image side in pixels"),
    renderer: SheetRenderer = Depends(get_renderer)
):
    handler = LabelGenerationHandler(renderer=renderer)

    qr_bytes = await handler.generate_qr_png(code, error_correction, size)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={
            "Content-Disposition": inline_disposition(f"{code}_qr.png")
        }
    )
