"""
Pytest configuration and fixtures.
"""

import io

import pdfplumber
import pytest
from fastapi.testclient import TestClient

from label_service.allocation import CodeAllocator
from label_service.database import LabelStore, get_store
from label_service.label_generation import LabelStyle, SheetRenderer, get_layout
from label_service.main import app
from label_service.routes.label_generation_routes import get_renderer


@pytest.fixture
def db_path(tmp_path):
    """Path of a fresh ledger file."""
    return tmp_path / "labels.db"


@pytest.fixture
def store(db_path):
    """Empty ledger store backed by a temporary file."""
    label_store = LabelStore(db_path, busy_timeout=30.0)
    label_store.ensure_tables_exist()
    yield label_store
    label_store.dispose()


@pytest.fixture
def allocator(store):
    """Allocator issuing 6-digit codes."""
    return CodeAllocator(store, width=6, separator="-", max_batch_size=1000)


@pytest.fixture
def layout():
    """PLS601 calibrated layout."""
    return get_layout("pls601")


@pytest.fixture
def style():
    """Default label style, independent of environment settings."""
    return LabelStyle()


@pytest.fixture
def renderer(layout, style):
    """Renderer producing byte-stable PDFs."""
    return SheetRenderer(layout=layout, style=style, invariant=True)


@pytest.fixture
def client(store, renderer):
    """FastAPI test client wired to the temporary ledger."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_renderer] = lambda: renderer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def open_pdf():
    """Open PDF bytes with pdfplumber; closes every opened document afterwards."""
    opened = []

    def _open(pdf_bytes: bytes):
        pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        opened.append(pdf)
        return pdf

    yield _open

    for pdf in opened:
        pdf.close()
