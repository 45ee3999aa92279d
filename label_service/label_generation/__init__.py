"""
Label generation package: sheet geometry, QR encoding and PDF rendering.
"""

from label_service.label_generation.geometry import SheetLayout, get_layout, LAYOUT_PROFILES
from label_service.label_generation.qr_generator import QRGenerator
from label_service.label_generation.pdf_layout import LabelStyle, SheetRenderer

__all__ = ["SheetLayout", "get_layout", "LAYOUT_PROFILES", "QRGenerator", "LabelStyle", "SheetRenderer"]
