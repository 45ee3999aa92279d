"""
Code allocation package.
"""

from label_service.allocation.allocator import CodeAllocator, PREFIX_PATTERN

__all__ = ["CodeAllocator", "PREFIX_PATTERN"]
