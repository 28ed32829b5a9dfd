"""Boundary-tag heap allocator over a byte buffer, with a small demo command."""

__version__ = "0.1.0"
__all__ = ["heap", "demo"]