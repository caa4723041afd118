"""
Routers package for FastAPI endpoints.

Organized by domain:
- extract: URL and upload price list extraction
"""

from . import extract

__all__ = ["extract"]
