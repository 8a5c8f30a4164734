"""
API Routers package.

Each module contains a FastAPI router for a specific domain.
"""

from .product_match import router as product_match_router

__all__ = [
    "product_match_router",
]
