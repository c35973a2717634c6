"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.companies import router as companies_router

__all__ = [
    "companies_router",
]
