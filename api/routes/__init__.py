"""
API Routes Package

This package contains route handlers organized by feature:
- authentication.py: POST /authenticate (face search against the staff collection)
"""

from api.routes.authentication import router as authentication_router

__all__ = [
    "authentication_router",
]
