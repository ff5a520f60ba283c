"""
API v1 package.

Contains versioned API routes for sign-up and user administration.
"""

from src.api.v1.routes import router

__all__ = ["router"]
