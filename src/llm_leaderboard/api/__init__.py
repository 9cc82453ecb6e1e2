"""
HTTP API - FastAPI application, routers and request/response schemas.
"""

from .app import create_app

__all__ = ["create_app"]
