"""HTTP surface: FastAPI app factory, middleware, routers and error taxonomy."""

from .app import create_app

__all__ = ["create_app"]
