"""Server-rendered web views."""

from .routes import router

__all__ = ["router"]
