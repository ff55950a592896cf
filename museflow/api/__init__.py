"""HTTP surface: routes, response schemas and middleware."""

from museflow.api.routes import router

__all__ = ["router"]
