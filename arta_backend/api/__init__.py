"""HTTP layer (FastAPI)."""

from arta_backend.api.app import create_app

__all__ = ["create_app"]
