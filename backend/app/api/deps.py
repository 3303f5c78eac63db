"""FastAPI dependencies: the app's store container and settings.

Both live on ``app.state`` so each application instance (and each test)
works on its own stores.
"""
from fastapi import Request

from app.core.config import Settings
from app.db.session import ClinicDatabase


def get_db(request: Request) -> ClinicDatabase:
    """Get the in-memory store container."""
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
