"""
API Routers package.

Each module contains a FastAPI router for a specific domain.
"""

from .voice import router as voice_router

__all__ = [
    "voice_router",
]
