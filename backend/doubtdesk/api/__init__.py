"""API module."""

from .doubts import router as doubts_router
from .sessions import router as sessions_router

__all__ = ['doubts_router', 'sessions_router']
