# notifier/routers/__init__.py
"""
API routers.
"""

from notifier.routers.notifications import router as notifications_router
from notifier.routers.text import router as text_router

__all__ = [
    "notifications_router",
    "text_router",
]
