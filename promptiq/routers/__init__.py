"""
promptiq.routers package

Each module exposes ``router``; ``promptiq.main`` mounts them under /api.
"""

from .generate import router as generate_router
from .prompts import router as prompts_router
from .share import router as share_router
from .users import router as users_router
from .waitlist import router as waitlist_router

__all__ = [
    "generate_router",
    "prompts_router",
    "share_router",
    "users_router",
    "waitlist_router",
]
