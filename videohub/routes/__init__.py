from .auth import router as auth_router
from .accounts import router as accounts_router
from .videos import router as videos_router
from .admin import router as admin_router
from .youtube import router as youtube_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "accounts_router",
    "videos_router",
    "admin_router",
    "youtube_router",
    "health_router",
]
