"""Route modules."""

from .account import router as account_router
from .admin import router as admin_router
from .users import router as users_router

__all__ = ["account_router", "admin_router", "users_router"]
