"""
Route modules for the Trader's Journal API.

This package contains modular route definitions split by functionality.
"""

from .admin import router as admin_router
from .analysis import router as analysis_router
from .auth import router as auth_router
from .captcha import router as captcha_router
from .messages import router as messages_router
from .stats import router as stats_router
from .system import router as system_router
from .trades import router as trades_router

__all__ = [
    'admin_router',
    'analysis_router',
    'auth_router',
    'captcha_router',
    'messages_router',
    'stats_router',
    'system_router',
    'trades_router',
]
