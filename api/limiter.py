"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (mounted as middleware) and api/routes/auth.py
(per-route limit on login). A single shared instance means all routes share
one in-memory counter store.

slowapi hands a dynamic limit provider the client key, not the request, so
the settings object built at startup is registered here by the lifespan via
configure_limits().
"""

from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import Settings, get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")

_settings: Optional[Settings] = None


def configure_limits(settings: Settings) -> None:
    """Use `settings` for limit lookups and start from empty counters."""
    global _settings
    _settings = settings
    limiter.reset()


def login_rate_limit() -> str:
    """Limit string for POST /auth/login, read at request time."""
    return (_settings or get_settings()).login_rate_limit
