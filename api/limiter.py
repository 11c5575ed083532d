"""
api/limiter.py -- Builds the slowapi Limiter for one app instance.

Counters live in memory and are keyed on the client address, so limits are
per app and per IP. Two apps built in the same process never share counters
or the on/off switch. api/routes/v1/auth.py caps POST /login at
LOGIN_RATE_LIMIT; no other route is limited.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import Settings

LOGIN_RATE_LIMIT = "10/minute"


def make_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
        enabled=settings.rate_limit_enabled,
    )
