from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

limiter = Limiter(key_func=get_remote_address)

# Every /api route shares this one bucket per client address.
api_limit = limiter.shared_limit(
    lambda: get_settings().rate_limit_api,
    scope="api",
    error_message=RATE_LIMIT_MESSAGE,
)
