"""
Shared slowapi limiter.
Endpoints decorate with ``limiter.limit(...)``; main registers the exceeded handler.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from fxwidget.core.config import settings


limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
