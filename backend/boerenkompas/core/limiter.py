"""Rate limiter shared by the API routers; keyed on client address."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from boerenkompas.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.APP_ENV != "test")
