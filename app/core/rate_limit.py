"""Shared slowapi limiter, keyed on client address."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def calculator_limit() -> str:
    return get_settings().rate_limit
