import functools
import inspect
import logging
from typing import Optional, Callable
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from app.core.cache import cache
from app.core.config import settings

logger = logging.getLogger(__name__)

def cache_endpoint(ttl: int = 300, key_prefix: Optional[str] = None):
    """Cache a JSON-encoded endpoint result per user under ``user:<id>:<prefix>``."""
    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"cache_endpoint requires an async endpoint, got {func.__name__}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.CACHE_ENABLED:
                return await func(*args, **kwargs)

            cache_key = _generate_cache_key(func.__name__, kwargs, key_prefix)
            request = kwargs.get("request")

            cached_value = await cache.get(cache_key)
            if cached_value is not None:
                if isinstance(request, Request):
                    request.state.cache_status = "HIT"
                logger.debug(f"Cache HIT for key: {cache_key}")
                return cached_value

            result = await func(*args, **kwargs)

            if result is not None:
                await cache.set(cache_key, jsonable_encoder(result), ttl=ttl)
                if isinstance(request, Request):
                    request.state.cache_status = "MISS"
                logger.debug(f"Cache MISS for key: {cache_key} (stored with TTL {ttl}s)")

            return result

        return wrapper

    return decorator


def _generate_cache_key(func_name: str, kwargs: dict, prefix: Optional[str] = None) -> str:
    name = prefix or func_name
    current_user = kwargs.get("current_user")
    key_parts = [cache.user_key(current_user.id, name)] if current_user is not None else [name]

    skip_keys = {"db", "current_user", "request"}
    for k, v in sorted(kwargs.items()):
        if k not in skip_keys:
            key_parts.append(f"{k}={v}")

    return ":".join(key_parts)
