import logging
import time
import uuid
from typing import Any, Dict, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _request_context(request: Request, request_id: str, started: float) -> Dict[str, Any]:
    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "duration_ms": _elapsed_ms(started),
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log its outcome, including dashboard cache status."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            context = _request_context(request, request_id, started)
            logger.error(f"[{request_id}] {request.method} {request.url.path} failed: {exc}", extra=context)
            raise

        cache_status: Optional[str] = getattr(request.state, "cache_status", None)
        context = _request_context(request, request_id, started)
        context.update(status_code=response.status_code, cache_status=cache_status)

        summary = f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} in {context['duration_ms']}ms"
        if cache_status:
            summary += f" (cache {cache_status.lower()})"
        logger.log(logging.WARNING if response.status_code >= 400 else logging.INFO, summary, extra=context)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
