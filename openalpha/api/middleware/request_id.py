"""
Correlation IDs and slow-request warnings.

The client may send X-Request-ID; otherwise one is minted. The ID is echoed
on the response and stamped on every log line for the request. Routes that
wait on the language model get a longer slow threshold than store-only ones.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from openalpha.logging_config import get_logger, request_id_var, user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_STORE_MS = 500
SLOW_COMPLETION_MS = 5000
_COMPLETION_SUFFIXES = ("/chat", "/quiz")


def slow_threshold_ms(path: str) -> int:
    return SLOW_COMPLETION_MS if path.rstrip("/").endswith(_COMPLETION_SUFFIXES) else SLOW_STORE_MS


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        request_token = request_id_var.set(request_id)
        user_token = user_id_var.set(None)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if elapsed_ms > slow_threshold_ms(request.url.path):
                logger.warning(
                    "Slow request %s %s",
                    request.method,
                    request.url.path,
                    extra={"elapsed_ms": round(elapsed_ms, 1)},
                )
            user_id_var.reset(user_token)
            request_id_var.reset(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
