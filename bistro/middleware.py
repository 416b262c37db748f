"""
HTTP Middleware

Registered by the app factory in this order (outermost first):
    CORS -> request logging -> session decoding -> error conversion -> routes
"""

import logging
import time

from fastapi import Request

logger = logging.getLogger("bistro.requests")


async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({elapsed_ms:.1f}ms)"
    )
    return response


async def decode_session(request: Request, call_next):
    """Attach the decoded session cookie to ``request.state.session``."""
    request.state.session = request.app.state.session_cookie.read(request)
    return await call_next(request)
