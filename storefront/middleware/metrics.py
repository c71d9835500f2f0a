# storefront/middleware/metrics.py
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 500.0


def new_metrics() -> dict:
    return {"requests": 0, "total_response_ms": 0.0, "slow_requests": 0}


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Per-process request counters kept on app.state.metrics.
    Cache counters live on the cache itself (see /metrics).
    NOTE: app.state may not exist yet when the middleware stack is built,
    so the counters are created lazily on the first request.
    """

    async def dispatch(self, request: Request, call_next):
        metrics = getattr(request.app.state, "metrics", None)
        if metrics is None:
            metrics = request.app.state.metrics = new_metrics()

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        metrics["requests"] += 1
        metrics["total_response_ms"] += elapsed_ms
        if elapsed_ms > SLOW_REQUEST_MS:
            metrics["slow_requests"] += 1
            logger.warning("%s %s took %.1f ms", request.method, request.url.path, elapsed_ms)

        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
        return response
