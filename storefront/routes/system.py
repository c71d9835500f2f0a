from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from storefront.dependencies.catalog import get_cache
from storefront.schemas.system import (
    CacheInvalidateResponse,
    CacheStats,
    HealthCheckResponse,
    SystemMetricsResponse,
)
from storefront.services.cache import TTLCache

router = APIRouter(tags=["System"])


def _uptime(request: Request, now: datetime) -> float:
    start_time = getattr(request.app.state, "start_time", now)
    return (now - start_time).total_seconds()


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, cache: TTLCache = Depends(get_cache)):
    """
    Lightweight public health check. Does not call the catalog API.
    """
    now = datetime.now(timezone.utc)
    return HealthCheckResponse(
        status="ok",
        now=now,
        uptime_seconds=_uptime(request, now),
        cache_entries=len(cache),
    )


@router.get("/metrics", response_model=SystemMetricsResponse)
def system_metrics(request: Request, cache: TTLCache = Depends(get_cache)):
    """
    In-process request counters from the metrics middleware plus cache stats.
    """
    now = datetime.now(timezone.utc)

    metrics = getattr(request.app.state, "metrics", None) or {}
    requests_count = int(metrics.get("requests", 0))
    total_response_ms = float(metrics.get("total_response_ms", 0.0))
    avg_response_ms = (total_response_ms / requests_count) if requests_count > 0 else None

    stats = cache.stats()
    lookups = stats["hits"] + stats["misses"]
    hit_rate = (stats["hits"] / lookups) * 100.0 if lookups > 0 else None

    return SystemMetricsResponse(
        uptime_seconds=_uptime(request, now),
        now=now,
        requests_count=requests_count,
        avg_response_ms=avg_response_ms,
        slow_requests=int(metrics.get("slow_requests", 0)),
        cache=CacheStats(hit_rate=hit_rate, **stats),
    )


@router.post("/cache/invalidate", response_model=CacheInvalidateResponse)
def invalidate_cache(cache: TTLCache = Depends(get_cache)):
    dropped = len(cache)
    cache.clear()
    return CacheInvalidateResponse(message="Cache cleared", entries_dropped=dropped)
