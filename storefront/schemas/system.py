from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class HealthCheckResponse(BaseModel):
    status: str
    now: datetime
    uptime_seconds: float
    cache_entries: int


class CacheStats(BaseModel):
    hits: int
    misses: int
    stale_hits: int
    fetch_errors: int
    entries: int
    hit_rate: Optional[float] = None


class SystemMetricsResponse(BaseModel):
    uptime_seconds: float
    now: datetime

    # middleware counters
    requests_count: int
    avg_response_ms: Optional[float] = None
    slow_requests: int = 0

    cache: CacheStats


class CacheInvalidateResponse(BaseModel):
    message: str
    entries_dropped: int
