# backend/app/services/slots/invalidator.py
"""
Cache invalidation for service point grids.

Triggers:
✓ Service point work_schedule changed → invalidate all dates
✓ Service point deactivated            → invalidate all dates
✓ Post created/updated                 → invalidate all dates
✓ Seasonal schedule created/changed    → invalidate all dates

Does NOT trigger:
✗ Booking created / status changed (grid ignores bookings)
"""

import logging
from datetime import date, timedelta

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_service_point_cache(
    redis: Redis | None,
    service_point_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached grids for a service point.

    Args:
        redis: Redis client, or None when caching is disabled
        service_point_id: Service point ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = SlotsRedisStore(redis)
    try:
        deleted = store.delete_grids(service_point_id, dates)
    except RedisError:
        logger.exception(f"Failed to invalidate slots cache for service point {service_point_id}")
        return 0

    logger.info(f"Invalidated {deleted} slot grid(s) for service point {service_point_id}")
    return deleted


def get_affected_dates(
    date_start: date,
    date_end: date,
) -> list[date]:
    """
    Get list of dates in range [date_start, date_end].

    Args:
        date_start: Start date (inclusive)
        date_end: End date (inclusive)

    Returns:
        List of dates
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)

    return dates
