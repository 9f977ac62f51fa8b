# backend/app/services/slots/redis_store.py
"""
Redis storage for computed slot grids.

Key format: slots:grid:{service_point_id}:{date}:{category_id|all}
Value: JSON list of TimeSlot dicts. "[]" marks "calculated, no slots".
TTL: settings.slots_cache_ttl_seconds.
"""

import json
from datetime import date

from redis import Redis

from .models import CoveringPost, TimeSlot


class SlotsRedisStore:
    """Redis storage wrapper for slot grids."""

    KEY_PREFIX = "slots:grid"

    def __init__(self, redis: Redis, ttl_seconds: int = 86400):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, service_point_id: int, dt: date, category_id: int | None) -> str:
        category = category_id if category_id is not None else "all"
        return f"{self.KEY_PREFIX}:{service_point_id}:{dt.isoformat()}:{category}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_grid(
        self,
        service_point_id: int,
        dt: date,
        category_id: int | None,
        grid: list[TimeSlot],
    ) -> None:
        """Store a calculated grid. Empty grid is stored as "[]"."""
        key = self._key(service_point_id, dt, category_id)
        payload = json.dumps([slot.to_dict() for slot in grid])
        self.redis.set(key, payload, ex=self.ttl_seconds)

    # ── Read ─────────────────────────────────────────────────────────────

    def get_grid(
        self,
        service_point_id: int,
        dt: date,
        category_id: int | None,
    ) -> list[TimeSlot] | None:
        """
        Get a cached grid.

        Returns:
            List of TimeSlot, or None on cache miss.
        """
        raw = self.redis.get(self._key(service_point_id, dt, category_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()

        return [
            TimeSlot(
                time=item["time"],
                available_posts=item["available_posts"],
                total_posts=item["total_posts"],
                covering_posts=tuple(
                    CoveringPost(**post) for post in item["covering_posts"]
                ),
            )
            for item in json.loads(raw)
        ]

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_grids(
        self,
        service_point_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached grids (all categories).

        Args:
            service_point_id: Service point ID
            dates: Specific dates, or None to delete all for the point.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = []
            for dt in dates:
                pattern = f"{self.KEY_PREFIX}:{service_point_id}:{dt.isoformat()}:*"
                keys.extend(self.redis.scan_iter(match=pattern))
        else:
            pattern = f"{self.KEY_PREFIX}:{service_point_id}:*"
            keys = list(self.redis.scan_iter(match=pattern))

        if not keys:
            return 0

        return self.redis.delete(*keys)
