# backend/app/services/slots/preview_client.py
"""
Debounced, request-superseding client for POST /slots/preview.

Editor → SchedulePreviewClient → Backend (same grid algorithm on the draft)

- Each call waits for `debounce_ms` of quiet before sending.
- A newer call cancels an older call still waiting or in flight.
- Every request gets a sequence number; a response whose number is no
  longer the latest is dropped, so a stale grid never overwrites a newer one.
"""

import asyncio
import logging
from typing import Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class SchedulePreviewClient:
    """Async preview client for one edit session."""

    def __init__(
        self,
        base_url: str,
        debounce_ms: int | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.debounce_ms = settings.preview_debounce_ms if debounce_ms is None else debounce_ms
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )
        self._seq = 0
        self._pending: asyncio.Task | None = None

    @property
    def latest_seq(self) -> int:
        return self._seq

    async def request_preview(self, draft: dict) -> Optional[dict]:
        """
        Request a grid for `draft`.

        Returns:
            Response JSON, or None when superseded by a newer call
            or when the request failed.
        """
        self._seq += 1
        seq = self._seq

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

        task = asyncio.create_task(self._debounced_send(seq, draft))
        self._pending = task

        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and seq != self._seq:
                logger.debug(f"Preview #{seq} superseded before response")
                return None
            raise

        if seq != self._seq:
            logger.debug(f"Preview #{seq} response discarded (latest is #{self._seq})")
            return None
        return result

    async def _debounced_send(self, seq: int, draft: dict) -> Optional[dict]:
        await asyncio.sleep(self.debounce_ms / 1000)

        try:
            resp = await self._client.post("/slots/preview", json=draft)
        except httpx.HTTPError as e:
            logger.error(f"Preview #{seq} request failed: {e}")
            return None

        if resp.status_code >= 400:
            logger.error(f"Preview #{seq} -> {resp.status_code}")
            return None

        return resp.json()

    async def aclose(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        await self._client.aclose()
