"""
Schedule Store Client

HTTP client for the external appointment store:

- ``GET  /schedules``       all entries
- ``POST /schedules``       create an entry
- ``PUT  /schedules/{id}``  replace an entry

Errors are not handled here: ``httpx.HTTPError`` (timeouts, connection
errors, non-2xx responses) and undecodable bodies propagate to the caller.
"""

import httpx
import logging
from typing import Any, Dict, List, Optional

from contracts_api.config import settings

logger = logging.getLogger(__name__)


class ScheduleStoreClient:
    """Client for the schedule document collection."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "ScheduleStoreClient":
        return cls(settings.SCHEDULE_API_URL, timeout=settings.SCHEDULE_API_TIMEOUT)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def list_schedules(self) -> List[Dict[str, Any]]:
        async with self._client() as client:
            resp = await client.get("/schedules")
            resp.raise_for_status()
            data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"expected a list of schedules, got {type(data).__name__}")
        return [entry for entry in data if isinstance(entry, dict)]

    async def create_schedule(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        async with self._client() as client:
            resp = await client.post("/schedules", json=entry)
            resp.raise_for_status()
        logger.info(f"Created schedule {entry.get('id')} for estimate {entry.get('estimateNo')}")
        return _json_object(resp)

    async def update_schedule(self, schedule_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        async with self._client() as client:
            resp = await client.put(f"/schedules/{schedule_id}", json=entry)
            resp.raise_for_status()
        logger.info(f"Updated schedule {schedule_id} for estimate {entry.get('estimateNo')}")
        return _json_object(resp)


def _json_object(resp: httpx.Response) -> Dict[str, Any]:
    """Decoded body when it is a JSON object; write endpoints may return nothing."""
    if not resp.content:
        return {}
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
