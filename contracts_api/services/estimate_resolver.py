"""
Estimate Resolver

Single ``resolve(estimate_no)`` capability with a primary/fallback chain:
the estimate API when one is configured, then the local ``saved_estimates``
copy. Also writes the "contracted" status back to the local copy.
"""

import httpx
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from contracts_api.config import settings
from contracts_api.models.estimate import CONTRACTED_STATUS
from contracts_api.repositories.estimates import SavedEstimateRepository
from contracts_api.schemas.estimate import Estimate

logger = logging.getLogger(__name__)


class HttpEstimateSource:
    """Estimate API client (``GET /estimates?estimateNo=``)."""

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
    def from_settings(cls) -> Optional["HttpEstimateSource"]:
        if not settings.ESTIMATE_API_URL:
            return None
        return cls(settings.ESTIMATE_API_URL, timeout=settings.ESTIMATE_API_TIMEOUT)

    async def fetch(self, estimate_no: str) -> Optional[Dict[str, Any]]:
        """Return the estimate document, or None when unavailable.

        Failures are logged and reported as "not found" so the caller can
        fall back to the next source.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(f"{self.base_url}/estimates", params={"estimateNo": estimate_no})
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Estimate API lookup failed for {estimate_no}: {e}")
            return None

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if isinstance(candidate, dict) and candidate.get("estimateNo") == estimate_no:
                return candidate
        return None


class EstimateResolver:
    """Resolve estimates from the estimate API, falling back to the local copy."""

    def __init__(self, db: AsyncSession, http_source: Optional[HttpEstimateSource] = None):
        self.db = db
        self.http_source = http_source
        self.saved = SavedEstimateRepository(db)

    async def resolve(self, estimate_no: str) -> Optional[Estimate]:
        if not estimate_no:
            return None

        if self.http_source is not None:
            document = await self.http_source.fetch(estimate_no)
            if document:
                logger.debug(f"Estimate {estimate_no} resolved from estimate API")
                return Estimate.model_validate(document)

        entry = await self.saved.get(estimate_no)
        if entry and entry.payload:
            logger.debug(f"Estimate {estimate_no} resolved from saved estimates")
            return Estimate.model_validate(entry.payload)

        return None

    async def mark_contracted(self, estimate_no: str) -> bool:
        """Set the contracted status on the local copy. Does not commit."""
        updated = await self.saved.set_status(estimate_no, CONTRACTED_STATUS)
        if not updated:
            logger.info(f"No saved copy of estimate {estimate_no} to mark as contracted")
        return updated
