"""
Awaiting Estimates Service

Approved estimates waiting for a contract. Intake is keyed by estimate
number: re-submitting an estimate replaces the waiting entry. Estimates
without a number get one from the identifier generator.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List
import logging

from contracts_api.config import settings
from contracts_api.exceptions import NotFoundError
from contracts_api.models.estimate import AwaitingEstimate
from contracts_api.repositories.estimates import AwaitingEstimateRepository, SavedEstimateRepository
from contracts_api.schemas.estimate import Estimate
from contracts_api.services.identifiers import generate_identifier, identifier_base
from contracts_api.utils.dates import business_today

logger = logging.getLogger(__name__)


class AwaitingEstimateService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.awaiting = AwaitingEstimateRepository(db)
        self.saved = SavedEstimateRepository(db)

    async def list(self) -> List[AwaitingEstimate]:
        return await self.awaiting.list()

    async def add(self, document: Dict[str, Any]) -> AwaitingEstimate:
        """Put an approved estimate on the awaiting list and keep a local copy."""
        estimate = Estimate.model_validate(document)

        if not estimate.estimate_no:
            estimate.estimate_no = await self._next_estimate_no()
        if estimate.total_amount is None:
            estimate.total_amount = estimate.rows_total
        if estimate.discounted_amount is None:
            estimate.discounted_amount = estimate.total_amount

        payload = estimate.to_document()
        entry = await self.awaiting.put(estimate.estimate_no, payload)
        await self.saved.put(estimate.estimate_no, payload, status=estimate.status)
        await self.db.commit()
        await self.db.refresh(entry)

        logger.info(f"Estimate {estimate.estimate_no} added to awaiting contracts")
        return entry

    async def remove(self, estimate_no: str) -> None:
        """Take an estimate off the awaiting list. The local copy is kept."""
        if not await self.awaiting.delete(estimate_no):
            raise NotFoundError("Awaiting estimate", estimate_no, operation="remove_awaiting_estimate")
        await self.db.commit()
        logger.info(f"Estimate {estimate_no} removed from awaiting contracts")

    async def _next_estimate_no(self) -> str:
        prefix = settings.ESTIMATE_NUMBER_PREFIX
        today = business_today()
        base = identifier_base(prefix, today)
        existing = await self.awaiting.estimate_numbers_with_prefix(base)
        existing |= await self.saved.estimate_numbers_with_prefix(base)
        return generate_identifier(prefix, today, existing)
