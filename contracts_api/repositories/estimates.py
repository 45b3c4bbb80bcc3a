from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional, List, Any, Dict

from contracts_api.models.estimate import AwaitingEstimate, SavedEstimate


class AwaitingEstimateRepository:
    """Approved estimates waiting for a contract, keyed by estimate number."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, estimate_no: str) -> Optional[AwaitingEstimate]:
        return await self.db.get(AwaitingEstimate, estimate_no)

    async def list(self) -> List[AwaitingEstimate]:
        result = await self.db.execute(
            select(AwaitingEstimate).order_by(AwaitingEstimate.approved_at.desc())
        )
        return list(result.scalars().all())

    async def estimate_numbers_with_prefix(self, prefix: str) -> set[str]:
        result = await self.db.execute(
            select(AwaitingEstimate.estimate_no).where(AwaitingEstimate.estimate_no.like(f"{prefix}%"))
        )
        return set(result.scalars().all())

    async def put(self, estimate_no: str, payload: Dict[str, Any]) -> AwaitingEstimate:
        """Insert or replace the awaiting entry for ``estimate_no``."""
        entry = await self.get(estimate_no)
        now = datetime.now(timezone.utc)
        if entry:
            entry.payload = payload
            entry.approved_at = now
        else:
            entry = AwaitingEstimate(estimate_no=estimate_no, payload=payload, approved_at=now)
            self.db.add(entry)
        await self.db.flush()
        return entry

    async def delete(self, estimate_no: str) -> bool:
        entry = await self.get(estimate_no)
        if not entry:
            return False
        await self.db.delete(entry)
        await self.db.flush()
        return True


class SavedEstimateRepository:
    """Local copy of estimate documents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, estimate_no: str) -> Optional[SavedEstimate]:
        return await self.db.get(SavedEstimate, estimate_no)

    async def estimate_numbers_with_prefix(self, prefix: str) -> set[str]:
        result = await self.db.execute(
            select(SavedEstimate.estimate_no).where(SavedEstimate.estimate_no.like(f"{prefix}%"))
        )
        return set(result.scalars().all())

    async def put(self, estimate_no: str, payload: Dict[str, Any], status: Optional[str] = None) -> SavedEstimate:
        entry = await self.get(estimate_no)
        now = datetime.now(timezone.utc)
        if entry:
            entry.payload = payload
            if status is not None:
                entry.status = status
            entry.updated_at = now
        else:
            entry = SavedEstimate(estimate_no=estimate_no, payload=payload, status=status, updated_at=now)
            self.db.add(entry)
        await self.db.flush()
        return entry

    async def set_status(self, estimate_no: str, status: str) -> bool:
        entry = await self.get(estimate_no)
        if not entry:
            return False
        entry.status = status
        # Keep the embedded document in step with the column
        entry.payload = {**(entry.payload or {}), "status": status}
        entry.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return True
