from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional, List

from contracts_api.models.contract import Contract


class ContractRepository:
    """Contract collection keyed by id. Never commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, contract_id: int) -> Optional[Contract]:
        result = await self.db.execute(select(Contract).where(Contract.id == contract_id))
        return result.scalar_one_or_none()

    async def get_by_estimate(self, estimate_no: str) -> Optional[Contract]:
        result = await self.db.execute(
            select(Contract)
            .where(Contract.estimate_no == estimate_no)
            .order_by(Contract.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list(self, status: Optional[str] = None) -> List[Contract]:
        """All contracts, newest first, optionally restricted to one status."""
        query = select(Contract)
        if status:
            query = query.where(Contract.status == status)
        query = query.order_by(Contract.created_at.desc(), Contract.id.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def contract_numbers_with_prefix(self, prefix: str) -> set[str]:
        result = await self.db.execute(
            select(Contract.contract_number).where(Contract.contract_number.like(f"{prefix}%"))
        )
        return set(result.scalars().all())

    async def max_id(self) -> int:
        result = await self.db.execute(select(func.max(Contract.id)))
        return result.scalar() or 0

    async def put(self, contract: Contract) -> Contract:
        self.db.add(contract)
        await self.db.flush()
        return contract

    async def delete(self, contract: Contract) -> None:
        await self.db.delete(contract)
        await self.db.flush()
