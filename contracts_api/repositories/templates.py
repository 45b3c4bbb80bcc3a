from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime, timezone
from typing import Optional, List

from contracts_api.models.contract_template import ContractTemplate
from contracts_api.schemas.template import TemplateConfig


class TemplateRepository:
    """Saved template configurations keyed by template key."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> Optional[ContractTemplate]:
        result = await self.db.execute(select(ContractTemplate).where(ContractTemplate.key == key))
        return result.scalar_one_or_none()

    async def list(self) -> List[ContractTemplate]:
        result = await self.db.execute(
            select(ContractTemplate).order_by(ContractTemplate.position, ContractTemplate.id)
        )
        return list(result.scalars().all())

    async def put(self, key: str, config: TemplateConfig, position: Optional[int] = None) -> ContractTemplate:
        template = await self.get(key)
        if template is None:
            if position is None:
                result = await self.db.execute(select(func.max(ContractTemplate.position)))
                position = (result.scalar() or 0) + 1
            template = ContractTemplate(key=key, position=position)
            self.db.add(template)

        template.name = config.name
        template.fields = list(config.fields)
        template.show_header = config.show_header
        template.show_customer_info = config.show_customer_info
        template.show_company_info = config.show_company_info
        template.show_footer = config.show_footer
        template.show_signature = config.show_signature
        template.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return template
