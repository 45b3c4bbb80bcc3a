"""
Contract Template Store

Named document templates: an ordered list of line-item output fields plus
section toggles. The three built-in templates are always listed; saved
rows override them by key. Rows seeded under other keys follow in
position order.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List
import logging

from contracts_api.exceptions import NotFoundError
from contracts_api.models.contract_template import ContractTemplate
from contracts_api.repositories.templates import TemplateRepository
from contracts_api.schemas.template import TemplateConfig, TemplateEntry
from contracts_api.services.contract_fields import all_field_keys

logger = logging.getLogger(__name__)


DEFAULT_TEMPLATES: Dict[str, TemplateConfig] = {
    "template1": TemplateConfig(
        name="기본 템플릿",
        fields=["productName", "quantity", "totalPrice"],
    ),
    "template2": TemplateConfig(
        name="상세 템플릿",
        fields=["brand", "productCode", "productName", "width", "details", "quantity", "totalPrice"],
    ),
    "template3": TemplateConfig(
        name="전체 템플릿",
        fields=all_field_keys(),
    ),
}

DEFAULT_TEMPLATE_KEY = "template1"


def _entry_from_row(row: ContractTemplate) -> TemplateEntry:
    return TemplateEntry(
        key=row.key,
        name=row.name,
        fields=list(row.fields or []),
        show_header=row.show_header,
        show_customer_info=row.show_customer_info,
        show_company_info=row.show_company_info,
        show_footer=row.show_footer,
        show_signature=row.show_signature,
        is_default=row.key in DEFAULT_TEMPLATES,
    )


class ContractTemplateStore:
    """Service class for template configuration."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.templates = TemplateRepository(db)

    async def list_templates(self) -> List[TemplateEntry]:
        """All templates: built-in keys first (possibly customized), then custom keys."""
        saved = {row.key: row for row in await self.templates.list()}

        entries = []
        for key, default in DEFAULT_TEMPLATES.items():
            row = saved.pop(key, None)
            if row is not None:
                entries.append(_entry_from_row(row))
            else:
                entries.append(TemplateEntry(key=key, is_default=True, **default.model_dump()))

        entries.extend(_entry_from_row(row) for row in saved.values())
        return entries

    async def select_template(self, key: str) -> TemplateEntry:
        """Return the template stored under ``key``."""
        for entry in await self.list_templates():
            if entry.key == key:
                return entry
        raise NotFoundError("Template", key, operation="select_template")

    async def update_template(self, key: str, config: TemplateConfig) -> TemplateEntry:
        """Replace a template's fields and toggles and persist immediately.

        Field keys are stored verbatim, including keys outside the catalog.
        """
        position = None
        if key in DEFAULT_TEMPLATES:
            position = list(DEFAULT_TEMPLATES).index(key)
        elif await self.templates.get(key) is None:
            raise NotFoundError("Template", key, operation="update_template")

        row = await self.templates.put(key, config, position=position)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Saved contract template {key} ({len(config.fields)} fields)")
        return _entry_from_row(row)
