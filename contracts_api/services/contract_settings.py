"""
Contract Settings Service

Company profile, footer notice and agreement checklist. Each is stored as
one ``system_settings`` category and falls back to a built-in default until
it has been saved.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from contracts_api.repositories.settings import SettingsRepository
from contracts_api.schemas.template import CompanyProfile

logger = logging.getLogger(__name__)


COMPANY_CATEGORY = "contract_company"
NOTICE_CATEGORY = "contract_notice"
AGREEMENT_ITEMS_CATEGORY = "contract_agreement_items"

DEFAULT_NOTICE_TEXT = "\n".join([
    "• 본 계약서는 발행일로부터 30일간 유효합니다.",
    "• 계약서에 명시되지 않은 추가 작업은 별도 협의가 필요합니다.",
    "• 설치 및 배송 조건은 별도 협의하시기 바랍니다.",
    "• 문의사항이 있으시면 언제든 연락주시기 바랍니다.",
])

DEFAULT_AGREEMENT_ITEMS = [
    "본 계약의 모든 내용을 숙지하였습니다.",
    "계약금 납부 후 계약이 확정됨을 이해하였습니다.",
    "취소 및 환불 규정에 동의합니다.",
    "제품의 설치 및 시공 일정은 협의 후 진행됨을 이해하였습니다.",
    "제품의 품질보증 기간 및 조건을 확인하였습니다.",
]


class ContractSettingsService:
    """Read and write contract rendering settings."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = SettingsRepository(db)

    async def get_company_profile(self) -> CompanyProfile:
        data = await self.settings.get(COMPANY_CATEGORY)
        return CompanyProfile(**data) if data else CompanyProfile()

    async def update_company_profile(self, profile: CompanyProfile) -> CompanyProfile:
        await self.settings.put(COMPANY_CATEGORY, profile.model_dump())
        await self.db.commit()
        logger.info("Updated contract company profile")
        return profile

    async def get_notice_text(self) -> str:
        data = await self.settings.get(NOTICE_CATEGORY)
        if data and data.get("text") is not None:
            return data["text"]
        return DEFAULT_NOTICE_TEXT

    async def update_notice_text(self, text: str) -> str:
        await self.settings.put(NOTICE_CATEGORY, {"text": text})
        await self.db.commit()
        logger.info("Updated contract notice text")
        return text

    async def get_agreement_items(self) -> List[str]:
        data = await self.settings.get(AGREEMENT_ITEMS_CATEGORY)
        if data and isinstance(data.get("items"), list):
            return list(data["items"])
        return list(DEFAULT_AGREEMENT_ITEMS)

    async def update_agreement_items(self, items: List[str]) -> List[str]:
        # Blank statements are dropped
        cleaned = [item.strip() for item in items if item and item.strip()]
        await self.settings.put(AGREEMENT_ITEMS_CATEGORY, {"items": cleaned})
        await self.db.commit()
        logger.info(f"Updated agreement checklist ({len(cleaned)} items)")
        return cleaned
