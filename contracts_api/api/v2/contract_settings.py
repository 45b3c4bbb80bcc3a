"""Contract Settings API - company profile, notice text, agreement checklist."""

from fastapi import APIRouter

from contracts_api.api.deps import DbSession
from contracts_api.schemas.template import AgreementItems, CompanyProfile, NoticeText
from contracts_api.services.contract_settings import ContractSettingsService

router = APIRouter()


@router.get("/company", response_model=CompanyProfile)
async def get_company_profile(db: DbSession):
    return await ContractSettingsService(db).get_company_profile()


@router.put("/company", response_model=CompanyProfile)
async def update_company_profile(profile: CompanyProfile, db: DbSession):
    return await ContractSettingsService(db).update_company_profile(profile)


@router.get("/notice", response_model=NoticeText)
async def get_notice_text(db: DbSession):
    return {"text": await ContractSettingsService(db).get_notice_text()}


@router.put("/notice", response_model=NoticeText)
async def update_notice_text(notice: NoticeText, db: DbSession):
    return {"text": await ContractSettingsService(db).update_notice_text(notice.text)}


@router.get("/agreement-items", response_model=AgreementItems)
async def get_agreement_items(db: DbSession):
    return {"items": await ContractSettingsService(db).get_agreement_items()}


@router.put("/agreement-items", response_model=AgreementItems)
async def update_agreement_items(items: AgreementItems, db: DbSession):
    return {"items": await ContractSettingsService(db).update_agreement_items(items.items)}
