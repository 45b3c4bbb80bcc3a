"""Contract Templates API - output field selection and section toggles."""

from fastapi import APIRouter
from typing import List

from contracts_api.api.deps import DbSession
from contracts_api.schemas.template import OutputField, TemplateConfig, TemplateEntry, TemplateListResponse
from contracts_api.services.contract_fields import OUTPUT_FIELDS
from contracts_api.services.template_store import ContractTemplateStore

router = APIRouter()


@router.get("", response_model=TemplateListResponse)
async def list_templates(db: DbSession):
    return {"items": await ContractTemplateStore(db).list_templates()}


@router.get("/fields", response_model=List[OutputField])
async def list_output_fields():
    """Catalog of line-item fields a template can select."""
    return [{"key": key, "label": label} for key, label in OUTPUT_FIELDS]


@router.get("/{key}", response_model=TemplateEntry)
async def get_template(key: str, db: DbSession):
    return await ContractTemplateStore(db).select_template(key)


@router.put("/{key}", response_model=TemplateEntry)
async def update_template(key: str, config: TemplateConfig, db: DbSession):
    """Replace a template's fields and toggles."""
    return await ContractTemplateStore(db).update_template(key, config)
