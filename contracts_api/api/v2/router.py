from fastapi import APIRouter
from contracts_api.api.v2 import (
    contracts,
    workflows,
    templates,
    contract_settings,
    estimates,
)

api_router = APIRouter()

# Include all v2 routers
api_router.include_router(contracts.router, prefix="/contracts", tags=["contracts"])
api_router.include_router(workflows.router, prefix="/contract-workflows", tags=["contract-workflows"])
api_router.include_router(templates.router, prefix="/contract-templates", tags=["contract-templates"])
api_router.include_router(contract_settings.router, prefix="/contract-settings", tags=["contract-settings"])
api_router.include_router(estimates.router, prefix="/estimates", tags=["estimates"])
