"""Contract Workflows API - payment, agreement and finalize steps."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from typing import Optional
import logging

from contracts_api.api.deps import DbSession, Reconciler, Resolver
from contracts_api.schemas.contract import ContractResponse
from contracts_api.schemas.schedule import ScheduleSyncResult
from contracts_api.schemas.workflow import (
    AgreementInput,
    PaymentInput,
    WorkflowResponse,
    WorkflowStartRequest,
)
from contracts_api.services.payment_workflow import ContractWorkflowService
from contracts_api.services.schedule_reconciler import sync_contract_schedule

logger = logging.getLogger(__name__)
router = APIRouter()


class FinalizeResponse(BaseModel):
    workflow: WorkflowResponse
    contract: ContractResponse
    schedule_sync: Optional[ScheduleSyncResult] = None
    warning: Optional[str] = None


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def start_workflow(request: WorkflowStartRequest, db: DbSession, resolver: Resolver):
    """Start contract creation for an approved estimate."""
    service = ContractWorkflowService(db, resolver=resolver)
    workflow = await service.start(request)
    return await service.describe(workflow)


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(workflow_id: str, db: DbSession):
    service = ContractWorkflowService(db)
    workflow = await service.get(workflow_id)
    return await service.describe(workflow)


@router.post("/{workflow_id}/payment", response_model=WorkflowResponse)
async def submit_payment(workflow_id: str, data: PaymentInput, db: DbSession):
    """Submit payment terms. Unparseable values keep their previous value."""
    service = ContractWorkflowService(db)
    workflow = await service.submit_payment(workflow_id, data)
    return await service.describe(workflow)


@router.post("/{workflow_id}/back", response_model=WorkflowResponse)
async def go_back(workflow_id: str, db: DbSession):
    """Return to the payment step; the payment draft keeps the last submission."""
    service = ContractWorkflowService(db)
    workflow = await service.go_back(workflow_id)
    return await service.describe(workflow)


@router.post("/{workflow_id}/agreement", response_model=WorkflowResponse)
async def submit_agreement(workflow_id: str, data: AgreementInput, db: DbSession):
    service = ContractWorkflowService(db)
    workflow = await service.submit_agreement(workflow_id, data.method, data.signature_data)
    return await service.describe(workflow)


@router.post("/{workflow_id}/finalize", response_model=FinalizeResponse)
async def finalize_workflow(
    workflow_id: str,
    db: DbSession,
    resolver: Resolver,
    reconciler: Reconciler,
    confirm_schedule_change: bool = False,
):
    """Create the contract (or update it for a final estimate).

    A measurement date on the payment creates or updates the measurement
    schedule; schedule failures come back as a warning.
    """
    service = ContractWorkflowService(db, resolver=resolver)
    try:
        workflow, contract = await service.finalize(workflow_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error finalizing workflow {workflow_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    sync_result, warning = await sync_contract_schedule(reconciler, contract, confirm_schedule_change)
    return {
        "workflow": await service.describe(workflow),
        "contract": ContractResponse.model_validate(contract),
        "schedule_sync": sync_result,
        "warning": warning,
    }
