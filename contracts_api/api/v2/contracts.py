"""Contracts API - contract records, edits and document rendering.

Features:
- List with case-sensitive search and status filter
- Lookup by id or estimate number
- Field-level edits with balance recomputation and schedule sync
- Permanent delete
- Renderable document sections per template
"""

from fastapi import APIRouter, HTTPException, status, Query
from typing import Optional
import logging

from contracts_api.api.deps import DbSession, Reconciler, Resolver
from contracts_api.schemas.contract import (
    ContractListResponse,
    ContractMutationResponse,
    ContractResponse,
    ContractUpdate,
)
from contracts_api.schemas.template import ContractDocument
from contracts_api.exceptions import NotFoundError
from contracts_api.services.contract_document import ContractDocumentService
from contracts_api.services.contract_lifecycle import ContractLifecycleManager
from contracts_api.services.schedule_reconciler import sync_contract_schedule

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ContractListResponse)
async def list_contracts(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Contract status, or 'all'"),
):
    """List contracts, newest first."""
    manager = ContractLifecycleManager(db)
    contracts = await manager.list_filtered(search, status)

    offset = (page - 1) * page_size
    return {
        "items": [ContractResponse.model_validate(c) for c in contracts[offset:offset + page_size]],
        "total": len(contracts),
        "page": page,
        "page_size": page_size,
    }


@router.get("/by-estimate/{estimate_no}", response_model=ContractResponse)
async def get_contract_by_estimate(estimate_no: str, db: DbSession):
    """Contract on file for an estimate number (final variants resolve to their origin)."""
    contract = await ContractLifecycleManager(db).find_by_estimate(estimate_no)
    if not contract:
        raise NotFoundError("Contract for estimate", estimate_no, operation="find_by_estimate")
    return contract


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(contract_id: int, db: DbSession):
    """Get a specific contract."""
    return await ContractLifecycleManager(db).get(contract_id)


@router.patch("/{contract_id}", response_model=ContractMutationResponse)
async def update_contract(
    contract_id: int,
    update_data: ContractUpdate,
    db: DbSession,
    resolver: Resolver,
    reconciler: Reconciler,
    confirm_schedule_change: bool = Query(False),
):
    """Update a contract.

    The remaining balance is always recomputed. When the contract carries a
    measurement date the schedule store is reconciled afterwards; a schedule
    failure is returned as a warning and does not undo the edit.
    """
    try:
        manager = ContractLifecycleManager(db, resolver=resolver)
        contract = await manager.update(contract_id, update_data)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating contract {contract_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    sync_result, warning = await sync_contract_schedule(reconciler, contract, confirm_schedule_change)
    return {
        "contract": ContractResponse.model_validate(contract),
        "schedule_sync": sync_result,
        "warning": warning,
    }


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(contract_id: int, db: DbSession):
    """Delete a contract permanently."""
    try:
        await ContractLifecycleManager(db).delete(contract_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting contract {contract_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{contract_id}/schedule-sync", response_model=ContractMutationResponse)
async def sync_schedule(
    contract_id: int,
    db: DbSession,
    reconciler: Reconciler,
    confirm_schedule_change: bool = Query(False),
):
    """Reconcile the measurement schedule for a contract without editing it."""
    contract = await ContractLifecycleManager(db).get(contract_id, operation="sync_schedule")
    sync_result, warning = await sync_contract_schedule(reconciler, contract, confirm_schedule_change)
    return {
        "contract": ContractResponse.model_validate(contract),
        "schedule_sync": sync_result,
        "warning": warning,
    }


@router.get("/{contract_id}/document", response_model=ContractDocument)
async def get_contract_document(
    contract_id: int,
    db: DbSession,
    template_key: Optional[str] = Query(None),
):
    """Renderable sections of a contract under a template (default: template1)."""
    contract = await ContractLifecycleManager(db).get(contract_id, operation="render_contract")
    return await ContractDocumentService(db).render(contract, template_key)
