"""Estimates API - approved estimates awaiting a contract."""

from fastapi import APIRouter, Body, status
from typing import Any, Dict

from contracts_api.api.deps import DbSession
from contracts_api.models.estimate import AwaitingEstimate
from contracts_api.schemas.estimate import AwaitingEstimateListResponse, AwaitingEstimateResponse
from contracts_api.services.awaiting_estimates import AwaitingEstimateService

router = APIRouter()


def _to_response(entry: AwaitingEstimate) -> AwaitingEstimateResponse:
    return AwaitingEstimateResponse(
        estimate_no=entry.estimate_no,
        approved_at=entry.approved_at,
        estimate=entry.payload or {},
    )


@router.get("/awaiting", response_model=AwaitingEstimateListResponse)
async def list_awaiting_estimates(db: DbSession):
    entries = await AwaitingEstimateService(db).list()
    return {"items": [_to_response(e) for e in entries], "total": len(entries)}


@router.post("/awaiting", response_model=AwaitingEstimateResponse, status_code=status.HTTP_201_CREATED)
async def add_awaiting_estimate(db: DbSession, estimate: Dict[str, Any] = Body(...)):
    """Add an approved estimate (camelCase document). Re-submission replaces it."""
    entry = await AwaitingEstimateService(db).add(estimate)
    return _to_response(entry)


@router.delete("/awaiting/{estimate_no}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_awaiting_estimate(estimate_no: str, db: DbSession):
    await AwaitingEstimateService(db).remove(estimate_no)
