"""
FastAPI Dependencies

Provides dependency injection for database sessions and the external
collaborators (schedule store, estimate API). Tests replace the
collaborators through ``app.dependency_overrides``.
"""

from typing import Annotated, Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contracts_api.database import get_db
from contracts_api.services.estimate_resolver import EstimateResolver, HttpEstimateSource
from contracts_api.services.schedule_reconciler import ScheduleReconciler
from contracts_api.services.schedule_store import ScheduleStoreClient


def get_schedule_store() -> ScheduleStoreClient:
    return ScheduleStoreClient.from_settings()


def get_estimate_source() -> Optional[HttpEstimateSource]:
    return HttpEstimateSource.from_settings()


def get_estimate_resolver(
    db: Annotated[AsyncSession, Depends(get_db)],
    source: Annotated[Optional[HttpEstimateSource], Depends(get_estimate_source)],
) -> EstimateResolver:
    return EstimateResolver(db, http_source=source)


def get_schedule_reconciler(
    store: Annotated[ScheduleStoreClient, Depends(get_schedule_store)],
    resolver: Annotated[EstimateResolver, Depends(get_estimate_resolver)],
) -> ScheduleReconciler:
    return ScheduleReconciler(store, resolver=resolver)


# Type aliases for cleaner route signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Resolver = Annotated[EstimateResolver, Depends(get_estimate_resolver)]
Reconciler = Annotated[ScheduleReconciler, Depends(get_schedule_reconciler)]
