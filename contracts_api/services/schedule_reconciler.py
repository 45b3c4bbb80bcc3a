"""
Schedule Reconciler

Keeps the measurement appointment in the schedule store in step with a
contract's measurement date.

Reconciliation runs in two phases:

1. ``plan(contract)`` looks up the existing measurement entry for the
   contract's estimate and decides what to write: create a new entry,
   update descriptive fields only, or move the appointment to a new
   date/time. A move needs confirmation.
2. ``apply(plan, confirmed)`` issues the single remote write. An
   unconfirmed move writes nothing.

Recorded ``measurementData`` on an existing entry is always carried over
verbatim; it is only seeded from estimate line items when the entry has none.
Remote failures raise ``ScheduleSyncFailedError``; callers that already
committed a contract report it as a warning.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union
import httpx
import inspect
import logging

from contracts_api.config import settings
from contracts_api.exceptions import ScheduleSyncFailedError, ValidationError
from contracts_api.models.contract import Contract
from contracts_api.schemas.schedule import ScheduleSyncResult
from contracts_api.services.estimate_resolver import EstimateResolver
from contracts_api.services.schedule_store import ScheduleStoreClient
from contracts_api.utils.address import abbreviate_address
from contracts_api.utils.dates import split_measurement_datetime, utc_now

logger = logging.getLogger(__name__)


CREATE = "create"
UPDATE_DETAILS = "update_details"
RESCHEDULE = "reschedule"

SCHEDULE_PRIORITY = "보통"
SCHEDULE_STATUS = "예정"

ConfirmCallback = Callable[["SchedulePlan"], Union[bool, Awaitable[bool]]]


@dataclass
class SchedulePlan:
    """Decision reached after the lookup, before any remote write."""
    action: str  # create, update_details, reschedule
    contract_id: int
    estimate_no: str
    entry: Dict[str, Any]
    schedule_id: Optional[str] = None  # existing entry id, when it is usable for PUT
    previous_date: Optional[str] = None
    previous_time: Optional[str] = None

    @property
    def requires_confirmation(self) -> bool:
        return self.action == RESCHEDULE

    @property
    def confirmation_message(self) -> str:
        return (
            f"실측일자가 변경되었습니다. "
            f"기존: {self.previous_date} {self.previous_time} / "
            f"변경: {self.entry['date']} {self.entry['time']}. "
            f"기존 실측 데이터는 보존됩니다."
        )

    def result(self, status: str, schedule_id: Optional[str] = None, message: Optional[str] = None) -> ScheduleSyncResult:
        return ScheduleSyncResult(
            status=status,
            estimate_no=self.estimate_no,
            schedule_id=schedule_id or self.schedule_id,
            title=self.entry.get("title"),
            date=self.entry.get("date"),
            time=self.entry.get("time"),
            previous_date=self.previous_date,
            previous_time=self.previous_time,
            message=message,
        )


def empty_measurement_slot(row: Dict[str, Any]) -> Dict[str, Any]:
    """Measurement slot for one line item; measured values start blank."""
    return {
        "space": row.get("space"),
        "productName": row.get("productName"),
        "estimateWidth": str(row.get("widthMM") or ""),
        "estimateHeight": str(row.get("heightMM") or ""),
        "measuredWidth": "",
        "measuredHeight": "",
        "lineDirection": "",
        "lineLength": "",
        "customLineLength": "",
        "memo": "",
        "showMemo": False,
    }


def seed_measurement_data(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Slots for every line item that names both a space and a product."""
    return [
        empty_measurement_slot(row)
        for row in rows
        if isinstance(row, dict) and row.get("space") and row.get("productName")
    ]


def _usable_schedule_id(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


class ScheduleReconciler:
    """Service class for measurement schedule reconciliation."""

    def __init__(
        self,
        store: ScheduleStoreClient,
        resolver: Optional[EstimateResolver] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.resolver = resolver
        self.clock = clock

    async def plan(self, contract: Contract) -> SchedulePlan:
        """Look up the existing entry and decide the write. No remote writes."""
        if not contract.has_measurement_date:
            raise ValidationError(
                f"reconcile_schedule: contract {contract.contract_number} has no measurement date",
                operation="reconcile_schedule",
                resource_id=str(contract.id),
            )
        try:
            day, time_value = split_measurement_datetime(contract.measurement_date)
        except ValueError as e:
            raise ValidationError(
                f"reconcile_schedule: contract {contract.contract_number} has an invalid measurement date "
                f"{contract.measurement_date!r}",
                operation="reconcile_schedule",
                resource_id=str(contract.id),
            ) from e
        date_value = day.isoformat()

        existing = await self._find_existing(contract)

        measurement_data = existing.get("measurementData") if existing else None
        if not measurement_data:
            measurement_data = await self._seed(contract)

        now = self.clock()
        schedule_id = _usable_schedule_id(existing.get("id")) if existing else None
        entry = {
            "id": schedule_id or f"schedule-{int(now.timestamp() * 1000)}-measurement",
            "title": f"{settings.MEASUREMENT_SCHEDULE_TYPE} - {abbreviate_address(contract.address)}",
            "date": date_value,
            "time": time_value,
            "type": settings.MEASUREMENT_SCHEDULE_TYPE,
            "description": contract.project_name or "",
            "customerName": contract.customer_name or "",
            "address": contract.address or "",
            "contact": contract.contact or "",
            "priority": SCHEDULE_PRIORITY,
            "status": SCHEDULE_STATUS,
            "estimateNo": contract.estimate_no,
            "measurementData": measurement_data,
            "createdAt": (existing or {}).get("createdAt") or now.isoformat(),
            "updatedAt": now.isoformat(),
            "createdBy": (existing or {}).get("createdBy") or settings.SCHEDULE_CREATED_BY,
        }

        if existing is None:
            action = CREATE
        elif existing.get("date") == date_value and existing.get("time") == time_value:
            action = UPDATE_DETAILS
        else:
            action = RESCHEDULE

        if existing is not None and schedule_id is None:
            logger.warning(
                f"Measurement schedule for {contract.estimate_no} has an invalid id "
                f"{existing.get('id')!r}; a new entry will be created"
            )

        return SchedulePlan(
            action=action,
            contract_id=contract.id,
            estimate_no=contract.estimate_no,
            entry=entry,
            schedule_id=schedule_id,
            previous_date=existing.get("date") if existing else None,
            previous_time=existing.get("time") if existing else None,
        )

    async def apply(self, plan: SchedulePlan, confirmed: bool = True) -> ScheduleSyncResult:
        """Issue the planned write. An unconfirmed reschedule issues nothing."""
        if plan.requires_confirmation and not confirmed:
            logger.info(f"Schedule change for {plan.estimate_no} cancelled; remote entry left untouched")
            return plan.result("cancelled", message=plan.confirmation_message)

        if plan.action != CREATE and plan.schedule_id:
            try:
                await self.store.update_schedule(plan.schedule_id, plan.entry)
            except httpx.HTTPStatusError as e:
                if e.response.status_code != 404:
                    raise self._sync_failed("update_schedule", plan, e) from e
                logger.warning(f"Schedule {plan.schedule_id} no longer exists; creating a new entry")
                return await self._create(plan)
            except (httpx.HTTPError, ValueError) as e:
                raise self._sync_failed("update_schedule", plan, e) from e
            status = "rescheduled" if plan.action == RESCHEDULE else "updated"
            return plan.result(status)

        return await self._create(plan)

    async def reconcile(self, contract: Contract, confirm: Optional[ConfirmCallback] = None) -> ScheduleSyncResult:
        """Plan, ask ``confirm`` when the appointment moves, then apply.

        ``confirm`` may be sync or async; without one a move is not confirmed.
        """
        plan = await self.plan(contract)
        confirmed = True
        if plan.requires_confirmation:
            decision = confirm(plan) if confirm else False
            if inspect.isawaitable(decision):
                decision = await decision
            confirmed = bool(decision)
        return await self.apply(plan, confirmed)

    async def _find_existing(self, contract: Contract) -> Optional[Dict[str, Any]]:
        try:
            entries = await self.store.list_schedules()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Schedule lookup failed for {contract.estimate_no}: {e}")
            raise ScheduleSyncFailedError("lookup_schedule", contract.estimate_no, _reason(e)) from e

        for entry in entries:
            if (
                entry.get("estimateNo") == contract.estimate_no
                and entry.get("type") == settings.MEASUREMENT_SCHEDULE_TYPE
            ):
                return entry
        return None

    async def _seed(self, contract: Contract) -> List[Dict[str, Any]]:
        rows = None
        if self.resolver is not None:
            estimate = await self.resolver.resolve(contract.estimate_no)
            if estimate is not None and estimate.rows:
                rows = estimate.rows
        if rows is None:
            rows = contract.rows or []
        return seed_measurement_data(rows)

    async def _create(self, plan: SchedulePlan) -> ScheduleSyncResult:
        entry = dict(plan.entry)
        if plan.schedule_id and entry.get("id") == plan.schedule_id:
            entry["id"] = f"schedule-{int(self.clock().timestamp() * 1000)}-measurement"
        try:
            created = await self.store.create_schedule(entry)
        except (httpx.HTTPError, ValueError) as e:
            raise self._sync_failed("create_schedule", plan, e) from e
        return plan.result("created", schedule_id=_usable_schedule_id(created.get("id")) or entry["id"])

    @staticmethod
    def _sync_failed(operation: str, plan: SchedulePlan, error: Exception) -> ScheduleSyncFailedError:
        logger.error(f"{operation} failed for {plan.estimate_no}: {error}")
        return ScheduleSyncFailedError(operation, plan.estimate_no, _reason(error), schedule_id=plan.schedule_id)


def _reason(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    if isinstance(error, httpx.TimeoutException):
        return "timed out"
    return str(error) or type(error).__name__


async def sync_contract_schedule(
    reconciler: ScheduleReconciler,
    contract: Contract,
    confirm_change: bool = False,
) -> Tuple[Optional[ScheduleSyncResult], Optional[str]]:
    """Reconcile after a committed contract write.

    Returns the sync result and a warning. Failures never propagate: the
    contract write stays committed and the failure is returned as a warning.
    An unconfirmed move returns ``confirmation_required`` without writing.
    """
    if not contract.has_measurement_date:
        return None, None
    try:
        plan = await reconciler.plan(contract)
        if plan.requires_confirmation and not confirm_change:
            return plan.result("confirmation_required", message=plan.confirmation_message), None
        return await reconciler.apply(plan, confirmed=True), None
    except ScheduleSyncFailedError as e:
        result = ScheduleSyncResult(
            status="failed",
            estimate_no=e.estimate_no,
            schedule_id=e.schedule_id,
            message=str(e),
        )
        return result, str(e)
    except ValidationError as e:
        result = ScheduleSyncResult(status="failed", estimate_no=contract.estimate_no, message=str(e))
        return result, str(e)
