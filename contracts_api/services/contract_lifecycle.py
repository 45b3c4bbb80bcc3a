"""
Contract Lifecycle Manager

Owns the contract collection: create (with the final-estimate supersession
rule), field-level update, permanent delete and filtered listing.

Supersession: an estimate whose number carries the final marker
(``E20250101-001-final``) updates the contract already on file for its
origin number (``E20250101-001``) in place. The contract keeps its id,
contract number, contract date and ``created_at``; everything taken from the
estimate, payment and agreement is overwritten.

Each public operation commits once, so the contract write, the removal from
the awaiting list and the "contracted" write-back land together.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import Callable, List, Optional
import logging

from contracts_api.config import settings
from contracts_api.exceptions import IdentifierCollisionError, NotFoundError, ValidationError
from contracts_api.models.contract import Contract
from contracts_api.repositories.contracts import ContractRepository
from contracts_api.repositories.estimates import AwaitingEstimateRepository
from contracts_api.schemas.contract import ContractUpdate
from contracts_api.schemas.estimate import Estimate
from contracts_api.schemas.workflow import AgreementRecord, PaymentRecord
from contracts_api.services.estimate_resolver import EstimateResolver
from contracts_api.services.identifiers import (
    generate_identifier,
    identifier_base,
    is_final_estimate,
    origin_estimate_no,
)
from contracts_api.utils.dates import parse_date, split_measurement_datetime, to_business_date, utc_now
from contracts_api.utils.numbers import coerce_amount

logger = logging.getLogger(__name__)


AMOUNT_FIELDS = ("total_amount", "discounted_amount", "deposit_amount")

# Columns that cannot be cleared through an edit
NON_NULLABLE_FIELDS = ("contract_date", "status")
DATE_FIELDS = ("contract_date", "payment_date")

ALL_STATUSES = "all"


class ContractLifecycleManager:
    """Service class for contract lifecycle operations."""

    def __init__(
        self,
        db: AsyncSession,
        resolver: Optional[EstimateResolver] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.contracts = ContractRepository(db)
        self.awaiting = AwaitingEstimateRepository(db)
        self.resolver = resolver or EstimateResolver(db)
        self.clock = clock

    async def create(
        self,
        estimate: Estimate,
        payment: PaymentRecord,
        agreement: AgreementRecord,
        commit: bool = True,
    ) -> Contract:
        """Create a contract, or update the origin's contract for a final estimate."""
        estimate_no = estimate.estimate_no
        if not estimate_no:
            raise ValidationError(
                "create_contract: estimate has no estimate number",
                operation="create_contract",
            )

        now = self.clock()
        origin_no = origin_estimate_no(estimate_no)

        existing = None
        if is_final_estimate(estimate_no):
            existing = await self.contracts.get_by_estimate(origin_no)

        if existing is not None:
            contract = existing
            contract.updated_at = now
        else:
            contract = Contract(
                id=await self._allocate_id(now),
                contract_number=await self._allocate_contract_number(now),
                estimate_no=origin_no,
                contract_date=to_business_date(now),
                created_at=now,
                updated_at=now,
            )

        contract.source_estimate_no = estimate_no
        contract.status = "signed"
        self._apply_estimate(contract, estimate)
        self._apply_payment(contract, payment)
        self._apply_agreement(contract, agreement)
        contract.recalculate_remaining()

        try:
            await self.contracts.put(contract)
        except IntegrityError as e:
            await self.db.rollback()
            raise IdentifierCollisionError(
                f"contract number {contract.contract_number} is already taken",
                resource_id=estimate_no,
            ) from e

        await self.awaiting.delete(estimate_no)
        await self.resolver.mark_contracted(estimate_no)

        if commit:
            await self.db.commit()
            await self.db.refresh(contract)

        if existing is not None:
            logger.info(f"Updated contract {contract.contract_number} from final estimate {estimate_no}")
        else:
            logger.info(f"Created contract {contract.contract_number} for estimate {estimate_no}")
        return contract

    async def update(self, contract_id: int, patch: ContractUpdate) -> Contract:
        """Apply a field-level edit and recompute the remaining balance."""
        contract = await self.get(contract_id, operation="update_contract")

        data = patch.model_dump(exclude_unset=True)
        for field in AMOUNT_FIELDS:
            if field in data:
                data[field] = coerce_amount(data[field], field)
        for field in NON_NULLABLE_FIELDS:
            if field in data and data[field] is None:
                del data[field]
        for field in DATE_FIELDS:
            if field not in data or data[field] is None:
                continue
            parsed = parse_date(data[field])
            if parsed is None:
                logger.warning(
                    f"Rejected {field} {data[field]!r} for contract "
                    f"{contract.contract_number}, keeping {getattr(contract, field)!r}"
                )
                del data[field]
            else:
                data[field] = parsed
        if data.get("payment_method") is not None:
            data["payment_method"] = data["payment_method"].value
        for field in ("measurement_date", "construction_date"):
            if field in data and not (data[field] or "").strip():
                data[field] = None
        if data.get("measurement_date"):
            try:
                split_measurement_datetime(data["measurement_date"])
            except ValueError:
                logger.warning(
                    f"Rejected measurement date {data['measurement_date']!r} for contract "
                    f"{contract.contract_number}, keeping {contract.measurement_date!r}"
                )
                del data["measurement_date"]

        for field, value in data.items():
            setattr(contract, field, value)

        contract.recalculate_remaining()
        contract.updated_at = self.clock()

        await self.db.commit()
        await self.db.refresh(contract)

        logger.info(f"Updated contract {contract.contract_number}: {sorted(data)}")
        return contract

    async def delete(self, contract_id: int) -> None:
        """Remove a contract permanently. The estimate is not put back on the awaiting list."""
        contract = await self.get(contract_id, operation="delete_contract")
        contract_number = contract.contract_number
        await self.contracts.delete(contract)
        await self.db.commit()
        logger.info(f"Deleted contract {contract_number}")

    async def get(self, contract_id: int, operation: str = "get_contract") -> Contract:
        contract = await self.contracts.get(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id, operation=operation)
        return contract

    async def find_by_estimate(self, estimate_no: str) -> Optional[Contract]:
        """Contract on file for an estimate number or any final variant of it."""
        return await self.contracts.get_by_estimate(origin_estimate_no(estimate_no))

    async def list_filtered(self, search_text: Optional[str] = None, status_filter: Optional[str] = None) -> List[Contract]:
        """Case-sensitive search over number, customer and project, ANDed with status."""
        status = None if not status_filter or status_filter == ALL_STATUSES else status_filter
        contracts = await self.contracts.list(status)
        if not search_text:
            return contracts
        return [
            contract
            for contract in contracts
            if any(
                search_text in (value or "")
                for value in (contract.contract_number, contract.customer_name, contract.project_name)
            )
        ]

    async def _allocate_id(self, now: datetime) -> int:
        candidate = int(now.timestamp() * 1000)
        current_max = await self.contracts.max_id()
        return max(candidate, current_max + 1)

    async def _allocate_contract_number(self, now: datetime) -> str:
        prefix = settings.CONTRACT_NUMBER_PREFIX
        today = to_business_date(now)
        try:
            existing = await self.contracts.contract_numbers_with_prefix(identifier_base(prefix, today))
            return generate_identifier(prefix, today, existing)
        except (ValueError, TypeError) as e:
            raise IdentifierCollisionError(f"contract number could not be generated: {e}") from e

    @staticmethod
    def _apply_estimate(contract: Contract, estimate: Estimate) -> None:
        contract.customer_name = estimate.customer_name or ""
        contract.contact = estimate.contact or ""
        contract.emergency_contact = estimate.emergency_contact or ""
        contract.address = estimate.address or ""
        contract.project_name = estimate.project_name or ""
        contract.project_type = estimate.project_type or ""
        contract.rows = [dict(row) for row in estimate.rows]

    @staticmethod
    def _apply_payment(contract: Contract, payment: PaymentRecord) -> None:
        contract.total_amount = coerce_amount(payment.total_amount, "total_amount")
        contract.discounted_amount = coerce_amount(payment.discounted_amount, "discounted_amount")
        contract.deposit_amount = coerce_amount(payment.deposit_amount, "deposit_amount")
        contract.payment_method = payment.payment_method.value
        contract.payment_date = payment.payment_date
        contract.measurement_date = payment.measurement_date or None
        contract.construction_date = payment.construction_date or None
        contract.memo = payment.memo or ""

    @staticmethod
    def _apply_agreement(contract: Contract, agreement: AgreementRecord) -> None:
        contract.agreement_confirmed = agreement.is_agreed
        contract.agreement_method = agreement.method.value
        contract.signature_data = agreement.signature_data
        contract.agreed_at = agreement.agreed_at
