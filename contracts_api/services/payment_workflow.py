"""
Payment / Agreement Workflow

Three-step contract creation for one estimate:

    awaiting_payment -> awaiting_agreement -> ready_to_finalize

The only backward step is awaiting_agreement -> awaiting_payment, which keeps
the submitted payment so the form comes back pre-filled. Finalizing hands
estimate, payment and agreement to the lifecycle manager, which decides
between a new contract and an in-place update.

``ContractWorkflow`` is the state machine itself and does no I/O apart from
the finalize hand-off. ``ContractWorkflowService`` persists it in
``contract_workflows`` between requests.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Optional
import logging
import uuid

from contracts_api.exceptions import (
    ConflictError,
    InvalidAgreementError,
    NotFoundError,
    ValidationError,
    WorkflowStateError,
)
from contracts_api.models.contract import Contract
from contracts_api.models.workflow_session import WorkflowSession
from contracts_api.repositories.estimates import AwaitingEstimateRepository
from contracts_api.repositories.workflows import WorkflowRepository
from contracts_api.schemas.estimate import Estimate
from contracts_api.schemas.workflow import (
    AgreementMethod,
    AgreementRecord,
    AgreementSummary,
    PaymentInput,
    PaymentMethod,
    PaymentRecord,
    WorkflowResponse,
    WorkflowStartRequest,
)
from contracts_api.services.contract_lifecycle import ContractLifecycleManager
from contracts_api.services.contract_settings import ContractSettingsService
from contracts_api.services.estimate_resolver import EstimateResolver
from contracts_api.utils.dates import business_today, parse_date, split_measurement_datetime, utc_now
from contracts_api.utils.numbers import parse_amount

logger = logging.getLogger(__name__)


AWAITING_PAYMENT = "awaiting_payment"
AWAITING_AGREEMENT = "awaiting_agreement"
READY_TO_FINALIZE = "ready_to_finalize"

WORKFLOW_STATES = (AWAITING_PAYMENT, AWAITING_AGREEMENT, READY_TO_FINALIZE)

ContractFactory = Callable[[Estimate, PaymentRecord, AgreementRecord], Awaitable[Contract]]


class ContractWorkflow:
    """State machine for one contract-creation session."""

    def __init__(
        self,
        estimate: Estimate,
        workflow_id: Optional[str] = None,
        state: str = AWAITING_PAYMENT,
        payment: Optional[PaymentRecord] = None,
        agreement: Optional[AgreementRecord] = None,
        contract_id: Optional[int] = None,
        today: Callable[[], date] = business_today,
        now: Callable[[], datetime] = utc_now,
    ):
        if state not in WORKFLOW_STATES:
            raise ValueError(f"unknown workflow state {state!r}")
        self.estimate = estimate
        self.workflow_id = workflow_id or str(uuid.uuid4())
        self.state = state
        self.payment = payment
        self.agreement = agreement
        self.contract_id = contract_id
        self.today = today
        self.now = now

    @property
    def is_finalized(self) -> bool:
        return self.contract_id is not None

    def payment_draft(self) -> PaymentRecord:
        """Values the payment form starts from: the last submission, else estimate totals."""
        if self.payment is not None:
            return self.payment.model_copy()
        return PaymentRecord(
            total_amount=self.estimate.effective_total,
            discounted_amount=self.estimate.effective_discounted,
            deposit_amount=0.0,
            payment_method=PaymentMethod.cash,
            payment_date=self.today(),
        )

    def submit_payment(self, data: PaymentInput) -> PaymentRecord:
        """Record payment terms and move on to the agreement step.

        Malformed or negative amounts, unknown methods and invalid dates keep
        the previous value.
        """
        self._require(AWAITING_PAYMENT, "submit_payment")
        draft = self.payment_draft()

        discounted = parse_amount(data.discounted_amount, draft.discounted_amount, "discounted_amount")
        deposit = parse_amount(data.deposit_amount, draft.deposit_amount, "deposit_amount")

        method = draft.payment_method
        if data.payment_method is not None:
            try:
                method = PaymentMethod(data.payment_method)
            except ValueError:
                logger.warning(f"Rejected payment method {data.payment_method!r}, keeping {method.value}")

        payment_date = draft.payment_date
        if data.payment_date is not None:
            parsed = parse_date(data.payment_date)
            if parsed:
                payment_date = parsed
            else:
                logger.warning(f"Rejected payment date {data.payment_date!r}, keeping {payment_date}")

        self.payment = PaymentRecord(
            total_amount=draft.total_amount,
            discounted_amount=discounted,
            deposit_amount=deposit,
            payment_method=method,
            payment_date=payment_date,
            measurement_date=self._measurement_date(data.measurement_date, draft.measurement_date),
            construction_date=self._construction_date(data.construction_date, draft.construction_date),
            memo=draft.memo if data.memo is None else data.memo,
        )
        self.state = AWAITING_AGREEMENT
        return self.payment

    def go_back(self) -> PaymentRecord:
        """Return to the payment step with the last payment pre-filled."""
        self._require(AWAITING_AGREEMENT, "go_back")
        self.state = AWAITING_PAYMENT
        return self.payment_draft()

    def submit_agreement(self, method: str, signature_data: Optional[str] = None) -> AgreementRecord:
        self._require(AWAITING_AGREEMENT, "submit_agreement")

        try:
            agreement_method = AgreementMethod(method)
        except ValueError:
            raise InvalidAgreementError(
                f"unknown agreement method '{method}'",
                resource_id=self.workflow_id,
            ) from None

        if agreement_method == AgreementMethod.signature:
            if not (signature_data or "").strip():
                raise InvalidAgreementError(
                    "signature agreement requires a signature payload",
                    resource_id=self.workflow_id,
                )
        else:
            signature_data = None

        self.agreement = AgreementRecord(
            is_agreed=True,
            method=agreement_method,
            signature_data=signature_data,
            agreed_at=self.now(),
        )
        self.state = READY_TO_FINALIZE
        return self.agreement

    async def finalize(self, create_contract: ContractFactory) -> Contract:
        """Hand the collected records to ``create_contract``. Allowed once."""
        self._require(READY_TO_FINALIZE, "finalize")
        contract = await create_contract(self.estimate, self.payment, self.agreement)
        self.contract_id = contract.id
        return contract

    def _require(self, state: str, operation: str) -> None:
        if self.is_finalized:
            raise ConflictError(
                f"{operation}: workflow {self.workflow_id} already produced contract {self.contract_id}",
                operation=operation,
                resource_id=self.workflow_id,
            )
        if self.state != state:
            raise WorkflowStateError(operation, self.state, resource_id=self.workflow_id)

    @staticmethod
    def _measurement_date(value: Optional[str], previous: Optional[str]) -> Optional[str]:
        if value is None:
            return previous
        if not value.strip():
            return None
        try:
            split_measurement_datetime(value)
        except ValueError:
            logger.warning(f"Rejected measurement date {value!r}, keeping {previous!r}")
            return previous
        return value.strip()

    @staticmethod
    def _construction_date(value: Optional[str], previous: Optional[str]) -> Optional[str]:
        if value is None:
            return previous
        if not value.strip():
            return None
        if parse_date(value) is None:
            logger.warning(f"Rejected construction date {value!r}, keeping {previous!r}")
            return previous
        return value.strip()

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "estimate": self.estimate.to_document(),
            "payment": self.payment.model_dump(mode="json", exclude={"remaining_amount"}) if self.payment else None,
            "agreement": self.agreement.model_dump(mode="json") if self.agreement else None,
            "contract_id": self.contract_id,
        }

    @classmethod
    def from_session(cls, session: WorkflowSession) -> "ContractWorkflow":
        return cls(
            estimate=Estimate.model_validate(session.estimate or {}),
            workflow_id=session.id,
            state=session.state,
            payment=PaymentRecord.model_validate(session.payment) if session.payment else None,
            agreement=AgreementRecord.model_validate(session.agreement) if session.agreement else None,
            contract_id=session.contract_id,
        )


class ContractWorkflowService:
    """Persists workflow sessions and runs each step inside its own commit."""

    def __init__(self, db: AsyncSession, resolver: Optional[EstimateResolver] = None):
        self.db = db
        self.workflows = WorkflowRepository(db)
        self.awaiting = AwaitingEstimateRepository(db)
        self.resolver = resolver or EstimateResolver(db)
        self.lifecycle = ContractLifecycleManager(db, resolver=self.resolver)
        self.contract_settings = ContractSettingsService(db)

    async def start(self, request: WorkflowStartRequest) -> ContractWorkflow:
        estimate = await self._load_estimate(request)
        workflow = ContractWorkflow(estimate)

        now = utc_now()
        session = WorkflowSession(
            id=workflow.workflow_id,
            estimate_no=estimate.estimate_no,
            created_at=now,
            updated_at=now,
        )
        self._store(session, workflow)
        await self.workflows.put(session)
        await self.db.commit()

        logger.info(f"Started contract workflow {workflow.workflow_id} for estimate {estimate.estimate_no}")
        return workflow

    async def get(self, workflow_id: str, operation: str = "get_workflow") -> ContractWorkflow:
        session = await self._get_session(workflow_id, operation)
        return ContractWorkflow.from_session(session)

    async def submit_payment(self, workflow_id: str, data: PaymentInput) -> ContractWorkflow:
        session = await self._get_session(workflow_id, "submit_payment")
        workflow = ContractWorkflow.from_session(session)
        workflow.submit_payment(data)
        await self._save(session, workflow)
        return workflow

    async def go_back(self, workflow_id: str) -> ContractWorkflow:
        session = await self._get_session(workflow_id, "go_back")
        workflow = ContractWorkflow.from_session(session)
        workflow.go_back()
        await self._save(session, workflow)
        return workflow

    async def submit_agreement(
        self,
        workflow_id: str,
        method: str,
        signature_data: Optional[str] = None,
    ) -> ContractWorkflow:
        session = await self._get_session(workflow_id, "submit_agreement")
        workflow = ContractWorkflow.from_session(session)
        workflow.submit_agreement(method, signature_data)
        await self._save(session, workflow)
        return workflow

    async def finalize(self, workflow_id: str) -> tuple[ContractWorkflow, Contract]:
        """Create (or supersede) the contract and close the workflow in one commit."""
        session = await self._get_session(workflow_id, "finalize")
        workflow = ContractWorkflow.from_session(session)

        async def create_contract(estimate, payment, agreement):
            return await self.lifecycle.create(estimate, payment, agreement, commit=False)

        contract = await workflow.finalize(create_contract)
        await self._save(session, workflow)
        await self.db.refresh(contract)

        logger.info(f"Workflow {workflow_id} finalized as contract {contract.contract_number}")
        return workflow, contract

    async def describe(self, workflow: ContractWorkflow) -> WorkflowResponse:
        session = await self._get_session(workflow.workflow_id, "get_workflow")
        agreement = None
        if workflow.agreement is not None:
            agreement = AgreementSummary(
                is_agreed=workflow.agreement.is_agreed,
                method=workflow.agreement.method,
                has_signature=bool(workflow.agreement.signature_data),
                agreed_at=workflow.agreement.agreed_at,
            )
        return WorkflowResponse(
            id=workflow.workflow_id,
            estimate_no=workflow.estimate.estimate_no,
            state=workflow.state,
            customer_name=workflow.estimate.customer_name,
            project_name=workflow.estimate.project_name,
            payment_draft=workflow.payment_draft(),
            payment=workflow.payment,
            agreement=agreement,
            agreement_items=await self.contract_settings.get_agreement_items(),
            contract_id=workflow.contract_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )

    async def _load_estimate(self, request: WorkflowStartRequest) -> Estimate:
        if request.estimate:
            estimate = Estimate.model_validate(request.estimate)
            if not estimate.estimate_no:
                estimate.estimate_no = request.estimate_no
        else:
            estimate = None
            entry = await self.awaiting.get(request.estimate_no)
            if entry and entry.payload:
                estimate = Estimate.model_validate(entry.payload)
            else:
                estimate = await self.resolver.resolve(request.estimate_no)
            if estimate is None:
                raise NotFoundError("Estimate", request.estimate_no, operation="start_workflow")

        if not estimate.estimate_no:
            raise ValidationError(
                "start_workflow: estimate has no estimate number",
                operation="start_workflow",
            )
        return estimate

    async def _get_session(self, workflow_id: str, operation: str) -> WorkflowSession:
        session = await self.workflows.get(workflow_id)
        if not session:
            raise NotFoundError("Workflow", workflow_id, operation=operation)
        return session

    async def _save(self, session: WorkflowSession, workflow: ContractWorkflow) -> None:
        self._store(session, workflow)
        session.updated_at = utc_now()
        await self.workflows.put(session)
        await self.db.commit()

    @staticmethod
    def _store(session: WorkflowSession, workflow: ContractWorkflow) -> None:
        snapshot = workflow.to_snapshot()
        session.state = snapshot["state"]
        session.estimate = snapshot["estimate"]
        session.payment = snapshot["payment"]
        session.agreement = snapshot["agreement"]
        session.contract_id = snapshot["contract_id"]
