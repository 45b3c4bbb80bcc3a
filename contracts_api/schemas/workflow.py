from pydantic import BaseModel, Field, computed_field, model_validator
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Any, Dict, Literal


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    transfer = "transfer"


class AgreementMethod(str, Enum):
    signature = "signature"
    checkbox = "checkbox"


WorkflowState = Literal["awaiting_payment", "awaiting_agreement", "ready_to_finalize"]


class PaymentRecord(BaseModel):
    """Finalized payment terms.

    ``remaining_amount`` is computed from its operands on every access and is
    not accepted as input.
    """
    total_amount: float = 0.0
    discounted_amount: float = 0.0
    deposit_amount: float = Field(0.0, ge=0)
    payment_method: PaymentMethod = PaymentMethod.cash
    payment_date: date
    measurement_date: Optional[str] = None
    construction_date: Optional[str] = None
    memo: str = ""

    @computed_field
    @property
    def remaining_amount(self) -> float:
        return self.discounted_amount - self.deposit_amount


class AgreementRecord(BaseModel):
    """Customer agreement. A signature agreement always carries its payload."""
    is_agreed: bool = True
    method: AgreementMethod
    signature_data: Optional[str] = None
    agreed_at: datetime

    @model_validator(mode="after")
    def signature_requires_payload(self):
        if self.method == AgreementMethod.signature and not (self.signature_data or "").strip():
            raise ValueError("signature agreement requires a signature payload")
        return self


class PaymentInput(BaseModel):
    """Raw payment form input.

    Amounts are taken as-is (numbers or display strings); the workflow keeps
    the previous value for anything it cannot parse.
    """
    discounted_amount: Optional[Any] = None
    deposit_amount: Optional[Any] = None
    payment_method: Optional[str] = None
    payment_date: Optional[str] = None
    measurement_date: Optional[str] = None
    construction_date: Optional[str] = None
    memo: Optional[str] = None


class AgreementInput(BaseModel):
    method: str
    signature_data: Optional[str] = None


class WorkflowStartRequest(BaseModel):
    """Start a workflow for an estimate number or an inline estimate document."""
    estimate_no: Optional[str] = None
    estimate: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def require_estimate(self):
        if not self.estimate_no and not self.estimate:
            raise ValueError("either estimate_no or estimate is required")
        return self


class AgreementSummary(BaseModel):
    is_agreed: bool
    method: AgreementMethod
    has_signature: bool
    agreed_at: datetime


class WorkflowResponse(BaseModel):
    """Workflow session state."""
    id: str
    estimate_no: str
    state: WorkflowState
    customer_name: Optional[str] = None
    project_name: Optional[str] = None
    payment_draft: PaymentRecord
    payment: Optional[PaymentRecord] = None
    agreement: Optional[AgreementSummary] = None
    agreement_items: List[str] = []
    contract_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
