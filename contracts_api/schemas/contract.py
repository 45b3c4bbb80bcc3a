from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional, List, Any, Dict, Literal

from contracts_api.schemas.schedule import ScheduleSyncResult
from contracts_api.schemas.workflow import PaymentMethod


ContractStatus = Literal["draft", "pending", "signed", "completed", "cancelled", "in_progress"]


class ContractUpdate(BaseModel):
    """Field-level contract edit.

    Amounts accept numbers or display strings; malformed amounts are stored
    as 0. Malformed dates keep the stored value. ``remaining_amount`` is not
    an input and is dropped if sent.
    """
    model_config = ConfigDict(extra="ignore")

    contract_date: Optional[Any] = None
    customer_name: Optional[str] = None
    contact: Optional[str] = None
    emergency_contact: Optional[str] = None
    address: Optional[str] = None
    project_name: Optional[str] = None
    project_type: Optional[str] = None
    total_amount: Optional[Any] = None
    discounted_amount: Optional[Any] = None
    deposit_amount: Optional[Any] = None
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[Any] = None
    measurement_date: Optional[str] = None
    construction_date: Optional[str] = None
    memo: Optional[str] = None
    status: Optional[ContractStatus] = None


class ContractResponse(BaseModel):
    """Schema for contract response."""
    id: int
    contract_number: str
    estimate_no: str
    source_estimate_no: Optional[str] = None
    contract_date: date
    customer_name: Optional[str] = None
    contact: Optional[str] = None
    emergency_contact: Optional[str] = None
    address: Optional[str] = None
    project_name: Optional[str] = None
    project_type: Optional[str] = None
    total_amount: float
    discounted_amount: float
    deposit_amount: float
    remaining_amount: float
    payment_method: Optional[str] = None
    payment_date: Optional[date] = None
    measurement_date: Optional[str] = None
    construction_date: Optional[str] = None
    memo: Optional[str] = None
    agreement_confirmed: bool = False
    agreement_method: Optional[str] = None
    signature_data: Optional[str] = None
    agreed_at: Optional[datetime] = None
    status: str
    status_label: str
    rows: List[Dict[str, Any]] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContractListResponse(BaseModel):
    """Paginated contract list response."""
    items: List[ContractResponse]
    total: int
    page: int
    page_size: int


class ContractMutationResponse(BaseModel):
    """A contract write plus the schedule sync it triggered, if any.

    ``warning`` carries a non-fatal schedule sync failure; the contract write
    itself has been committed.
    """
    contract: ContractResponse
    schedule_sync: Optional[ScheduleSyncResult] = None
    warning: Optional[str] = None
