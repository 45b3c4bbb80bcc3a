"""
Estimate schemas.

Estimates are delivered by the estimate system as camelCase JSON documents.
The schema accepts both the camelCase aliases and snake_case names and keeps
unknown keys so the document can be stored back unchanged.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Any, Dict

from contracts_api.utils.numbers import to_number


class Estimate(BaseModel):
    """Approved estimate as consumed by the contract workflow."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    estimate_no: Optional[str] = Field(None, alias="estimateNo")
    estimate_date: Optional[str] = Field(None, alias="estimateDate")
    customer_name: Optional[str] = Field(None, alias="customerName")
    contact: Optional[str] = None
    emergency_contact: Optional[str] = Field(None, alias="emergencyContact")
    address: Optional[str] = None
    project_name: Optional[str] = Field(None, alias="projectName")
    project_type: Optional[str] = Field(None, alias="type")
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    discounted_amount: Optional[float] = Field(None, alias="discountedAmount")
    status: Optional[str] = None

    @field_validator("total_amount", "discounted_amount", mode="before")
    @classmethod
    def parse_display_amount(cls, v: Any) -> Optional[float]:
        """Accept "1,000,000"-style strings; unparseable amounts become None."""
        if v is None:
            return None
        return to_number(v)

    @field_validator("rows", mode="before")
    @classmethod
    def drop_non_mapping_rows(cls, v: Any) -> List[Dict[str, Any]]:
        if not v:
            return []
        return [row for row in v if isinstance(row, dict)]

    @property
    def rows_total(self) -> float:
        total = 0.0
        for row in self.rows:
            total += to_number(row.get("totalPrice")) or 0.0
        return total

    @property
    def effective_total(self) -> float:
        """Estimate total, falling back to the sum of line-item prices."""
        return self.total_amount or self.rows_total

    @property
    def effective_discounted(self) -> float:
        """Discounted total, defaulting to the total when no discount is set."""
        return self.discounted_amount or self.effective_total

    def to_document(self) -> Dict[str, Any]:
        """Serialize back to the camelCase document shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AwaitingEstimateResponse(BaseModel):
    """Estimate in the awaiting-contract list."""
    estimate_no: str
    approved_at: Optional[datetime] = None
    estimate: Dict[str, Any]


class AwaitingEstimateListResponse(BaseModel):
    items: List[AwaitingEstimateResponse]
    total: int
