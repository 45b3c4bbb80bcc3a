"""Contract model for sales contracts created from approved estimates."""

from sqlalchemy import Column, String, DateTime, Text, Date, Boolean, Float, JSON, BigInteger, Index

from contracts_api.database import Base


CONTRACT_STATUSES = ("draft", "pending", "signed", "completed", "cancelled", "in_progress")

STATUS_LABELS = {
    "draft": "작성중",
    "pending": "대기중",
    "signed": "계약완료",
    "completed": "완료",
    "cancelled": "취소",
    "in_progress": "진행중",
}


class Contract(Base):
    """Sales contract with embedded payment and agreement records."""

    __tablename__ = "contracts"

    # Epoch-millisecond id assigned by the lifecycle manager
    id = Column(BigInteger, primary_key=True, autoincrement=False)

    # Contract identification (e.g. "C20250101-001")
    contract_number = Column(String(50), unique=True, nullable=False, index=True)
    estimate_no = Column(String(100), nullable=False, index=True)  # origin estimate number
    source_estimate_no = Column(String(100), nullable=True)  # estimate that last produced this contract
    contract_date = Column(Date, nullable=False)

    # Denormalized from the estimate at creation time
    customer_name = Column(String(255), nullable=True)
    contact = Column(String(50), nullable=True)
    emergency_contact = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    project_name = Column(String(255), nullable=True)
    project_type = Column(String(100), nullable=True)

    # Payment
    total_amount = Column(Float, nullable=False, default=0.0)
    discounted_amount = Column(Float, nullable=False, default=0.0)
    deposit_amount = Column(Float, nullable=False, default=0.0)
    remaining_amount = Column(Float, nullable=False, default=0.0)  # always discounted - deposit
    payment_method = Column(String(20), nullable=True)  # cash, card, transfer
    payment_date = Column(Date, nullable=True)
    measurement_date = Column(String(20), nullable=True)  # "YYYY-MM-DD" or "YYYY-MM-DDTHH:MM"
    construction_date = Column(String(20), nullable=True)
    memo = Column(Text, nullable=True)

    # Agreement
    agreement_confirmed = Column(Boolean, default=False)
    agreement_method = Column(String(20), nullable=True)  # signature, checkbox
    signature_data = Column(Text, nullable=True)  # opaque image payload
    agreed_at = Column(DateTime(timezone=True), nullable=True)

    # Status: draft, pending, signed, completed, cancelled, in_progress
    status = Column(String(20), nullable=False, default="signed", index=True)

    # Snapshot of the estimate line items
    rows = Column(JSON, nullable=False, default=list)

    # Audit
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_contracts_status_created", "status", "created_at"),
    )

    def recalculate_remaining(self) -> float:
        """Derive the remaining balance from its operands.

        No floor is applied: a discount edited below the deposit yields a
        negative balance.
        """
        discounted = self.discounted_amount or 0.0
        deposit = self.deposit_amount or 0.0
        self.remaining_amount = discounted - deposit
        return self.remaining_amount

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, "알 수 없음")

    @property
    def has_measurement_date(self) -> bool:
        return bool(self.measurement_date and self.measurement_date.strip())

    def __repr__(self):
        return f"<Contract {self.contract_number} - {self.customer_name}>"
