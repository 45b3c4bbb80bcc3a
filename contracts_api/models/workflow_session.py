"""Persisted contract-creation workflow sessions."""

from sqlalchemy import Column, String, DateTime, JSON, BigInteger

from contracts_api.database import Base


class WorkflowSession(Base):
    """One payment → agreement → finalize session for an estimate."""

    __tablename__ = "contract_workflows"

    id = Column(String(36), primary_key=True)
    estimate_no = Column(String(100), nullable=False, index=True)

    # awaiting_payment, awaiting_agreement, ready_to_finalize
    state = Column(String(30), nullable=False, default="awaiting_payment")

    # Estimate the session was started for (camelCase document)
    estimate = Column(JSON, nullable=False, default=dict)

    # Last submitted payment / agreement records
    payment = Column(JSON, nullable=True)
    agreement = Column(JSON, nullable=True)

    # Set once finalize has produced a contract
    contract_id = Column(BigInteger, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<WorkflowSession {self.id} {self.estimate_no} state={self.state}>"
