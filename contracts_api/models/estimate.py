"""
Estimate storage.

Estimates are owned by the external estimate system. Two local collections
are kept here:

- ``awaiting_estimates``: approved estimates waiting for a contract
- ``saved_estimates``: local copy of estimates, used as the fallback source
  when the estimate API is unavailable and as the target of the
  "contracted" status write-back
"""
from sqlalchemy import Column, String, DateTime, JSON

from contracts_api.database import Base


CONTRACTED_STATUS = "계약완료"


class AwaitingEstimate(Base):
    """Approved estimate that has not been turned into a contract yet."""

    __tablename__ = "awaiting_estimates"

    estimate_no = Column(String(100), primary_key=True)

    # Full estimate document (camelCase keys, as delivered by the estimate system)
    payload = Column(JSON, nullable=False, default=dict)

    approved_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AwaitingEstimate {self.estimate_no}>"


class SavedEstimate(Base):
    """Local copy of an estimate document with its workflow status."""

    __tablename__ = "saved_estimates"

    estimate_no = Column(String(100), primary_key=True)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(30), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<SavedEstimate {self.estimate_no} status={self.status}>"
