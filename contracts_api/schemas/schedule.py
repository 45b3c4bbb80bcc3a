from pydantic import BaseModel
from typing import Optional, Literal


SyncStatus = Literal[
    "created",
    "updated",
    "rescheduled",
    "confirmation_required",
    "cancelled",
    "failed",
]


class ScheduleSyncResult(BaseModel):
    """Outcome of reconciling a contract's measurement date with the schedule store."""
    status: SyncStatus
    estimate_no: str
    schedule_id: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    previous_date: Optional[str] = None
    previous_time: Optional[str] = None
    message: Optional[str] = None
