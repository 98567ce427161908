"""Read-only snapshots of audit ledger entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HistoryEntry(BaseModel):
    """One accepted class registration status change."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    registration_id: str
    previous_status: str | None
    new_status: str
    reason: str
    changed_at: datetime


class StatusHistoryEntry(BaseModel):
    """One accepted student status change."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    student_id: str
    previous_status_id: str | None
    new_status_id: str
    reason: str
    changed_at: datetime
