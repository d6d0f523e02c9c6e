# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.

Member records are stored as JSON blobs with camelCase field names; unknown
fields ride along untouched so edits never lose data.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

KEY_PREFIX = "student:"

# Per-candidate sweep states.
PENDING = "pending"
NOTIFYING = "notifying"
COMMITTED = "committed"
FAILED = "failed"
STALE = "stale"

SEND_FAILED = "send_failed"
PERSIST_FAILED = "persist_failed"
RECORD_CHANGED = "record_changed"
RECORD_DELETED = "record_deleted"


def member_key(email: str) -> str:
    """Store key for a member, derived from the email address."""
    return f"{KEY_PREFIX}{email}"


def parse_end_date(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime string into a calendar date, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


class MemberRecord(BaseModel):
    """A single roster entry as stored in the key-value store."""
    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    firstName: Optional[str] = None
    endDate: Optional[str] = None
    reminderSent: bool = False
    reminderSentFor: Optional[str] = None

    @field_validator("reminderSent", mode="before")
    @classmethod
    def absent_flag_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def end_date(self) -> Optional[date]:
        return parse_end_date(self.endDate)


class Candidate(BaseModel):
    """A record selected for a reminder in the current pass."""
    key: str
    record: MemberRecord
    end_date: date
    days_to_expiry: int


class CandidateOutcome(BaseModel):
    key: str
    email: Optional[str] = None
    state: str = PENDING
    reason: Optional[str] = None


class SweepReport(BaseModel):
    """Pass-level result of one expiry sweep."""
    status: str = "ok"
    started_at: str
    finished_at: Optional[str] = None
    today: Optional[str] = None
    scanned: int = 0
    candidates: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0
    stale: int = 0
    error: Optional[str] = None
    outcomes: list[CandidateOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"
