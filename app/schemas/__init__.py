# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
Used ONLY at the controller (HTTP) boundary.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.domain import CandidateOutcome, parse_end_date


class MemberPayload(BaseModel):
    """A member record as submitted by clients; extra fields are kept."""
    model_config = ConfigDict(extra="allow")

    email: str = Field(..., min_length=3, max_length=255, examples=["alice@example.com"])
    firstName: Optional[str] = Field(default=None, max_length=255, examples=["alice"])
    endDate: Optional[str] = Field(default=None, examples=["2026-01-05"])
    reminderSent: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v

    @field_validator("endDate")
    @classmethod
    def check_end_date(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and parse_end_date(v) is None:
            raise ValueError("endDate must be an ISO date (YYYY-MM-DD)")
        return v

    def to_blob(self) -> Dict[str, Any]:
        submitted = set(self.model_fields_set) | set(self.model_extra or {})
        return {k: v for k, v in self.model_dump().items() if k in submitted}


class EditMemberData(MemberPayload):
    email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class EditMemberRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=512)
    data: EditMemberData


class DeleteMemberRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=512)


class MemberEntry(BaseModel):
    key: str
    data: Dict[str, Any]


class MessageResponse(BaseModel):
    message: str
    key: Optional[str] = None


class SweepResponse(BaseModel):
    status: str
    started_at: str
    finished_at: Optional[str] = None
    today: Optional[str] = None
    scanned: int
    candidates: int
    notified: int
    skipped: int
    failed: int
    stale: int = 0
    error: Optional[str] = None
    outcomes: List[CandidateOutcome]


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
