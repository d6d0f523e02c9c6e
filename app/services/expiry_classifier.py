# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Expiry classification.

Pure function over (today, records): picks the members whose membership ends
within the reminder horizon and who have not been reminded yet.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from pydantic import ValidationError

from app.core.logging import get_logger
from app.models.domain import Candidate, MemberRecord

logger = get_logger(__name__)

DEFAULT_HORIZON_DAYS = 7

INVALID_RECORD = "invalid_record"
INVALID_END_DATE = "invalid_end_date"
MISSING_EMAIL = "missing_email"


@dataclass
class Classification:
    candidates: list[Candidate] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)


def days_to_expiry(end_date: date, today: date) -> int:
    return (end_date - today).days


def is_due(days: int, horizon_days: int = DEFAULT_HORIZON_DAYS) -> bool:
    """Strictly in the future and no further out than the horizon."""
    return 0 < days <= horizon_days


def classify(
    records: Iterable[tuple[str, Any]],
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> Classification:
    """Split (key, blob) pairs into reminder candidates, in iteration order."""
    result = Classification()
    for key, blob in records:
        try:
            record = MemberRecord.model_validate(blob)
        except ValidationError as exc:
            logger.warning("Skipping member %s: unreadable record (%s)", key, exc.error_count())
            result.skipped.append((key, INVALID_RECORD))
            continue

        if record.reminderSent:
            continue

        end_date = record.end_date
        if end_date is None:
            logger.info("Skipping member %s: missing or invalid endDate %r", key, record.endDate)
            result.skipped.append((key, INVALID_END_DATE))
            continue

        days = days_to_expiry(end_date, today)
        if not is_due(days, horizon_days):
            continue

        if not record.email:
            logger.warning("Skipping member %s: expires in %d day(s) but has no email", key, days)
            result.skipped.append((key, MISSING_EMAIL))
            continue

        result.candidates.append(
            Candidate(key=key, record=record, end_date=end_date, days_to_expiry=days)
        )
    return result
