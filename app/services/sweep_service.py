# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Expiry sweep orchestration.

One pass = load every record, classify, then for each candidate send the
reminder and persist reminderSent=true. Each candidate is a two-step saga
with no transaction spanning the email provider and the store:

    send ok,   persist ok   -> committed
    send ok,   persist fail -> failed (persist_failed), email already out,
                               record stays eligible for the next pass
    send fail               -> failed (send_failed), persist not attempted
    send ok,   record renewed or deleted meanwhile -> stale, no write

Only a failure to load the record set fails the pass as a whole.
"""

import json
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.logging import get_logger
from app.metrics import MEMBERS_TOTAL, REMINDERS, SWEEP_DURATION, SWEEP_RUNS
from app.models.domain import (
    COMMITTED,
    FAILED,
    NOTIFYING,
    PERSIST_FAILED,
    RECORD_CHANGED,
    RECORD_DELETED,
    SEND_FAILED,
    STALE,
    Candidate,
    CandidateOutcome,
    SweepReport,
    parse_end_date,
)
from app.repositories.member_repository import RecordNotFoundError, RecordStore, StoreError
from app.services.email_client import EmailTransport
from app.services.expiry_classifier import classify
from app.services.reminder_template import render_reminder

logger = get_logger(__name__)


class SweepService:
    """Runs expiry sweep passes against an injected store and transport."""

    def __init__(
        self,
        store: RecordStore,
        transport: EmailTransport,
        horizon_days: int = settings.REMINDER_HORIZON_DAYS,
        tz: str = settings.REMINDER_TIMEZONE,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._horizon_days = horizon_days
        self._tz = ZoneInfo(tz)
        self._clock = clock

    def today(self) -> date:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._tz).date()

    def load_records(self) -> list[tuple[str, Any]]:
        """Fetch every (key, blob). Store errors propagate; vanished keys are dropped."""
        records: list[tuple[str, Any]] = []
        for key in self._store.list_keys():
            try:
                records.append((key, self._store.get(key)))
            except RecordNotFoundError:
                logger.info("Member %s deleted during sweep load, ignoring", key)
            except json.JSONDecodeError:
                # Corrupt blob: let the classifier skip it.
                records.append((key, None))
        return records

    def run_pass(self, today: Optional[date] = None) -> SweepReport:
        """Run one full sweep. Never raises for store or transport failures."""
        today = today or self.today()
        report = SweepReport(
            started_at=datetime.now(timezone.utc).isoformat(),
            today=today.isoformat(),
        )
        with SWEEP_DURATION.time():
            try:
                records = self.load_records()
            except StoreError as exc:
                logger.error("Sweep aborted: could not load member records: %s", exc)
                report.status = "failed"
                report.error = f"Failed to load member records: {exc}"
                report.finished_at = datetime.now(timezone.utc).isoformat()
                SWEEP_RUNS.labels(status="failed").inc()
                return report

            MEMBERS_TOTAL.set(len(records))
            classification = classify(records, today, self._horizon_days)
            report.scanned = len(records)
            report.candidates = len(classification.candidates)
            report.skipped = len(classification.skipped)

            for candidate in classification.candidates:
                outcome = self._process(candidate)
                report.outcomes.append(outcome)
                REMINDERS.labels(outcome=outcome.reason or outcome.state).inc()
                if outcome.state == COMMITTED:
                    report.notified += 1
                elif outcome.state == STALE:
                    report.stale += 1
                else:
                    report.failed += 1

        report.finished_at = datetime.now(timezone.utc).isoformat()
        SWEEP_RUNS.labels(status="ok").inc()
        logger.info(
            "Sweep finished today=%s scanned=%d candidates=%d notified=%d failed=%d stale=%d skipped=%d",
            report.today, report.scanned, report.candidates,
            report.notified, report.failed, report.stale, report.skipped,
        )
        return report

    def _process(self, candidate: Candidate) -> CandidateOutcome:
        outcome = CandidateOutcome(key=candidate.key, email=candidate.record.email, state=NOTIFYING)
        context = {"member_key": candidate.key}
        subject, html = render_reminder(candidate.record.firstName, candidate.end_date)

        try:
            delivered = self._transport.send(candidate.record.email, subject, html)
        except Exception:
            logger.exception("Reminder to %s raised in transport", candidate.key, extra=context)
            delivered = False
        if not delivered:
            logger.warning(
                "Reminder to %s not delivered; will retry next sweep", candidate.key, extra=context,
            )
            outcome.state, outcome.reason = FAILED, SEND_FAILED
            return outcome

        # Flag the stored record, not the loaded copy; a changed endDate voids the flag.
        try:
            current = self._store.get(candidate.key)
        except RecordNotFoundError:
            logger.info("Member %s deleted while reminder was sent", candidate.key, extra=context)
            outcome.state, outcome.reason = STALE, RECORD_DELETED
            return outcome
        except Exception:
            logger.exception(
                "Reminder to %s sent but record could not be re-read; it may be sent again",
                candidate.key, extra=context,
            )
            outcome.state, outcome.reason = FAILED, PERSIST_FAILED
            return outcome

        if not isinstance(current, dict) or parse_end_date(current.get("endDate")) != candidate.end_date:
            logger.info(
                "Member %s changed endDate while reminder was sent; flag not set",
                candidate.key, extra=context,
            )
            outcome.state, outcome.reason = STALE, RECORD_CHANGED
            return outcome

        current["reminderSent"] = True
        current["reminderSentFor"] = candidate.record.endDate
        try:
            self._store.put(candidate.key, current)
        except Exception:
            logger.exception(
                "Reminder to %s sent but flag not persisted; it may be sent again",
                candidate.key, extra=context,
            )
            outcome.state, outcome.reason = FAILED, PERSIST_FAILED
            return outcome

        logger.info(
            "Reminder sent to %s (%s), expires in %d day(s)",
            candidate.key, candidate.record.email, candidate.days_to_expiry, extra=context,
        )
        outcome.state = COMMITTED
        return outcome
