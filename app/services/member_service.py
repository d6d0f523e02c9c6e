# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Member roster CRUD.

Records are upserted whole. The one rule enforced here is the renewal rule:
an edit that changes endDate starts a new expiry cycle, so the reminder
flag is cleared; otherwise a flag the caller did not send is carried over.
"""

from typing import Any

from app.core.logging import get_logger
from app.metrics import MEMBERS_TOTAL
from app.models.domain import member_key, parse_end_date
from app.repositories.member_repository import RecordNotFoundError, RecordStore

logger = get_logger(__name__)


class MemberService:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def list_members(self) -> list[dict[str, Any]]:
        members = []
        for key in self._store.list_keys():
            try:
                members.append({"key": key, "data": self._store.get(key)})
            except RecordNotFoundError:
                continue
        MEMBERS_TOTAL.set(len(members))
        return members

    def add_member(self, data: dict[str, Any]) -> str:
        key = member_key(data["email"])
        self._store.put(key, data)
        logger.info("Member added key=%s", key)
        return key

    def edit_member(self, key: str, data: dict[str, Any]) -> dict[str, Any]:
        try:
            existing = self._store.get(key)
        except RecordNotFoundError:
            existing = None
        updated = apply_renewal_rule(existing, dict(data))
        self._store.put(key, updated)
        logger.info(
            "Member updated key=%s reminderSent=%s",
            key, bool(updated.get("reminderSent")),
        )
        return updated

    def delete_member(self, key: str) -> bool:
        deleted = self._store.delete(key)
        logger.info("Member delete key=%s removed=%s", key, deleted)
        return deleted


def apply_renewal_rule(existing: dict[str, Any] | None, data: dict[str, Any]) -> dict[str, Any]:
    """Reset or carry over the reminder flag for an edited record."""
    if not isinstance(existing, dict):
        return data

    # The cycle the stored flag belongs to; older records lack reminderSentFor.
    flagged_for = parse_end_date(existing.get("reminderSentFor") or existing.get("endDate"))
    new_end = parse_end_date(data.get("endDate", existing.get("endDate")))

    if flagged_for != new_end:
        data["reminderSent"] = False
        data.pop("reminderSentFor", None)
        return data

    if "reminderSent" not in data and existing.get("reminderSent"):
        data["reminderSent"] = True
        if existing.get("reminderSentFor"):
            data.setdefault("reminderSentFor", existing["reminderSentFor"])
    return data
