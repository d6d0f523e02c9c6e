# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the store, transport and services.
"""

from app.core.config import settings
from app.core.database import build_engine
from app.repositories.member_repository import InMemoryRecordStore, SqlRecordStore
from app.services.email_client import build_email_transport
from app.services.member_service import MemberService
from app.services.sweep_service import SweepService

# ── Singleton store / transport instances ──
if settings.DATABASE_URL:
    _store = SqlRecordStore(build_engine(settings.DATABASE_URL))
else:
    _store = InMemoryRecordStore()
_transport = build_email_transport()

# ── Service instances (with injected dependencies) ──
_member_service = MemberService(_store)
_sweep_service = SweepService(
    store=_store,
    transport=_transport,
    horizon_days=settings.REMINDER_HORIZON_DAYS,
    tz=settings.REMINDER_TIMEZONE,
)


# ── FastAPI dependency functions ──
def get_record_store():
    return _store


def get_email_transport():
    return _transport


def get_member_service() -> MemberService:
    return _member_service


def get_sweep_service() -> SweepService:
    return _sweep_service
