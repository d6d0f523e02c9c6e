# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package."""
from app.repositories.member_repository import (
    InMemoryRecordStore,
    RecordNotFoundError,
    RecordStore,
    SqlRecordStore,
    StoreError,
    StoreUnavailableError,
)

__all__ = [
    "InMemoryRecordStore",
    "RecordNotFoundError",
    "RecordStore",
    "SqlRecordStore",
    "StoreError",
    "StoreUnavailableError",
]
