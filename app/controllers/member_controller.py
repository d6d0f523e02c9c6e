# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Member roster endpoints — list, add, edit, delete.
Thin HTTP layer — delegates ALL logic to MemberService.
"""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.dependencies import get_member_service
from app.core.logging import get_logger
from app.repositories.member_repository import StoreError
from app.schemas import (
    DeleteMemberRequest,
    EditMemberRequest,
    MemberEntry,
    MemberPayload,
    MessageResponse,
)
from app.services.member_service import MemberService

logger = get_logger(__name__)

router = APIRouter(tags=["Members"])


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.get("/", response_model=List[MemberEntry])
def list_members(service: MemberService = Depends(get_member_service)):
    """Return every stored member as {key, data}."""
    try:
        return service.list_members()
    except (StoreError, ValueError) as exc:
        logger.error("Listing members failed: %s", exc)
        return _error("Failed to retrieve clients")


@router.post("/add-client", response_model=MessageResponse)
def add_member(payload: MemberPayload, service: MemberService = Depends(get_member_service)):
    """Store a new member under `student:<email>`."""
    try:
        key = service.add_member(payload.to_blob())
    except StoreError as exc:
        logger.error("Adding member %s failed: %s", payload.email, exc)
        return _error("Failed to process request")
    return MessageResponse(message="Client added successfully!", key=key)


@router.post("/edit-client", response_model=MessageResponse)
def edit_member(payload: EditMemberRequest, service: MemberService = Depends(get_member_service)):
    """Replace a member's data; a changed endDate clears reminderSent."""
    try:
        service.edit_member(payload.key, payload.data.to_blob())
    except (StoreError, ValueError) as exc:
        logger.error("Editing member %s failed: %s", payload.key, exc)
        return _error("Failed to update client")
    return MessageResponse(message="Client updated successfully!", key=payload.key)


@router.delete("/delete-client", response_model=MessageResponse)
def delete_member(payload: DeleteMemberRequest, service: MemberService = Depends(get_member_service)):
    try:
        service.delete_member(payload.key)
    except StoreError as exc:
        logger.error("Deleting member %s failed: %s", payload.key, exc)
        return _error("Failed to delete client")
    return MessageResponse(message="Client deleted successfully!", key=payload.key)
