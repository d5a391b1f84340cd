"""
Complaint endpoints.

Every handler resolves the caller from the bearer token, looks the
complaint up (404 first), then asks the access policy before touching
the store.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.logging_config import logger
from app.models.complaint import Complaint
from app.modules.auth.dependencies import get_caller, require_action
from app.modules.auth.policy import (
    Action,
    Caller,
    Resource,
    authorize,
    filter_patch,
    list_scope,
)
from app.schemas.complaint import (
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintStatusUpdate,
    ComplaintResponse,
    MessageResponse,
)
from app.services.complaint_service import ComplaintService


router = APIRouter()


def _resource(complaint: Complaint) -> Resource:
    return Resource(owner_id=complaint.owner_id, status=complaint.status.value)


@router.get("", response_model=List[ComplaintResponse])
async def list_complaints(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """List complaints: all for admins, own for everyone else"""
    service = ComplaintService(db)
    owner_id = list_scope(caller)

    if owner_id is None:
        return await service.list_all()
    return await service.list_by_owner(owner_id)


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Submit a complaint; it starts as Pending and belongs to the caller"""
    decision = authorize(caller, Action.CREATE)
    fields = {k: v for k, v in payload.model_dump().items() if k in decision.allowed_fields}

    complaint = await ComplaintService(db).create(fields, owner_id=caller.account_id)

    logger.log_complaint_event("created", complaint.id, caller.account_id,
                               category=complaint.category.value)
    return complaint


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Get one complaint"""
    complaint = await ComplaintService(db).get_by_id(complaint_id)
    authorize(caller, Action.READ_ONE, _resource(complaint))
    return complaint


@router.put("/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: str,
    payload: ComplaintUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a complaint; status changes are kept only for admins"""
    service = ComplaintService(db)
    complaint = await service.get_by_id(complaint_id)
    authorize(caller, Action.UPDATE_FIELDS, _resource(complaint))

    patch = filter_patch(caller, payload.model_dump(exclude_unset=True, exclude_none=True))
    updated = await service.update(complaint_id, patch)

    logger.log_complaint_event("updated", complaint_id, caller.account_id,
                               fields=sorted(patch))
    return updated


@router.put("/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    caller: Caller = Depends(require_action(Action.UPDATE_STATUS)),
    db: AsyncSession = Depends(get_db),
):
    """Move a complaint to another status (admin only)"""
    service = ComplaintService(db)
    complaint = await service.get_by_id(complaint_id)
    previous = complaint.status.value

    updated = await service.update(complaint_id, {"status": payload.status})

    logger.log_complaint_event("status_changed", complaint_id, caller.account_id,
                               previous_status=previous, new_status=updated.status.value)
    return updated


@router.delete("/{complaint_id}", response_model=MessageResponse)
async def delete_complaint(
    complaint_id: str,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete a complaint"""
    service = ComplaintService(db)
    complaint = await service.get_by_id(complaint_id)
    authorize(caller, Action.DELETE, _resource(complaint))

    await service.delete(complaint_id)

    logger.log_complaint_event("deleted", complaint_id, caller.account_id)
    return MessageResponse(message="Complaint removed")
