"""
Complaint Service - persistence for complaints.

Validates field values at write time and keeps ``updated_at`` current.
It does not authorize; callers consult the access policy first.
"""

from typing import Any, Dict, List, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.core.exceptions import ComplaintNotFoundError, ValidationError
from app.core.logging_config import logger
from app.models.account import utcnow
from app.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintStatus,
    TITLE_MAX_LENGTH,
)


REQUIRED_FIELDS = ("title", "description", "category")
WRITABLE_FIELDS = frozenset({"title", "description", "category", "status"})


def clean_fields(fields: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Trim and validate complaint fields, raising ValidationError on bad input"""
    cleaned: Dict[str, Any] = {}

    for key, value in fields.items():
        if key not in WRITABLE_FIELDS:
            raise ValidationError(f"Unknown field: {key}", field=key)

        if key in ("title", "description"):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{key.capitalize()} is required", field=key)
            value = value.strip()
            if key == "title" and len(value) > TITLE_MAX_LENGTH:
                raise ValidationError(
                    f"Title cannot be more than {TITLE_MAX_LENGTH} characters", field=key
                )
        elif key == "category":
            try:
                value = ComplaintCategory(value)
            except ValueError:
                raise ValidationError(f"Invalid category: {value}", field=key)
        elif key == "status":
            try:
                value = ComplaintStatus(value)
            except ValueError:
                raise ValidationError(f"Invalid status: {value}", field=key)

        cleaned[key] = value

    if not partial:
        for key in REQUIRED_FIELDS:
            if key not in cleaned:
                raise ValidationError(f"{key.capitalize()} is required", field=key)

    return cleaned


class ComplaintService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self):
        return select(Complaint).options(joinedload(Complaint.owner))

    async def create(self, fields: Mapping[str, Any], owner_id: str) -> Complaint:
        data = clean_fields(fields)
        # Status is never taken from the caller on create
        data.pop("status", None)

        now = utcnow()
        complaint = Complaint(
            **data,
            status=ComplaintStatus.PENDING,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(complaint)
        await self.db.commit()

        return await self.get_by_id(complaint.id)

    async def get_by_id(self, complaint_id: str) -> Complaint:
        result = await self.db.execute(
            self._select()
            .where(Complaint.id == complaint_id)
            .execution_options(populate_existing=True)
        )
        complaint = result.scalar_one_or_none()
        if not complaint:
            raise ComplaintNotFoundError(complaint_id)
        return complaint

    async def list_all(self) -> List[Complaint]:
        result = await self.db.execute(
            self._select().order_by(Complaint.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: str) -> List[Complaint]:
        result = await self.db.execute(
            self._select()
            .where(Complaint.owner_id == owner_id)
            .order_by(Complaint.created_at.desc())
        )
        return list(result.scalars().all())

    async def update(self, complaint_id: str, patch: Mapping[str, Any]) -> Complaint:
        """Apply a partial update as one locked read-modify-write"""
        data = clean_fields(patch, partial=True)

        result = await self.db.execute(
            select(Complaint).where(Complaint.id == complaint_id).with_for_update()
        )
        complaint = result.scalar_one_or_none()
        if not complaint:
            raise ComplaintNotFoundError(complaint_id)

        for key, value in data.items():
            setattr(complaint, key, value)
        complaint.updated_at = utcnow()

        await self.db.commit()
        logger.debug(f"[Complaints] Updated {complaint_id}: {sorted(data)}")

        return await self.get_by_id(complaint_id)

    async def delete(self, complaint_id: str) -> None:
        result = await self.db.execute(
            select(Complaint).where(Complaint.id == complaint_id)
        )
        complaint = result.scalar_one_or_none()
        if not complaint:
            raise ComplaintNotFoundError(complaint_id)

        await self.db.delete(complaint)
        await self.db.commit()
