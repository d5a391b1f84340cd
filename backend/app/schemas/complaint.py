from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Any
from datetime import datetime

from app.models.complaint import ComplaintCategory, ComplaintStatus, TITLE_MAX_LENGTH


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


class ComplaintCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(..., min_length=1)
    category: ComplaintCategory

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)


class ComplaintUpdate(BaseModel):
    """
    Partial update; omitted fields stay unchanged.

    ``status`` is left as sent: it is dropped for regular users and only
    checked against ComplaintStatus once it survives the edit filter.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ComplaintCategory] = None
    status: Optional[str] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintResponse(BaseModel):
    id: str
    title: str
    description: str
    category: ComplaintCategory
    status: ComplaintStatus
    owner_id: str
    owner_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
