from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base, generate_uuid
from app.models.account import utcnow


TITLE_MAX_LENGTH = 100


class ComplaintCategory(str, enum.Enum):
    """Complaint categories"""
    TECHNICAL = "Technical"
    BILLING = "Billing"
    SERVICE = "Service"
    PRODUCT = "Product"
    OTHER = "Other"


class ComplaintStatus(str, enum.Enum):
    """Complaint lifecycle status"""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class Complaint(Base):
    """Complaint submitted by an account"""
    __tablename__ = "complaints"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(ComplaintCategory), nullable=False)
    status = Column(SQLEnum(ComplaintStatus), default=ComplaintStatus.PENDING, nullable=False)

    owner_id = Column(String(36), ForeignKey("accounts.id"), index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    owner = relationship("Account", back_populates="complaints")

    @property
    def owner_email(self):
        return self.owner.email if self.owner is not None else None

    def __repr__(self):
        return f"<Complaint {self.id} [{self.status.value if self.status else '-'}]>"
