from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from app.core.database import Base, generate_uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountRole(str, enum.Enum):
    """Account roles"""
    USER = "user"
    ADMIN = "admin"


class Account(Base):
    """Local account bound to an external identity"""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Never set from request data; admins are provisioned out of band
    role = Column(SQLEnum(AccountRole), default=AccountRole.USER, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    complaints = relationship("Complaint", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def __repr__(self):
        return f"<Account {self.email}>"
