from sqlalchemy import Column, String, DateTime

from app.core.database import Base, generate_uuid
from app.models.account import utcnow


class LocalIdentity(Base):
    """Credentials held by the built-in identity provider"""
    __tablename__ = "identities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<LocalIdentity {self.email}>"
