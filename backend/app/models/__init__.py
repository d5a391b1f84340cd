# Re-export all models for convenient imports
from app.models.account import Account, AccountRole
from app.models.complaint import Complaint, ComplaintCategory, ComplaintStatus
from app.models.identity import LocalIdentity

__all__ = [
    # Account
    "Account",
    "AccountRole",
    # Complaint
    "Complaint",
    "ComplaintCategory",
    "ComplaintStatus",
    # Identity provider
    "LocalIdentity",
]
