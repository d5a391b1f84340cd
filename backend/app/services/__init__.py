from app.services.account_service import AccountService
from app.services.complaint_service import ComplaintService

__all__ = [
    "AccountService",
    "ComplaintService",
]
