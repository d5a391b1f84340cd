from fastapi import APIRouter
from app.api.v1.endpoints import auth, complaints, health

api_router = APIRouter()

api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple liveness check"""
    return {"status": "healthy", "service": "complaintdesk-backend"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(complaints.router, prefix="/complaints", tags=["Complaints"])
