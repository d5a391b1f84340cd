# API endpoints
from . import auth, complaints, health

__all__ = ["auth", "complaints", "health"]
