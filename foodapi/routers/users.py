# =============================================================================
# foodapi/routers/users.py - User Routes
# =============================================================================
# Mounted at /api/users. Profile and account management endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
