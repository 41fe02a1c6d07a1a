# =============================================================================
# foodapi/routers/auth.py - Authentication Routes
# =============================================================================
# Mounted at /api/auth. Registration, login and token handling are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
