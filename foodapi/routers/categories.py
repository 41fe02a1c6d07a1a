# =============================================================================
# foodapi/routers/categories.py - Category Routes
# =============================================================================
# Mounted at /api/categories. Menu category endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
