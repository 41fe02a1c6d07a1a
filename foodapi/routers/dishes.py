# =============================================================================
# foodapi/routers/dishes.py - Dish Routes
# =============================================================================
# Mounted at /api/dishes. Menu item endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
