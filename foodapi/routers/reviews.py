# =============================================================================
# foodapi/routers/reviews.py - Review Routes
# =============================================================================
# Mounted at /api/reviews. Dish review endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
