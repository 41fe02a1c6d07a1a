# =============================================================================
# foodapi/routers/cart.py - Cart Routes
# =============================================================================
# Mounted at /api/cart. Shopping cart endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
