# =============================================================================
# foodapi/routers/orders.py - Order Routes
# =============================================================================
# Mounted at /api/orders. Order placement and tracking endpoints are added here.
# =============================================================================

from fastapi import APIRouter

router = APIRouter()
