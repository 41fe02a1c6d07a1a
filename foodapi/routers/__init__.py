# =============================================================================
# foodapi/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by resource:
# - health.py: Health check endpoint
# - auth.py, users.py, dishes.py, categories.py, orders.py, cart.py,
#   reviews.py: route collaborators, one per resource family
#
# Each collaborator is mounted in main.py under its prefix from ROUTE_GROUPS.
# =============================================================================

from fastapi import APIRouter

from . import auth
from . import cart
from . import categories
from . import dishes
from . import health
from . import orders
from . import reviews
from . import users

# Collaborator name -> mount prefix
ROUTE_GROUPS: dict[str, str] = {
    "auth": "/api/auth",
    "users": "/api/users",
    "dishes": "/api/dishes",
    "categories": "/api/categories",
    "orders": "/api/orders",
    "cart": "/api/cart",
    "reviews": "/api/reviews",
}


def default_collaborators() -> dict[str, APIRouter]:
    """The routers shipped in this package, keyed like ROUTE_GROUPS."""
    return {
        "auth": auth.router,
        "users": users.router,
        "dishes": dishes.router,
        "categories": categories.router,
        "orders": orders.router,
        "cart": cart.router,
        "reviews": reviews.router,
    }


__all__ = [
    "ROUTE_GROUPS",
    "default_collaborators",
    "health",
]
