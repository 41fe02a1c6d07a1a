# =============================================================================
# foodapi/ - FastAPI Application Package
# =============================================================================
# This package contains the SB Foods web application:
# - main.py: App factory, pipeline wiring, lifespan
# - server.py: uvicorn entry point and process lifecycle
# - config.py: Environment variable loading and settings
# - context.py: Application context shared by all components
# - middleware/: Request pipeline stages
# - routers/: Health check and route collaborators
#
# The app layer is pure composition - business logic lives in the route
# collaborators.
# =============================================================================
