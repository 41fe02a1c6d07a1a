# =============================================================================
# foodapi/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# Route collaborators use these with Depends() instead of importing globals.
# =============================================================================

from typing import Annotated, Any

from fastapi import Depends, Request

from foodapi.config import Settings
from foodapi.context import AppContext
from foodapi.exceptions import DatabaseUnavailableError


def get_context(request: Request) -> AppContext:
    """Get the application context the app was built with."""
    return request.app.state.context


def get_settings_dep(context: Annotated[AppContext, Depends(get_context)]) -> Settings:
    return context.settings


def get_database(context: Annotated[AppContext, Depends(get_context)]) -> Any:
    """
    Get the MongoDB database handle.

    Raises DatabaseUnavailableError (503) while the startup connect has not
    completed.
    """
    if not context.database.is_connected:
        raise DatabaseUnavailableError()
    return context.database.database


# Type aliases for dependency injection
ContextDep = Annotated[AppContext, Depends(get_context)]
SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
DatabaseDep = Annotated[Any, Depends(get_database)]
