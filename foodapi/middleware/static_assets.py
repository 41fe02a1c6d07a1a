"""Static Assets Middleware.

Serves uploaded files under a URL prefix straight from disk, ahead of the
router. A missing file, or any method other than GET/HEAD, falls through
to the rest of the app (which answers with the not-found body).
"""

import os

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send


class StaticAssetsMiddleware:
    """ASGI middleware that serves files from ``directory`` under ``prefix``."""

    def __init__(self, app: ASGIApp, prefix: str = "/uploads", directory: str = "uploads"):
        self.app = app
        self.prefix = prefix.rstrip("/")
        self.directory = directory
        self.files = StaticFiles(directory=directory, check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        path = scope.get("path", "")
        if (
            scope["type"] != "http"
            or scope["method"] not in ("GET", "HEAD")
            or not path.startswith(self.prefix + "/")
            or not os.path.isdir(self.directory)
        ):
            await self.app(scope, receive, send)
            return

        child_scope = dict(scope)
        child_scope["path"] = path[len(self.prefix):]
        child_scope["root_path"] = scope.get("root_path", "") + self.prefix

        try:
            await self.files(child_scope, receive, send)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
            await self.app(scope, receive, send)
