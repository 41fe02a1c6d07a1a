# =============================================================================
# foodapi/middleware/ - Request Pipeline
# =============================================================================
# Every request passes through these stages, in this order:
#
#   1. security_headers  - defensive response headers
#   2. compression       - gzip response bodies
#   3. rate_limit        - per-IP quota on /api
#   4. cors              - cross-origin policy
#   5. body_parser       - JSON / URL-encoded bodies, size limit
#   6. request_logging   - access log (development only)
#   7. static_assets     - files under /uploads
#   8. error_boundary    - unhandled route errors as JSON 500s
#
# Each stage passes the request on or answers it directly. Route errors are
# rendered by error_boundary, so their responses still pass back out through
# every stage above it. The first stage is the outermost.
# =============================================================================

from dataclasses import dataclass

from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from foodapi.config import Settings
from foodapi.middleware.body_parser import BodyParserMiddleware
from foodapi.middleware.error_boundary import ErrorBoundaryMiddleware
from foodapi.middleware.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from foodapi.middleware.request_logging import RequestLoggingMiddleware
from foodapi.middleware.security_headers import SecurityHeadersMiddleware
from foodapi.middleware.static_assets import StaticAssetsMiddleware

STAGE_ORDER = (
    "security_headers",
    "compression",
    "rate_limit",
    "cors",
    "body_parser",
    "request_logging",
    "static_assets",
    "error_boundary",
)


@dataclass(frozen=True)
class PipelineStage:
    """One named slot in the pipeline; middleware is None when disabled."""
    name: str
    middleware: Middleware | None

    @property
    def enabled(self) -> bool:
        return self.middleware is not None


def build_pipeline(settings: Settings, limiter: FixedWindowRateLimiter) -> list[PipelineStage]:
    """Build the ordered stage list for the given settings."""
    stages = [
        PipelineStage("security_headers", Middleware(SecurityHeadersMiddleware)),
        PipelineStage("compression", Middleware(GZipMiddleware, minimum_size=1024)),
        PipelineStage(
            "rate_limit",
            Middleware(
                RateLimitMiddleware,
                limiter=limiter,
                path_prefix="/api",
                trust_proxy=settings.TRUST_PROXY,
            ),
        ),
        PipelineStage(
            "cors",
            Middleware(
                CORSMiddleware,
                allow_origins=settings.cors_origins_list,
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            ),
        ),
        PipelineStage(
            "body_parser",
            Middleware(BodyParserMiddleware, limit_bytes=settings.body_limit_bytes),
        ),
        PipelineStage(
            "request_logging",
            Middleware(RequestLoggingMiddleware) if settings.is_development else None,
        ),
        PipelineStage(
            "static_assets",
            Middleware(StaticAssetsMiddleware, prefix="/uploads", directory=settings.UPLOAD_DIR),
        ),
        PipelineStage(
            "error_boundary",
            Middleware(ErrorBoundaryMiddleware, include_stack=settings.is_development),
        ),
    ]
    names = tuple(stage.name for stage in stages)
    if names != STAGE_ORDER:
        raise RuntimeError(f"Pipeline stages {names} do not match STAGE_ORDER")
    return stages


def pipeline_middleware(stages: list[PipelineStage]) -> list[Middleware]:
    """Middleware list for FastAPI(middleware=...), outermost first."""
    return [stage.middleware for stage in stages if stage.middleware is not None]


__all__ = [
    "STAGE_ORDER",
    "PipelineStage",
    "build_pipeline",
    "pipeline_middleware",
    "FixedWindowRateLimiter",
]
