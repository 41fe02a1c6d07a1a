# =============================================================================
# foodapi/server.py - Process Entry Point
# =============================================================================
# Runs the API under uvicorn and owns the process lifecycle:
#
#   load config -> build context/app -> listen -> log banner
#   SIGTERM/SIGINT -> stop listener -> close MongoDB -> exit 0
#   fatal MongoDB connect failure -> stop listener -> exit 1
#
# Known gap: in-flight requests still running when uvicorn's graceful
# shutdown gives up may fail once the database handle is closed.
#
# Usage:
#   sbfoods-api
#   python -m foodapi.server
# =============================================================================

import contextlib
import logging
import signal
import sys
import threading

import uvicorn

from foodapi.context import AppContext
from foodapi.main import create_app, create_context

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class APIServer(uvicorn.Server):
    """
    uvicorn server bound to an AppContext.

    Stops when the context reports a fatal error, logs the signal that
    triggered a shutdown and prints the startup banner once listening.
    """

    def __init__(self, config: uvicorn.Config, context: AppContext):
        super().__init__(config)
        self.context = context
        context.on_fatal(self.request_exit)

    def request_exit(self) -> None:
        self.should_exit = True

    def handle_exit(self, sig, frame) -> None:
        logger.info(f"{signal.Signals(sig).name} received. Shutting down gracefully...")
        super().handle_exit(sig, frame)

    @contextlib.contextmanager
    def capture_signals(self):
        # Handle signals without re-raising them afterwards, so a graceful
        # shutdown exits with the context's exit code.
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if self.started and not self.should_exit:
            settings = self.context.settings
            logger.info(f"SB Foods API Server running on port {settings.PORT}")
            logger.info(f"Environment: {settings.NODE_ENV}")
            logger.info(f"Health check: http://localhost:{settings.PORT}/api/health")


def build_server(context: AppContext) -> APIServer:
    settings = context.settings
    config = uvicorn.Config(
        create_app(context),
        host=settings.HOST,
        port=settings.PORT,
        lifespan="on",
        server_header=False,
        log_config=None,
    )
    return APIServer(config, context)


def main() -> None:
    """Run the API until shutdown and exit with the context's exit code."""
    context = create_context()
    server = build_server(context)
    server.run()
    sys.exit(context.exit_code)


if __name__ == "__main__":
    main()
