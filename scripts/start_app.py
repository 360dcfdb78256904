#!/usr/bin/env python3
"""Run the comment API under uvicorn.

Startup failures are reported to logfire before the process exits.
"""

import sys

import logfire
import uvicorn

from murmur.config import Settings
from murmur.util.logging import setup_logging
from murmur.util.observability import configure_logfire


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    bind_host = "127.0.0.1" if settings.environment == "development" else "0.0.0.0"
    logfire.info(
        "Starting comment API",
        host=bind_host,
        port=settings.port,
        environment=settings.environment,
    )
    try:
        uvicorn.run(
            "murmur.interface.api.app:app",
            host=bind_host,
            port=settings.port,
            # Forwarding headers are evaluated against TRUSTED_PROXIES
            proxy_headers=False,
            log_level="debug" if settings.debug else "info",
        )
    except Exception as e:
        logfire.error(
            "Comment API failed to start",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
