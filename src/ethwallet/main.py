"""Application entry point for the wallet server."""

from __future__ import annotations

import os

import uvicorn

from ethwallet.config.settings import AppConfig


def main() -> None:
    """Start the wallet server."""
    config = AppConfig()
    reload = os.getenv("ETHWALLET_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "ethwallet.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level,
    )


if __name__ == "__main__":
    main()
