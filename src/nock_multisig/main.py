"""Application entry point for the multisig HTTP service."""

from __future__ import annotations

import os

import uvicorn

from nock_multisig.config.settings import AppConfig


def main() -> None:
    """Start the multisig service."""
    config = AppConfig()
    reload = os.getenv("MULTISIG_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "nock_multisig.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level=config.log_level.value,
    )


if __name__ == "__main__":
    main()
