"""
ARTA Backend Entry Point.

Bootstraps the dependency graph via constructor injection and serves the
FastAPI application with uvicorn.  Every subsystem is wired here; no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor

import uvicorn

from arta_backend.api import create_app
from arta_backend.config import get_config
from arta_backend.database import FirebaseManager
from arta_backend.logger import StructuredLogger, configure_server_logging, get_logger
from arta_backend.services import create_services
from arta_backend.services.identity_directory import IdentityDirectory


def main() -> None:
    """Application entry point: wire dependencies and start the HTTP server."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting ARTA backend...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Firebase Admin app, Firestore and Firebase Auth
    # ------------------------------------------------------------------
    firebase = FirebaseManager(config=config, logger=StructuredLogger(name="database"))
    directory = IdentityDirectory(app=firebase.app, logger=get_logger("identity"))

    # ------------------------------------------------------------------
    # 3. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    # Last-login stamps are written off the request path.
    background = ThreadPoolExecutor(max_workers=4, thread_name_prefix="last-login")
    services = create_services(
        store=firebase.document_store,
        directory=directory,
        config=config,
        executor=background,
    )

    # ------------------------------------------------------------------
    # 4. HTTP server (blocks until shutdown)
    # ------------------------------------------------------------------
    app = create_app(services=services, config=config)
    configure_server_logging(config.log_level)
    logger.info("Backend listening on http://%s:%d", config.HOST, config.PORT)
    try:
        uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None)
    finally:
        background.shutdown(wait=True)
        logger.info("ARTA backend shut down.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n")
        sys.exit(1)
