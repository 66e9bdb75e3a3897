"""FastAPI application for credguard."""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credguard.backup import BackupService, ScanScheduler
from credguard.config import BackupConfig
from .config import settings
from .routers import backup, health, login, scan

# App-managed pattern: attach our own handler and don't propagate
# This makes us independent of uvicorn's root logger configuration
credguard_logger = logging.getLogger("credguard")
credguard_logger.setLevel(logging.INFO)
credguard_logger.propagate = False

# Clear any existing handlers to avoid duplicates
credguard_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
credguard_logger.addHandler(console_handler)

# Allow disabling app-managed logging via env var
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    credguard_logger.handlers.clear()
    credguard_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


def load_backup_config() -> BackupConfig:
    """Backup config from the JSON file in settings, else from the environment."""
    if settings.config_file:
        logger.info(f"Loading config file {settings.config_file}")
        return BackupConfig.from_file(settings.config_file)
    return BackupConfig.from_env()


def create_app(service: Optional[BackupService] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: Prebuilt service to serve; built from configuration at
            startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the backup service and its scheduler for the process lifetime."""
        app.state.service = service or BackupService(load_backup_config())
        app.state.scheduler = ScanScheduler(app.state.service, app.state.service.config.scan_interval)
        app.state.scheduler.start()

        yield

        logger.info("Shutting down, waiting for in-flight scan...")
        await app.state.scheduler.stop()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scan.router, prefix=settings.api_prefix)
    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(login.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
