"""
FastAPI application for the Resource Listing Registry.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import get_settings
from .db.base import get_db, init_database
from .logging_config import configure_logging
from .policy import RegistryError
from .registry.routes import registry_error_handler, router

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings)
    logger.info("registry_starting", environment=settings.environment)

    try:
        await init_database()
    except Exception as e:
        logger.error("registry_startup_failed", error=str(e))
        raise

    yield

    logger.info("registry_stopped")


app = FastAPI(
    title=settings.app_name,
    description="Registry of surplus resource listings with delegated permissions, "
    "verification and audit history",
    version=importlib.metadata.version("resource-registry"),
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RegistryError, registry_error_handler)
app.include_router(router)


@app.get("/health", tags=["system"])
async def health() -> dict:
    """Confirm the API is reachable."""
    return {"status": "ok"}


@app.get("/healthz", tags=["system"])
def healthz(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Health check including database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.error("healthz_db_check_failed", error=str(e))
        db_ok = False
    return {"ok": db_ok, "db": db_ok}


@app.get("/version", tags=["system"])
def version() -> dict[str, str]:
    """Return the version of the application."""
    return {"version": importlib.metadata.version("resource-registry")}
