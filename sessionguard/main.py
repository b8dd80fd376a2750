#!/usr/bin/env python3
"""
SessionGuard - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from sessionguard.config.provider import ConfigProvider, EnvConfigProvider
from sessionguard.logging_config import get_logging_config

# Import modules through their black box interfaces
from sessionguard.modules.api import (
    RESERVED_KEYS,
    SessionState,
    SessionSummary,
    SetValueRequest,
    ValueResponse,
)
from sessionguard.modules.lifecycle import SessionController
from sessionguard.modules.middleware import (
    SessionMiddleware,
    create_session_middleware,
    get_session,
)
from sessionguard.modules.rotation import OBSOLETE_KEY
from sessionguard.modules.storage import InMemorySessionStore, SessionStore, StorageModule

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()
api_config = config_provider.get_api_config()

# Configure logging with health check suppression
log_config.dictConfig(get_logging_config(api_config.log_level))
logger = logging.getLogger(__name__)

# Module instances (initialized at startup)
storage_module: Optional[StorageModule] = None
session_store: Optional[SessionStore] = None
session_middleware: Optional[SessionMiddleware] = None


async def build_session_store(backend: str, ttl: int) -> SessionStore:
    """Create the configured session store."""
    global storage_module

    if backend == "memory":
        return InMemorySessionStore(default_ttl=ttl)
    if backend == "redis":
        settings = config_provider.get_redis_settings()
        storage_module = StorageModule(settings.url, password=settings.password)
        return await storage_module.session_store(default_ttl=ttl)
    raise ValueError(f"Unknown SESSION_STORE backend: {backend}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global session_store, session_middleware, storage_module

    # Startup
    logger.info("Starting SessionGuard API...")

    settings = config_provider.get_session_settings()
    session_store = await build_session_store(settings.store, settings.ttl)
    logger.info(f"Session store: {settings.store}")

    session_middleware = create_session_middleware(
        store=session_store,
        settings=settings,
        flags=config_provider.get_feature_flags(),
    )

    logger.info("SessionGuard API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down SessionGuard API...")

    if storage_module:
        await storage_module.disconnect()
        storage_module = None
    session_middleware = None
    session_store = None
    logger.info("SessionGuard API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="SessionGuard API",
    description="SessionGuard - session integrity, hijack detection and identifier rotation",
    version="1.0.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def bind_session(request: Request, call_next):
    """Run every request through the session middleware once it is initialized."""
    if session_middleware is None:
        return await call_next(request)
    return await session_middleware(request, call_next)


def _check_key(key: str) -> None:
    if key in RESERVED_KEYS:
        raise ValueError(f"'{key}' is reserved for session bookkeeping")


@app.get("/session", response_model=SessionSummary)
async def describe_session(session: SessionController = Depends(get_session)):
    """
    Describe the current session without revealing its identifier.

    Returns:
        Session state, application keys and whether the identifier rotated
    """
    state = SessionState.OBSOLETE if session.has(OBSOLETE_KEY) else SessionState.ACTIVE
    return SessionSummary(state=state, keys=list(session.data.keys()), rotated=session.rotations > 0)


@app.get("/session/values/{key}", response_model=ValueResponse)
async def read_value(key: str, session: SessionController = Depends(get_session)):
    """Read one application value from the session."""
    _check_key(key)
    return ValueResponse(key=key, value=session.get(key), present=session.has(key))


@app.put("/session/values/{key}", response_model=ValueResponse)
async def write_value(
    key: str,
    payload: SetValueRequest,
    session: SessionController = Depends(get_session),
):
    """Store one application value in the session."""
    _check_key(key)
    session.set(key, payload.value)
    return ValueResponse(key=key, value=payload.value, present=True)


@app.delete("/session/values/{key}", status_code=204)
async def remove_value(key: str, session: SessionController = Depends(get_session)):
    """Remove one application value from the session."""
    _check_key(key)
    session.remove(key)


@app.post("/session/destroy", status_code=204)
async def destroy_session(session: SessionController = Depends(get_session)):
    """Clear the session and issue a new identifier."""
    await session.destroy_session()


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Served without a session so probes never create one.
    """
    return {
        "status": "healthy" if session_middleware else "starting",
        "store": type(session_store).__name__ if session_store else None,
    }


# Error handlers


@app.exception_handler(redis.ConnectionError)
async def redis_error_handler(request, exc):
    """Handle Redis connection errors."""
    logger.error(f"Redis connection error: {exc}")
    return JSONResponse(status_code=503, content={"error": "Session store unavailable"})


@app.exception_handler(ValueError)
async def validation_error_handler(request, exc):
    """Handle validation errors."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


if __name__ == "__main__":
    # Use dict config for logging, not file path
    uvicorn.run(
        "sessionguard.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )
