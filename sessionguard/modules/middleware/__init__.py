"""
Session Middleware Module - Black Box Interface

Purpose: Bind a validated session to every request of a FastAPI application
Interface: SessionMiddleware, create_session_middleware(), get_session()
Hidden: Controller wiring, cookie emission, end-of-request persistence

Can be used by any FastAPI app or sub-app that needs sessions.
Completely independent and replaceable.
"""

import logging
import random
import time
from typing import Callable, List, Optional

from fastapi import HTTPException, Request

from ...config.provider import FeatureFlags, SessionSettings
from ..lifecycle import SessionController
from ..request import RequestContext
from ..storage import SessionStore
from ..transport import CookieTransport, default_id_factory

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """
    Session middleware for FastAPI applications.

    For each request it builds a SessionController, starts it with the
    configured cookie settings and exposes it as request.state.session.
    After the handler returns, the session data is written back and the
    identifier cookie is set if it changed.
    """

    def __init__(
        self,
        store: SessionStore,
        settings: SessionSettings,
        flags: FeatureFlags,
        rng: Optional[random.Random] = None,
        skip_paths: Optional[List[str]] = None,
        id_factory: Callable[[], str] = default_id_factory,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize session middleware.

        Args:
            store: Storage collaborator shared by all requests
            settings: Session name and cookie attributes
            flags: Live feature flags
            rng: Random generator for routine rotation
            skip_paths: Paths served without a session (default: /health)
            id_factory: Produces new identifiers
            clock: Returns the current UNIX time in seconds
        """
        self.store = store
        self.settings = settings
        self.flags = flags
        self.rng = rng or random.Random()
        self.skip_paths = skip_paths if skip_paths is not None else ["/health"]
        self.id_factory = id_factory
        self.clock = clock

    def should_skip(self, request: Request) -> bool:
        """Check if this request is served without a session."""
        return str(request.url.path) in self.skip_paths

    def create_session(self, request: Request) -> SessionController:
        """Build the controller for one request."""
        return SessionController.build(
            store=self.store,
            transport=CookieTransport(request.cookies, id_factory=self.id_factory),
            request=RequestContext.from_request(request),
            flags=self.flags,
            rng=self.rng,
            clock=self.clock,
        )

    async def __call__(self, request: Request, call_next):
        """Process the request through the session middleware."""
        if self.should_skip(request):
            return await call_next(request)

        session = self.create_session(request)
        await session.start(
            self.settings.name,
            lifetime=self.settings.lifetime,
            path=self.settings.path,
            domain=self.settings.domain,
            secure=self.settings.secure,
        )
        request.state.session = session

        response = await call_next(request)

        await session.commit()
        session.transport.apply(response)
        return response


def create_session_middleware(
    store: SessionStore,
    settings: SessionSettings,
    flags: FeatureFlags,
    skip_paths: Optional[List[str]] = None,
) -> SessionMiddleware:
    """
    Factory function to create session middleware.

    Args:
        store: Storage collaborator
        settings: Session name and cookie attributes
        flags: Live feature flags
        skip_paths: Paths served without a session

    Returns:
        Configured SessionMiddleware instance
    """
    return SessionMiddleware(store=store, settings=settings, flags=flags, skip_paths=skip_paths)


def get_session(request: Request) -> SessionController:
    """FastAPI dependency returning the session bound by SessionMiddleware."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise HTTPException(503, "Session middleware not installed")
    return session


# Module interface - what this module provides
__all__ = [
    "SessionMiddleware",
    "create_session_middleware",
    "get_session",
]
