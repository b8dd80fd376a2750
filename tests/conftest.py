"""
Shared pytest fixtures for SessionGuard tests.

This module provides common fixtures including:
- Browser: a simulated client making sequential requests against one store
- Deterministic clock and random sources for rotation tests
- Redis mocks for storage tests
"""

import os
import random
import sys
from typing import Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionguard.config.provider import StaticFeatureFlags
from sessionguard.modules.lifecycle import SessionController
from sessionguard.modules.request import RequestContext
from sessionguard.modules.storage import InMemorySessionStore
from sessionguard.modules.transport import CookieTransport, cookie_name_for


SESSION_NAME = "test"
COOKIE_NAME = cookie_name_for(SESSION_NAME)
FIREFOX = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.5; rv:10.0.1) "
    "Gecko/20100101 Firefox/10.0.1 SeaMonkey/2.7.1"
)


# =============================================================================
# Deterministic time and randomness
# =============================================================================


class FakeClock:
    """Manually advanced UNIX clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedRandom(random.Random):
    """Random source whose randint always returns the same draw."""

    def __init__(self, draw: int):
        super().__init__(0)
        self.draw = draw

    def randint(self, a: int, b: int) -> int:
        return self.draw


# =============================================================================
# Simulated client
# =============================================================================


class Browser:
    """
    A client that keeps its session cookie between requests.

    Every call to request() builds a fresh SessionController, like one
    incoming HTTP request would.
    """

    def __init__(
        self,
        store,
        flags: StaticFeatureFlags,
        clock: FakeClock,
        rng: Optional[random.Random] = None,
        remote_addr: str = "1.2.3.4",
        user_agent: str = FIREFOX,
        host: str = "random.com",
        is_secure: bool = False,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.flags = flags
        self.clock = clock
        self.rng = rng if rng is not None else FixedRandom(100)
        self.remote_addr = remote_addr
        self.user_agent = user_agent
        self.host = host
        self.is_secure = is_secure
        self.id_factory = id_factory
        self.cookies: Dict[str, str] = {}

    @property
    def session_id(self) -> Optional[str]:
        return self.cookies.get(COOKIE_NAME)

    def request(self) -> SessionController:
        transport = (
            CookieTransport(dict(self.cookies), id_factory=self.id_factory)
            if self.id_factory
            else CookieTransport(dict(self.cookies))
        )
        return SessionController.build(
            store=self.store,
            transport=transport,
            request=RequestContext(
                remote_addr=self.remote_addr,
                user_agent=self.user_agent,
                host=self.host,
                is_secure=self.is_secure,
            ),
            flags=self.flags,
            rng=self.rng,
            clock=self.clock,
        )

    def receive(self, session: SessionController) -> None:
        """Accept the cookie a response would carry."""
        if session.transport.pending:
            self.cookies[COOKIE_NAME] = session.session_id

    async def visit(self, handler: Optional[Callable[[SessionController], None]] = None) -> SessionController:
        """Run one full request: start, handler, commit, cookie."""
        session = self.request()
        await session.start(SESSION_NAME)
        if handler:
            handler(session)
        await session.commit()
        self.receive(session)
        return session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def flags():
    return StaticFeatureFlags()


@pytest.fixture
def store(clock):
    return InMemorySessionStore(clock=clock)


@pytest.fixture
def browser(store, flags, clock):
    return Browser(store, flags, clock)


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage = {}
    ttls = {}

    redis = AsyncMock()

    async def mock_setex(key, ttl, value):
        storage[key] = value
        ttls[key] = ttl
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                ttls.pop(key, None)
                count += 1
        return count

    redis.setex = AsyncMock(side_effect=mock_setex)
    redis.get = AsyncMock(side_effect=mock_get)
    redis.delete = AsyncMock(side_effect=mock_delete)
    redis._storage = storage  # Expose for test assertions
    redis._ttls = ttls

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
