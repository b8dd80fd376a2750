import logging
import random
import time
from typing import Any, Callable, Mapping, Optional, Protocol

from ...config.provider import FeatureFlags

logger = logging.getLogger(__name__)

OBSOLETE_KEY = "OBSOLETE"
EXPIRES_KEY = "EXPIRES"

DEFAULT_GRACE_SECONDS = 10
DEFAULT_PROBABILITY_PERCENT = 5


class Rebindable(Protocol):
    """What the policy needs from a session to rotate its identifier."""

    data: dict

    async def rebind(self) -> str:
        """Persist the current data under the old identifier and move it to a new one."""
        ...


class RotationPolicy:
    def __init__(
        self,
        flags: FeatureFlags,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        grace_seconds: int = DEFAULT_GRACE_SECONDS,
        probability_percent: int = DEFAULT_PROBABILITY_PERCENT,
    ):
        """
        Initialize rotation policy.

        Args:
            flags: Feature flags, consulted on every evaluation
            rng: Random generator for routine rotation (seed it in tests)
            clock: Returns the current UNIX time in seconds
            grace_seconds: How long a retired identifier stays usable
            probability_percent: Chance of a routine rotation per evaluation
        """
        self.flags = flags
        self.rng = rng or random.Random()
        self.clock = clock
        self.grace_seconds = grace_seconds
        self.probability_percent = probability_percent

    def is_valid(self, data: Mapping[str, Any]) -> bool:
        """
        Check whether session data may still be used.

        Args:
            data: Session data bound to the presented identifier

        Returns:
            False for a corrupt OBSOLETE/EXPIRES pairing or a lapsed grace window
        """
        if not self.flags.rotation_enabled():
            return True

        if data.get(OBSOLETE_KEY) and EXPIRES_KEY not in data:
            logger.warning("Session marked obsolete without expiry")
            return False

        if EXPIRES_KEY in data:
            expires = data[EXPIRES_KEY]
            if isinstance(expires, bool) or not isinstance(expires, (int, float)):
                logger.warning(f"Session has malformed expiry {expires!r}")
                return False
            if expires < self.clock():
                logger.info("Session grace window has elapsed")
                return False

        return True

    def should_randomly_regenerate(self) -> bool:
        """Roll for a routine rotation."""
        if not self.flags.rotation_enabled():
            return False
        return self.rng.randint(1, 100) <= self.probability_percent

    @staticmethod
    def is_obsolete(data: Mapping[str, Any]) -> bool:
        return bool(data.get(OBSOLETE_KEY))

    async def regenerate_session(self, session: Rebindable) -> bool:
        """
        Move the session's data to a freshly minted identifier.

        The old identifier keeps a copy marked OBSOLETE that expires after
        the grace window, so requests already in flight with it still work.

        Args:
            session: The session to rotate

        Returns:
            True if an identifier swap happened
        """
        if not self.flags.rotation_enabled():
            return False

        # A request already rotated this data; the new identifier exists.
        if self.is_obsolete(session.data):
            logger.debug("Session already obsolete, skipping rotation")
            return False

        session.data[OBSOLETE_KEY] = True
        session.data[EXPIRES_KEY] = int(self.clock()) + self.grace_seconds

        await session.rebind()

        session.data.pop(OBSOLETE_KEY, None)
        session.data.pop(EXPIRES_KEY, None)
        return True
