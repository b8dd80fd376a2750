import logging
import random
import time
from typing import Any, Callable, Dict, Optional

from ...config.provider import FeatureFlags
from ...exceptions import IdentifierError
from ..fingerprint import Fingerprint
from ..request import RequestContext
from ..rotation import RotationPolicy
from ..storage import SessionStore
from ..transport import CookieParams, CookieTransport, cookie_name_for, redact_id

logger = logging.getLogger(__name__)


class SessionController:
    """
    Per-request session lifecycle.

    Validates the session bound to the request, resets it when it is
    expired, corrupt or looks hijacked, and rotates its identifier either
    forcibly or at random. Application code reads and writes the bound
    data through get/set/has/remove.
    """

    def __init__(
        self,
        store: SessionStore,
        transport: CookieTransport,
        request: RequestContext,
        fingerprint: Fingerprint,
        policy: RotationPolicy,
    ):
        """
        Initialize controller for one request.

        Args:
            store: Storage collaborator
            transport: Identifier transport for this request
            request: Metadata of this request
            fingerprint: Hijack detection
            policy: Validity and rotation decisions
        """
        self.store = store
        self.transport = transport
        self.request = request
        self.fingerprint = fingerprint
        self.policy = policy
        self.data: Dict[str, Any] = {}
        self.rotations = 0

    @classmethod
    def build(
        cls,
        store: SessionStore,
        transport: CookieTransport,
        request: RequestContext,
        flags: FeatureFlags,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> "SessionController":
        """Wire a controller with the default fingerprint and rotation policy."""
        return cls(
            store=store,
            transport=transport,
            request=request,
            fingerprint=Fingerprint(flags),
            policy=RotationPolicy(flags, rng=rng, clock=clock),
        )

    @property
    def session_id(self) -> Optional[str]:
        return self.transport.session_id

    async def start(
        self,
        name: str,
        lifetime: int = 0,
        path: str = "/",
        domain: Optional[str] = None,
        secure: Optional[bool] = None,
    ) -> None:
        """
        Bind and validate the session for this request.

        Args:
            name: Session name; the cookie is called "<name>_Session"
            lifetime: Cookie lifetime in seconds (0 = browser session)
            path: Cookie path
            domain: Cookie domain (defaults to the request host)
            secure: Secure cookie flag (defaults to whether the request used HTTPS)

        Raises:
            ValueError: If name is empty
            IdentifierError: If no identifier could be bound
        """
        if not name:
            raise ValueError("Session name must not be empty")

        if self.session_id is None:
            params = CookieParams(
                lifetime=lifetime,
                path=path,
                domain=self.request.host if domain is None else domain,
                secure=self.request.is_secure if secure is None else secure,
            )
            await self._open(cookie_name_for(name), params)

        if self.policy.is_valid(self.data):
            await self.initialise()
        else:
            await self.destroy_session()

    async def _open(self, cookie_name: str, params: CookieParams) -> None:
        session_id = self.transport.open(cookie_name, params)
        if not session_id:
            raise IdentifierError("Transport did not bind a session identifier")

        data = None
        if self.transport.presented:
            data = await self.store.read(session_id)
            if data is None:
                # Never adopt identifiers we did not issue.
                logger.info(f"Unknown session {redact_id(session_id)}, issuing a new identifier")
                self.transport.mint()

        self.data = data if data is not None else {}

    async def initialise(self) -> None:
        """Reset a hijacked session, or rotate at random."""
        if self.fingerprint.is_hijack_attempt(self.data, self.request):
            if self.data:
                logger.warning(
                    f"Fingerprint mismatch on session {redact_id(self.session_id)}, resetting"
                )
            else:
                logger.debug(f"Fingerprinting new session {redact_id(self.session_id)}")

            self.data.clear()
            self.fingerprint.record(self.data, self.request)
            await self.regenerate_session()
            return

        if self.policy.should_randomly_regenerate():
            await self.regenerate_session()

    async def regenerate_session(self) -> bool:
        """
        Rotate the session identifier, keeping its data.

        Returns:
            True if the identifier was replaced
        """
        return await self.policy.regenerate_session(self)

    async def rebind(self) -> str:
        """
        Retire the bound identifier and carry the data to a new one.

        If the client holds the old identifier, the data as it stands
        (including rotation markers) stays readable under it; the same
        mapping is then bound to a fresh identifier from the transport.

        Returns:
            The new identifier
        """
        old_id = self.session_id
        if old_id is None:
            raise IdentifierError("No session identifier is bound")

        if self.transport.presented:
            # Identifiers minted in this request were never issued.
            await self.store.write(old_id, self.data)
        new_id = self.transport.mint()
        self.rotations += 1

        logger.info(f"Rotated session {redact_id(old_id)} to {redact_id(new_id)}")
        return new_id

    async def destroy_session(self) -> None:
        """Clear the session and restart it empty under a new identifier."""
        old_id = self.session_id
        if old_id is None:
            return

        self.data.clear()
        await self.store.delete(old_id)
        self.transport.destroy()
        new_id = self.transport.mint()

        logger.info(f"Destroyed session {redact_id(old_id)}, restarted as {redact_id(new_id)}")

    async def commit(self) -> None:
        """Persist the bound data under the current identifier."""
        if self.session_id is None:
            return
        await self.store.write(self.session_id, self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def has(self, key: str) -> bool:
        return key in self.data

    def remove(self, key: str) -> None:
        self.data.pop(key, None)
