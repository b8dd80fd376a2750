import logging
import re
import secrets
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from starlette.responses import Response

from ...exceptions import IdentifierError

logger = logging.getLogger(__name__)

COOKIE_SUFFIX = "_Session"

# Identifiers presented by clients must look like ones we mint.
_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def default_id_factory() -> str:
    return secrets.token_urlsafe(32)


def cookie_name_for(name: str) -> str:
    return f"{name}{COOKIE_SUFFIX}"


def redact_id(session_id: Optional[str]) -> str:
    """Shorten an identifier for log output."""
    if not session_id:
        return "<none>"
    return f"{session_id[:6]}…"


@dataclass(frozen=True)
class CookieParams:
    """Transport attributes for the identifier cookie."""
    lifetime: int = 0
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    httponly: bool = field(default=True, init=False)


class CookieTransport:
    """
    Carries the session identifier in a cookie.

    One instance serves one request: it reads the identifier the client
    presented, mints replacements on demand, and writes the resulting
    cookie onto the response.
    """

    def __init__(
        self,
        cookies: Mapping[str, str],
        id_factory: Callable[[], str] = default_id_factory,
    ):
        """
        Initialize transport for one request.

        Args:
            cookies: Cookies sent with the request
            id_factory: Produces new identifiers
        """
        self.cookies = cookies
        self.id_factory = id_factory
        self.cookie_name: Optional[str] = None
        self.params: Optional[CookieParams] = None
        self._session_id: Optional[str] = None
        self._presented = False
        self._dirty = False

    @property
    def session_id(self) -> Optional[str]:
        """Identifier currently bound to this request, if any."""
        return self._session_id

    @property
    def presented(self) -> bool:
        """Whether the bound identifier came from the client."""
        return self._presented

    @property
    def pending(self) -> bool:
        """Whether the response must carry a new cookie."""
        return self._dirty and self._session_id is not None

    def presented_id(self, cookie_name: str) -> Optional[str]:
        value = self.cookies.get(cookie_name)
        if not value:
            return None
        if not _ID_PATTERN.match(value):
            logger.warning(f"Ignoring malformed session cookie {cookie_name}")
            return None
        return value

    def open(self, cookie_name: str, params: CookieParams) -> str:
        """
        Bind an identifier for this request.

        Args:
            cookie_name: Name of the identifier cookie
            params: Cookie attributes used whenever the cookie is (re)issued

        Returns:
            The presented identifier, or a newly minted one
        """
        self.cookie_name = cookie_name
        self.params = params

        presented = self.presented_id(cookie_name)
        if presented:
            self._session_id = presented
            self._presented = True
            return presented

        return self.mint()

    def mint(self) -> str:
        """
        Replace the bound identifier with a new one.

        Raises:
            IdentifierError: If the transport is not open or no identifier could be produced
        """
        if self.cookie_name is None:
            raise IdentifierError("Cannot mint an identifier before the transport is opened")

        new_id = self.id_factory()
        if not new_id:
            raise IdentifierError("Identifier factory produced an empty identifier")

        logger.debug(f"Minted session identifier {redact_id(new_id)}")
        self._session_id = new_id
        self._presented = False
        self._dirty = True
        return new_id

    def destroy(self) -> None:
        """Unbind the current identifier."""
        self._session_id = None
        self._presented = False

    def apply(self, response: Response) -> None:
        """Write the identifier cookie onto the response if it changed."""
        if not self.pending:
            return

        params = self.params or CookieParams()
        response.set_cookie(
            key=self.cookie_name,
            value=self._session_id,
            max_age=params.lifetime if params.lifetime > 0 else None,
            path=params.path,
            domain=params.domain,
            secure=params.secure,
            httponly=params.httponly,
            samesite="lax",
        )
