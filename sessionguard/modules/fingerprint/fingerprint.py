import ipaddress
import logging
from typing import Any, Mapping, Optional

from ...config.provider import FeatureFlags
from ..request import RequestContext

logger = logging.getLogger(__name__)

IP_ADDRESS_KEY = "ipAddress"
USER_AGENT_KEY = "userAgent"

MASK_PLACEHOLDER = "x"


def mask_address(address: Optional[str]) -> Optional[str]:
    """
    Mask the last octet of an IPv4 address.

    Edge proxies and CDNs rotate egress addresses inside the same /24, so
    only the first three octets take part in the comparison.

    Args:
        address: Client address as reported by the connection

    Returns:
        "a.b.c.x" for IPv4 input, the input unchanged otherwise
    """
    if not address:
        return address
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError:
        return address
    if not isinstance(parsed, ipaddress.IPv4Address):
        return address

    head, _, _ = str(parsed).rpartition(".")
    return f"{head}.{MASK_PLACEHOLDER}"


class Fingerprint:
    def __init__(self, flags: FeatureFlags):
        """
        Initialize fingerprint checks.

        Args:
            flags: Feature flags, consulted on every evaluation
        """
        self.flags = flags

    def is_hijack_attempt(self, data: Mapping[str, Any], request: RequestContext) -> bool:
        """
        Decide whether the stored fingerprint no longer matches the client.

        Args:
            data: Session data bound to the presented identifier
            request: Metadata for the current request

        Returns:
            True when any enabled check fails

        Logic:
        1. Address check (only when enabled): missing stored address, or
           masked stored address differs from masked current address
        2. User agent check (always): missing stored user agent, or exact
           mismatch with the current one
        """
        if self.flags.address_check_enabled():
            if IP_ADDRESS_KEY not in data:
                logger.debug("No stored address in session fingerprint")
                return True

            if mask_address(data[IP_ADDRESS_KEY]) != mask_address(request.remote_addr):
                logger.warning(
                    f"Client address changed from {mask_address(data[IP_ADDRESS_KEY])} "
                    f"to {mask_address(request.remote_addr)}"
                )
                return True

        if USER_AGENT_KEY not in data:
            logger.debug("No stored user agent in session fingerprint")
            return True

        if data[USER_AGENT_KEY] != request.user_agent:
            logger.warning("Client user agent changed within session")
            return True

        return False

    @staticmethod
    def record(data: dict, request: RequestContext) -> None:
        """Write the current client's fingerprint into session data."""
        data[IP_ADDRESS_KEY] = request.remote_addr
        data[USER_AGENT_KEY] = request.user_agent
