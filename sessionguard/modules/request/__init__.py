"""
Request Module - Black Box Interface

Purpose: Carry read-only request metadata into session validation
Interface: RequestContext, RequestContext.from_request()
Hidden: Header parsing, proxy-free host resolution

Validation code never reads ambient request state; it receives one of these.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request


@dataclass(frozen=True)
class RequestContext:
    """Client metadata for a single request."""
    remote_addr: Optional[str] = None
    user_agent: Optional[str] = None
    host: Optional[str] = None
    is_secure: bool = False

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        """
        Build a context from a Starlette/FastAPI request.

        Args:
            request: Incoming request

        Returns:
            RequestContext populated from the connection and headers
        """
        return cls(
            remote_addr=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            host=request.url.hostname,
            is_secure=request.url.scheme == "https",
        )


__all__ = ["RequestContext"]
