"""
Transport Module - Black Box Interface

Purpose: Deliver the session identifier to and from the client
Interface: CookieTransport.open(), mint(), destroy(), apply()
Hidden: Cookie naming, cookie attributes, identifier generation

The identifier cookie is always HttpOnly. Replaceable with header-based
transport without affecting the lifecycle.
"""

from .transport import (
    COOKIE_SUFFIX,
    CookieParams,
    CookieTransport,
    cookie_name_for,
    default_id_factory,
    redact_id,
)

__all__ = [
    "CookieTransport",
    "CookieParams",
    "COOKIE_SUFFIX",
    "cookie_name_for",
    "default_id_factory",
    "redact_id",
]
