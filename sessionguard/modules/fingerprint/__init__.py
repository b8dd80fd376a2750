"""
Fingerprint Module - Black Box Interface

Purpose: Detect identity drift between requests sharing a session
Interface: Fingerprint.is_hijack_attempt(), Fingerprint.record(), mask_address()
Hidden: Address masking rules, which checks are enabled

Replaceable with a stronger fingerprint (TLS, device) without touching the lifecycle.
"""

from .fingerprint import (
    IP_ADDRESS_KEY,
    USER_AGENT_KEY,
    Fingerprint,
    mask_address,
)

__all__ = ["Fingerprint", "mask_address", "IP_ADDRESS_KEY", "USER_AGENT_KEY"]
