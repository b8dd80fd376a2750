"""
Rotation Module - Black Box Interface

Purpose: Decide session validity and rotate session identifiers
Interface: is_valid(), should_randomly_regenerate(), regenerate_session()
Hidden: Grace window bookkeeping, OBSOLETE/EXPIRES markers, probability source

Rotation is race-tolerant: the OBSOLETE marker lets only one request swap the
identifier, and the grace window keeps the old identifier usable meanwhile.
"""

from .policy import (
    DEFAULT_GRACE_SECONDS,
    DEFAULT_PROBABILITY_PERCENT,
    EXPIRES_KEY,
    OBSOLETE_KEY,
    RotationPolicy,
)

__all__ = [
    "RotationPolicy",
    "OBSOLETE_KEY",
    "EXPIRES_KEY",
    "DEFAULT_GRACE_SECONDS",
    "DEFAULT_PROBABILITY_PERCENT",
]
