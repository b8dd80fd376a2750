"""
Lifecycle Module - Black Box Interface

Purpose: Decide per request whether a session is still trustworthy
Interface: start(), get(), set(), has(), remove(), destroy_session(), commit()
Hidden: Validation order, reset and rotation orchestration

One SessionController is built per request; there is no shared instance.
"""

from .controller import SessionController

__all__ = ["SessionController"]
