"""
API Module - Black Box Interface

Purpose: HTTP data models for the session endpoints
Interface: Pydantic request/response models
Hidden: Which session keys are internal

The API module only orchestrates - it contains no business logic.
All logic is delegated to appropriate modules.
"""

from .models import (
    RESERVED_KEYS,
    SessionState,
    SessionSummary,
    SetValueRequest,
    ValueResponse,
)

__all__ = [
    "RESERVED_KEYS",
    "SessionState",
    "SessionSummary",
    "SetValueRequest",
    "ValueResponse",
]
