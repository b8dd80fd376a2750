"""
SessionGuard API data models.

These models define the structure of data exchanged with the
demo session endpoints.
"""

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field, field_validator

from ..fingerprint import IP_ADDRESS_KEY, USER_AGENT_KEY
from ..rotation import EXPIRES_KEY, OBSOLETE_KEY

RESERVED_KEYS = (IP_ADDRESS_KEY, USER_AGENT_KEY, OBSOLETE_KEY, EXPIRES_KEY)

# Enums


class SessionState(str, Enum):
    """Lifecycle state of the session as seen by the current request."""

    ACTIVE = "active"
    OBSOLETE = "obsolete"


# Request Models (API Input)


class SetValueRequest(BaseModel):
    """Store a value in the session."""

    value: Any = Field(..., description="JSON value to store under the key")


# Response Models (API Output)


class ValueResponse(BaseModel):
    """A single session value."""

    key: str
    value: Any = None
    present: bool


class SessionSummary(BaseModel):
    """Identifier-free description of the current session."""

    state: SessionState
    keys: List[str] = Field(default_factory=list)
    rotated: bool = Field(False, description="Identifier was replaced during this request")

    @field_validator("keys")
    @classmethod
    def hide_reserved_keys(cls, v: List[str]) -> List[str]:
        """Control keys are internal to the session lifecycle."""
        return sorted(key for key in v if key not in RESERVED_KEYS)
