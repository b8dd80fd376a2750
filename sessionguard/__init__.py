"""
SessionGuard - Session Integrity for Web Applications

Validates every request's session, resets sessions that look hijacked or
whose rotation grace window has lapsed, and rotates session identifiers.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- request: Read-only request metadata
- fingerprint: Hijack detection from address and user agent
- rotation: Validity checks and identifier rotation
- storage: Session data persistence
- transport: Identifier cookie handling
- lifecycle: Per-request orchestration
- middleware: FastAPI integration
"""

__version__ = "1.0.0"
