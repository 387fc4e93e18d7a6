"""
Security module - caller identity, access decisions and random tokens.

Usage:
    from collabnotes.security import authenticated, RequestContext

    @authenticated
    def my_route(ctx: RequestContext, public_id: str):
        # ctx.user_id is guaranteed; use @authenticated(optional=True) for
        # routes that anonymous callers may reach
        ...
"""

# Context types
from .context import RequestContext, set_context

# Crypto utilities
from .crypto import (
    UNAMBIGUOUS_ALPHABET,
    create_invitation_hash,
    create_public_id,
)

# Decorator
from .decorators import authenticated

# Permissions
from .permissions import AccessDecisionEngine

__all__ = [
    # Context
    "RequestContext",
    "set_context",
    # Decorator
    "authenticated",
    # Permissions
    "AccessDecisionEngine",
    # Crypto
    "create_invitation_hash",
    "create_public_id",
    "UNAMBIGUOUS_ALPHABET",
]
