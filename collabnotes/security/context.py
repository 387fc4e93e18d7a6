"""Request context - single source of truth for the caller's identity."""

from dataclasses import dataclass
from typing import Optional

from flask import g


@dataclass(frozen=True)
class RequestContext:
    """Immutable request context. Created once, never mutated."""

    user_id: Optional[int]
    request_id: str = ""
    ip_address: str = ""


def set_context(ctx: RequestContext) -> None:
    if g.get("_security_context") is not None:
        raise RuntimeError("Security context already set for this request")
    g._security_context = ctx
