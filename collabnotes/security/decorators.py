"""Authentication decorator.

Identity is established upstream; the session only carries the resulting user id.
"""

import uuid
from functools import wraps
from typing import Callable, Optional, TypeVar, Union

from flask import g, jsonify, request, session

from .context import RequestContext, set_context

F = TypeVar("F", bound=Callable)


def get_session_user() -> Optional[int]:
    user_id = session.get("user_id")
    if user_id is None:
        return None
    try:
        return int(user_id)
    except (TypeError, ValueError):
        # Unusable identity: drop it rather than trust it
        session.pop("user_id", None)
        return None


def authenticated(
    f: Optional[F] = None,
    *,
    optional: bool = False,
) -> Union[F, Callable[[F], F]]:
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            user_id = get_session_user()
            if user_id is None and not optional:
                return jsonify(
                    {"error": {"code": "unauthorized", "message": "unauthorized"}}
                ), 401

            ctx = RequestContext(
                user_id=user_id,
                request_id=g.get("request_id", str(uuid.uuid4())),
                ip_address=request.remote_addr or "",
            )
            set_context(ctx)

            return func(ctx, *args, **kwargs)

        return wrapper

    if f is not None:
        return decorator(f)
    return decorator
