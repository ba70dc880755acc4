from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g

from app.rdcpm.errors import json_error
from app.rdcpm.models import User


def user_has_permission(user: User | None, permission_key: str) -> bool:
    if not user or not user.is_active:
        return False
    for role in user.roles:
        for perm in role.permissions:
            if perm.key == permission_key:
                return True
    return False


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        user: User | None = getattr(g, "current_user", None)
        if not user or not user.is_active:
            return json_error(401, "Authentication required", "Please log in to continue.")
        return fn(*args, **kwargs)

    return wrapped


def require_permission(permission_key: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user: User | None = getattr(g, "current_user", None)
            # Unauthenticated → 401 (the client redirects to its login screen).
            if not user or not user.is_active:
                return json_error(401, "Authentication required", "Please log in to continue.")
            # Authenticated but unauthorized → 403
            if not user_has_permission(user, permission_key):
                g.missing_permission = permission_key
                current_app.logger.warning(
                    "Forbidden: missing_permission=%s request_id=%s", permission_key, getattr(g, "request_id", None)
                )
                return json_error(403, "Insufficient permissions", f"Missing permission: {permission_key}")
            return fn(*args, **kwargs)

        return wrapped

    return decorator
