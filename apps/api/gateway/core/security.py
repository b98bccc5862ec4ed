"""Authentication seam consumed by the gateway routes.

Session handling lives in the host application's auth middleware, which is
expected to place a ``CurrentUser`` on ``request.state.user``. Routes only depend
on the helpers below so the middleware can be swapped without touching them.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status


@dataclass(slots=True)
class CurrentUser:
    id: int
    username: str
    role: str = "user"
    is_admin: bool = False

    @property
    def is_admin_user(self) -> bool:
        return self.is_admin or self.role == "admin"


def get_current_user(request: Request) -> CurrentUser | None:
    """Return the authenticated user, if any."""

    user = getattr(request.state, "user", None)
    return user if isinstance(user, CurrentUser) else None


def require_user(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """Reject anonymous callers with 401."""

    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def require_admin(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """Reject callers without the admin flag or role with 403."""

    if user is None or not user.is_admin_user:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized - Admin access required")
    return user
