"""
Caller identity for API routes.

Tokens are verified upstream by the identity provider; the gateway forwards
the verified user id and role as headers.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from pydantic import BaseModel

from api.errors import AuthenticationRequired, PermissionDenied

logger = logging.getLogger(__name__)

ROLES = ("client", "freelancer")


class CurrentUser(BaseModel):
    id: str
    role: str


def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Verified user id"),
    x_user_role: Optional[str] = Header(None, description="Verified user role"),
) -> CurrentUser:
    """
    Build the caller identity from gateway headers.

    Raises:
        AuthenticationRequired: If the identity headers are missing or invalid
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationRequired("Missing user identity")

    role = (x_user_role or "").strip().lower()
    if role not in ROLES:
        logger.warning(f"Rejected request with unknown role '{x_user_role}'")
        raise AuthenticationRequired("Invalid user role")

    return CurrentUser(id=x_user_id.strip(), role=role)


def require_client(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != "client":
        raise PermissionDenied("Only clients can perform this action")
    return user


def require_freelancer(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != "freelancer":
        raise PermissionDenied("Only freelancers can perform this action")
    return user
