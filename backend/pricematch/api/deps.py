"""
Request dependencies.

WHAT: Current user and platform injection for endpoints
WHY: Endpoints never import a backend client or trust request bodies for identity
HOW: Identity headers set by the auth gateway -> UserIdentity; platform via factory
"""

from typing import Optional

from fastapi import Depends, Header
from pydantic import ValidationError as PydanticValidationError

from ..capabilities.factory import Platform, get_platform
from ..models.domain import UserIdentity
from ..utils.exceptions import (
    AdminRequiredException,
    AuthenticationRequiredException,
    ValidationException,
)


def platform_dependency() -> Platform:
    """Platform for the request (overridden in tests)."""
    return get_platform()


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> UserIdentity:
    """
    Build the caller's identity from gateway headers.

    Raises:
        AuthenticationRequiredException: id or email header missing
        ValidationException: malformed identity
    """
    if not x_user_id or not x_user_email:
        raise AuthenticationRequiredException()

    try:
        return UserIdentity(
            id=x_user_id,
            email=x_user_email,
            display_name=x_user_name or None,
            role=x_user_role or "user",
        )
    except PydanticValidationError as e:
        raise ValidationException(
            "Invalid identity headers",
            field_errors=[{"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]} for err in e.errors()]
        ) from e


def require_admin(user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
    if not user.is_admin:
        raise AdminRequiredException(user.id)
    return user
