from collections.abc import Callable

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskhub.core.config import get_settings
from taskhub.core.errors import AccessDeniedError, UnauthenticatedError, ValidationError
from taskhub.core.security import decode_token
from taskhub.db import store
from taskhub.db.models import Role
from taskhub.db.session import get_db
from taskhub.db.store import PageRequest
from taskhub.services.access import Caller


bearer_scheme = HTTPBearer(auto_error=False)
settings = get_settings()

# Offsets are bound as signed 64-bit integers.
MAX_OFFSET = 2**63 - 1


def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Caller | None:
    if credentials is None:
        return None
    email = decode_token(credentials.credentials)
    if not email:
        return None
    user = store.find_user_by_email(db, email)
    if user is None:
        return None
    return Caller.from_user(user)


def require_caller(caller: Caller | None = Depends(get_caller)) -> Caller:
    if caller is None:
        raise UnauthenticatedError("Authentication required")
    return caller


def require_roles(*roles: Role) -> Callable[..., Caller]:
    def dependency(caller: Caller = Depends(require_caller)) -> Caller:
        if caller.role not in roles:
            raise AccessDeniedError("Access denied: You don't have permission to access this resource")
        return caller

    return dependency


def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(settings.default_page_size, ge=1),
    sort: str | None = Query("id"),
) -> PageRequest:
    if size > settings.max_page_size:
        raise ValidationError("Validation failed", {"size": f"must be at most {settings.max_page_size}"})
    if page * size > MAX_OFFSET:
        raise ValidationError("Validation failed", {"page": f"must be at most {MAX_OFFSET // size}"})
    return PageRequest.parse(page, size, sort)
