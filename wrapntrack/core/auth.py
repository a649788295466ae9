# wrapntrack/core/auth.py
"""
Bearer-token auth for the shop API.

Tokens are issued by the login service and only verified here. The
`users` table mirrors whoever presents a valid token: the first request
from a new `sub` creates the row, taking role and display name from the
claims.

Dependencies, loosest first:
    get_current_user   None for anonymous callers
    require_auth       401 without a token
    require_customer   403 for staff
    require_employee   403 for customers
"""
import uuid
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlmodel import Session

from wrapntrack.core.config import get_settings
from wrapntrack.database import get_session
from wrapntrack.models.user import User

settings = get_settings()

ROLES = ("customer", "employee")
DEFAULT_ROLE = "customer"

# auto_error=False: inventory and available-inventory are public
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature (and `exp` when the token carries one)."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid token")


def _account_id(claims: dict[str, Any]) -> tuple[uuid.UUID, str]:
    sub, email = claims.get("sub"), claims.get("email")
    if not sub or not email:
        raise _unauthorized("Token missing sub/email")
    try:
        return uuid.UUID(str(sub)), email
    except ValueError:
        raise _unauthorized("Invalid sub in token")


def _provision_user(session: Session, user_id: uuid.UUID, email: str, claims: dict[str, Any]) -> User:
    role = claims.get("role")
    user = User(
        id=user_id,
        email=email,
        name=claims.get("name") or email.split("@", 1)[0],
        role=role if role in ROLES else DEFAULT_ROLE,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    user_id, email = _account_id(claims)

    user = session.get(User, user_id)
    if user is None:
        user = _provision_user(session, user_id, email, claims)
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise _unauthorized("No token provided")
    return user


def _require_role(role: str, detail: str) -> Callable[[User], User]:
    def dependency(user: User = Depends(require_auth)) -> User:
        if user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    dependency.__name__ = f"require_{role}"
    return dependency


# Back-office: inventory curation, order management
require_employee = _require_role("employee", "Employee access required")

# Cart and "my orders"; staff accounts have no cart
require_customer = _require_role("customer", "Customer access required")
