# backend/compliancedb/security.py

"""
Security helpers for compliancedb.

Responsibilities:
- JWT access token creation and decoding
- FastAPI dependencies resolving the caller to an organization member
- Role-based access helpers for router dependencies
- Shared-secret check for the scheduler trigger

There are no login or password flows here; tokens are minted by the
identity provider in front of this service (or `create_access_token` in
tests and scripts).
"""

from __future__ import annotations

import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Set, Union

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from compliancedb.apps.accounts import models as account_models
from compliancedb.apps.accounts.models import MemberRole

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# In production, ALWAYS override these via environment variables.
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 60

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# JWT TOKENS
# ---------------------------------------------------------------------------


def create_access_token(
    *,
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT.

    The `data` dict should already include the subject, e.g.:
        {"sub": member.id, "org_id": member.org_id}
    """
    to_encode = data.copy()

    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


# ---------------------------------------------------------------------------
# MEMBER LOOKUP
# ---------------------------------------------------------------------------


def get_member_by_id(
    db: Session,
    member_id: Union[str, int],
) -> Optional[account_models.OrgMember]:
    if member_id is None:
        return None
    return (
        db.query(account_models.OrgMember)
        .filter(account_models.OrgMember.id == str(member_id).strip())
        .first()
    )


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _member_from_token(db: Session, token: str) -> account_models.OrgMember:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        member_id = payload.get("sub")
        if member_id is None:
            raise _credentials_exception()
    except JWTError:
        raise _credentials_exception()

    member = get_member_by_id(db, member_id)
    if member is None:
        raise _credentials_exception()
    if not member.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive member",
        )
    return member


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_current_member(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> account_models.OrgMember:
    """Decode the bearer token; `sub` is the OrgMember id."""
    return _member_from_token(db, token)


def get_optional_member(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[account_models.OrgMember]:
    """Like get_current_member, but anonymous callers (magic links) get None."""
    if not token:
        return None
    return _member_from_token(db, token)


def require_roles(
    *allowed_roles: Union[MemberRole, str],
) -> Callable[[account_models.OrgMember], account_models.OrgMember]:
    """
    Dependency factory to enforce that the current member has one of the given roles.

    Usage:
        @router.post(...)
        def endpoint(member: OrgMember = Depends(require_roles("OWNER", "ADMIN"))):
            ...
    """
    normalised_roles: Set[MemberRole] = set()
    for r in allowed_roles:
        if isinstance(r, MemberRole):
            normalised_roles.add(r)
        else:
            try:
                normalised_roles.add(MemberRole(r))
            except ValueError:
                raise ValueError(f"Unknown role {r!r} passed to require_roles()")

    def dependency(
        current_member: account_models.OrgMember = Depends(get_current_member),
    ) -> account_models.OrgMember:
        if current_member.role not in normalised_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_member

    return dependency


# OWNER / ADMIN: assign, remind and remove training for the organization.
require_team_manager = require_roles(MemberRole.OWNER, MemberRole.ADMIN)


# ---------------------------------------------------------------------------
# SCHEDULER TRIGGER
# ---------------------------------------------------------------------------


def cron_secret() -> Optional[str]:
    return os.getenv("CRON_SECRET") or None


def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """
    When CRON_SECRET is set, the caller must send `Authorization: Bearer <secret>`.
    With no secret configured the trigger is open (local development).
    """
    secret = cron_secret()
    if not secret:
        return
    expected = f"Bearer {secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
