# backend/assetdb/security.py

"""
Authentication for assetdb.

Tokens are issued by the surrounding identity service; this module trusts
and decodes them, loads the acting user and exposes the FastAPI
dependencies the routers use. Password helpers are kept for the bootstrap
scripts, which create accounts directly.

Token claims:
    sub         user id
    company_id  company the token was issued for (optional). A token whose
                company no longer matches the user's is rejected, so moving
                a user between companies invalidates their old tokens.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from typing import Callable, FrozenSet, Optional, Union

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from assetdb.apps.accounts import models as account_models
from assetdb.apps.accounts import services as account_services
from assetdb.apps.accounts.models import AccountRole

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

_password_hasher = PasswordHasher(
    time_cost=_int_env("ARGON2_TIME_COST", 3),
    memory_cost=_int_env("ARGON2_MEMORY_COST", 65536),  # KiB
    parallelism=_int_env("ARGON2_PARALLELISM", 2),
)

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


# ---------------------------------------------------------------------------
# PASSWORDS
# ---------------------------------------------------------------------------


def get_password_hash(password: str) -> str:
    """Argon2id hash for storage on User.hashed_password."""
    return _password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not (plain_password and hashed_password):
        return False

    if hashed_password.startswith(_BCRYPT_PREFIXES):
        # Imported accounts can carry bcrypt hashes from the old asset system.
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError:
            return False

    try:
        return _password_hasher.verify(hashed_password, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


# ---------------------------------------------------------------------------
# TOKENS
# ---------------------------------------------------------------------------


def create_access_token(*, data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign `data` (at least {"sub": user.id}) with an expiry claim."""
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = dict(data, exp=datetime.utcnow() + lifetime)
    return jwt.encode(claims, SECRET_KEY, algorithm=JWT_ALGORITHM)


def _unauthorised() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _decode_claims(token: str) -> dict:
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise _unauthorised()
    if not claims.get("sub"):
        raise _unauthorised()
    return claims


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> account_models.User:
    claims = _decode_claims(token)
    user = account_services.get_user_by_id(db, claims["sub"])
    if user is None:
        raise _unauthorised()

    if "company_id" in claims and claims["company_id"] != user.company_id:
        raise _unauthorised()

    return user


def get_current_active_user(
    current_user: account_models.User = Depends(get_current_user),
) -> account_models.User:
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user account",
        )
    return current_user


def _coerce_role(role: Union[AccountRole, str]) -> AccountRole:
    if isinstance(role, AccountRole):
        return role
    try:
        return AccountRole(role)
    except ValueError:
        raise ValueError(f"Unknown role {role!r} passed to require_roles()")


def require_roles(
    *allowed_roles: Union[AccountRole, str],
) -> Callable[[account_models.User], account_models.User]:
    """
    Dependency factory: the active user must hold one of `allowed_roles`.
    Superusers always pass. Company scoping is left to
    assetdb.permissions.authorize.
    """
    roles: FrozenSet[AccountRole] = frozenset(_coerce_role(role) for role in allowed_roles)

    def dependency(
        current_user: account_models.User = Depends(get_current_active_user),
    ) -> account_models.User:
        if current_user.is_superuser or current_user.role in roles:
            return current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions for this operation",
        )

    return dependency
