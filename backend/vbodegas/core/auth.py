"""
JWT auth dependency for FastAPI.
Validates HS256 bearer tokens signed with SECRET_KEY and enforces admin roles.
"""

import os
import jwt
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from vbodegas.core.config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)  # Don't auto-error so dev mode can skip

WRITE_ROLES = ("admin", "superadmin", "editor")
READ_ROLES = WRITE_ROLES + ("viewer",)


@dataclass
class CurrentUser:
    email: str
    rol: str


def create_access_token(email: str, rol: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"email": email, "rol": rol, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    # Dev mode: every request acts as a local superadmin
    if os.environ.get("DEV_MODE", "").lower() == "true":
        return CurrentUser(email="dev@localhost", rol="superadmin")

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.error(f"Invalid token: {e}")
        raise credentials_exception

    email = payload.get("email")
    rol = payload.get("rol")
    if not email or not rol:
        raise credentials_exception
    return CurrentUser(email=email, rol=rol)


def require_roles(*roles: str) -> Callable:
    """Dependency factory: 403 unless the caller's rol is one of ``roles``."""

    async def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.rol not in roles:
            logger.warning(f"Denied {current_user.email} (rol={current_user.rol}), needs one of {roles}")
            raise HTTPException(status_code=403, detail="Permiso denegado")
        return current_user

    return dependency
