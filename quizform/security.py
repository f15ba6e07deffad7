import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from . import models
from .database import get_db_session

# --- Auth configuration ---
# Example .env:
# JWT_SECRET="change-me"
# ACCESS_TOKEN_EXPIRE_MINUTES=720
JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(12 * 60)))

if JWT_SECRET == "dev_secret_change_me":
    print("WARNING: JWT_SECRET not set, using the development secret.")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user: models.User, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": str(user.id), "role": user.role, "exp": expire}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _user_from_header(authorization: str, db: AsyncSession) -> models.User:
    parts = authorization.split()
    # Expected format: "Bearer <token>"
    if len(parts) != 2 or parts[0].lower() != "bearer":
        print("Access denied: malformed Authorization header.")
        raise _unauthorized("Invalid token format. Expected: 'Bearer <token>'")

    try:
        payload = jwt.decode(parts[1], JWT_SECRET, algorithms=[JWT_ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        print("Access denied: invalid or expired token.")
        raise _unauthorized("Invalid or expired token.")

    user = await db.get(models.User, user_id)
    if user is None:
        raise _unauthorized("User not found.")
    if user.is_blocked:
        print(f"Access denied: user {user.id} is blocked.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is blocked.")
    return user


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> models.User:
    if authorization is None:
        raise _unauthorized("Not authenticated: token required.")
    return await _user_from_header(authorization, db)


async def get_optional_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[models.User]:
    """Anonymous callers get None, a supplied but invalid token is still a 401."""
    if authorization is None:
        return None
    return await _user_from_header(authorization, db)


async def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if not user.is_admin:
        print(f"Admin access denied for user {user.id}.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return user
