from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi.security import HTTPBasic, OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# Used only for the catalog admin password; end users sign in with Google.
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (OAuth2PasswordBearer is FastAPI's helper for extracting
# Bearer tokens from Authorization headers - tokens are issued by /api/auth/google)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/google")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/google", auto_error=False)
admin_basic_scheme = HTTPBasic()


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password must not exceed 72 bytes when UTF-8 encoded.")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    if len(plain_password.encode("utf-8")) > 72:
        raise ValueError("Password must not exceed 72 bytes when UTF-8 encoded.")
    return pwd_context.verify(plain_password, hashed_password)


def verify_admin_credentials(username: str, password: str) -> bool:
    """Check catalog admin credentials against the configured username and bcrypt hash."""
    if not settings.admin_username or not settings.admin_password_hash:
        return False
    username_ok = secrets.compare_digest(
        username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    try:
        password_ok = verify_password(password, settings.admin_password_hash)
    except ValueError:
        return False
    return username_ok and password_ok


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def user_id_from_token(token: str | None) -> int | None:
    """Return the user id carried in a valid token's ``sub`` claim."""
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        return None
    user_id_value = payload.get("sub")
    if not isinstance(user_id_value, str):
        return None
    try:
        return int(user_id_value)
    except ValueError:
        return None
