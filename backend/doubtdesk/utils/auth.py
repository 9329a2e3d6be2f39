"""
Bearer token auth for the doubt API.

Tokens are HS256 JWTs whose ``sub`` claim is the student's user id. Issuing
them is the job of the platform's login flow; ``create_access_token`` exists
for that flow and for tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings
from ..models import TokenData

# auto_error=False so a missing header yields the same 401 as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    username: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Sign a token for ``user_id``; expiry defaults to the configured lifetime."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": user_id, "exp": datetime.now(timezone.utc) + lifetime}
    if username:
        claims["username"] = username
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Verify a token.

    Returns:
        TokenData, or None when the signature, expiry or ``sub`` claim is invalid
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    user_id = claims.get("sub")
    if not user_id:
        return None
    return TokenData(user_id=user_id, username=claims.get("username"))


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """
    FastAPI dependency resolving the caller's user id.

    Raises:
        HTTPException: 401 "Not authenticated" for a missing or invalid token
    """
    token_data = decode_access_token(credentials.credentials) if credentials else None
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data.user_id
