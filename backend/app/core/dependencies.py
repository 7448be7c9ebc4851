"""
Request dependencies for FastAPI.

Provides the data-access backend for a request and JWT authentication
that turns a bearer token into an explicit Actor context.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.core.config import settings
from backend.app.core.exceptions import AuthenticationError, TokenRevokedError
from backend.app.core.jwt import decode_access_token
from backend.app.core.token_revocation import is_token_revoked, are_user_tokens_revoked
from backend.app.db.session import get_db
from backend.app.domain.context import Actor
from backend.app.repositories.memory import InMemoryDataAccess, InMemoryStore
from backend.app.repositories.sql import SqlDataAccess

# HTTP Bearer security scheme
security = HTTPBearer()


def get_memory_store(request: Request) -> InMemoryStore:
    """The process-wide in-memory store, created on first use."""
    store = getattr(request.app.state, "memory_store", None)
    if store is None:
        store = InMemoryStore()
        request.app.state.memory_store = store
    return store


async def get_data_access(request: Request, db: AsyncSession = Depends(get_db)):
    """
    FastAPI dependency selecting the data-access backend.

    USE_MOCK_BACKEND=true serves users and parcels from the in-memory demo
    dataset; otherwise they come from the database.
    """
    if settings.use_mock_backend:
        return InMemoryDataAccess(get_memory_store(request))
    return SqlDataAccess(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    data=Depends(get_data_access),
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. Validates JWT token signature and expiry
    2. Checks if the token has been explicitly revoked (logout)
    3. Checks if all user tokens have been revoked (account deactivated)
    4. Verifies the user still exists and is active

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: bad token or unknown user (401)
        TokenRevokedError: token or user access revoked (401)
        HTTPException: 403 if the account is inactive
    """
    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id or not payload.get("role"):
        raise AuthenticationError("Invalid token payload")

    if await is_token_revoked(token):
        raise TokenRevokedError()

    if await are_user_tokens_revoked(user_id):
        raise TokenRevokedError("User access has been revoked")

    user = await data.users.get(user_id)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return {**payload, "token": token}


async def get_actor(current_user: dict = Depends(get_current_user)) -> Actor:
    """Actor context for the authenticated request."""
    return Actor.from_token(current_user)
