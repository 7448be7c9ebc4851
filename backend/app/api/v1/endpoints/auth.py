"""
Authentication API endpoints.

Login, client self-registration, current-user info and logout.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.auth import UserRegister, UserLogin, TokenResponse, UserResponse
from backend.app.schemas.common import ActionResponse
from backend.app.core.dependencies import get_current_user, get_data_access
from backend.app.services import auth_service

router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Login with email and password and return a JWT token.

    Inactive accounts are rejected with 403 even when the password
    matches. Successful and failed attempts are audit-logged.
    """
    token, user = await auth_service.login(
        data,
        db,
        credentials.email,
        credentials.password,
        ip_address=request.client.host if request.client else None,
    )
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Self-register a client account.

    The account is created as CLIENT and inactive; no token is issued
    until an admin activates it.
    """
    user = await auth_service.register(data, db, user_data.email, user_data.password, user_data.name)
    return UserResponse.model_validate(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    data=Depends(get_data_access)
):
    """Get the authenticated user's account."""
    user = await data.users.get(current_user["user_id"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=ActionResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Revoke the current access token."""
    await auth_service.logout(db, current_user)
    return ActionResponse(success=True, message="Logged out", id=current_user["user_id"])
