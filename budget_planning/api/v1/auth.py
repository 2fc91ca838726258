"""
Authentication endpoints.

Issues JWT access tokens in exchange for email and password, and
returns the profile of the token's owner.
"""

from datetime import timedelta
from typing import Annotated
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from budget_planning.api.dependencies import CurrentUser, DatabaseSession
from budget_planning.core.config import settings
from budget_planning.core.security import (
    authenticate_user,
    create_user_token,
    Token,
)
from budget_planning.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=Token, status_code=status.HTTP_200_OK)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: DatabaseSession,
) -> Token:
    """
    OAuth2 compatible token login.

    The form's `username` field carries the user's email.

    Example:
        POST /api/v1/auth/token
        Content-Type: application/x-www-form-urlencoded

        username=vova@gmail.com&password=1234

        Response:
        {"access_token": "eyJ...", "token_type": "bearer"}

    Raises:
        HTTPException 401: If the email is unknown or the password is wrong
            (same message for both)
    """
    user = await authenticate_user(db, form_data.username, form_data.password)

    if not user:
        logger.warning("Login failed", extra={"username": form_data.username})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_user_token(
        user,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )

    logger.info("Login succeeded", extra={"user_id": user.id})
    return Token(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: CurrentUser) -> UserResponse:
    """Profile of the authenticated user, including the linked account."""
    return UserResponse.from_user(current_user)
