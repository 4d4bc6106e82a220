"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from imageshare.api.dependencies import get_auth_service
from imageshare.schemas.auth import RegisterResponse, TokenResponse, UserLogin, UserRegister
from imageshare.services.auth import AuthService

router = APIRouter(tags=["auth"])


@router.post("/user", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    user, token = auth_service.register(user_data.name, user_data.email, user_data.password)
    return RegisterResponse(email=user.email, token=token)


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    return TokenResponse(token=auth_service.login(credentials.email, credentials.password))
