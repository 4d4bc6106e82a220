"""Pydantic schemas for API requests and responses."""

from imageshare.schemas.auth import (
    Identity,
    RegisterResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from imageshare.schemas.image import (
    CommentCreate,
    CommentCreatedResponse,
    CommentResponse,
    ImageDetailResponse,
    ImageResponse,
    LikeResponse,
    PaginatedImages,
    UploadResponse,
    UserRef,
)

__all__ = [
    "Identity",
    "UserRegister",
    "UserLogin",
    "RegisterResponse",
    "TokenResponse",
    "UserRef",
    "ImageResponse",
    "ImageDetailResponse",
    "PaginatedImages",
    "UploadResponse",
    "LikeResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentCreatedResponse",
]
