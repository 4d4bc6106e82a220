"""FastAPI dependencies for authentication, configuration and services."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from imageshare.config import Settings, get_settings
from imageshare.database import get_db
from imageshare.schemas.auth import Identity
from imageshare.services.auth import AuthService, decode_access_token
from imageshare.services.images import ImageService
from imageshare.services.storage import UploadStorage

logger = logging.getLogger(__name__)

# Missing or malformed headers are reported by get_current_identity as 401
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Identity:
    """Verify the bearer token and return the caller's identity.

    Only the token is inspected; the database is never queried.
    """
    if credentials is None or credentials.scheme != "Bearer" or not credentials.credentials:
        raise _unauthorized("Authentication token missing or malformed")

    try:
        return decode_access_token(settings, credentials.credentials)
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise _unauthorized("Token expired") from None
    except JWTError as e:
        logger.warning(f"Rejected invalid token: {e}")
        raise _unauthorized("Invalid token") from None
    except Exception:
        logger.exception("Unexpected error while verifying token")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from None


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, settings)


def get_upload_storage(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadStorage:
    return UploadStorage(settings)


def get_image_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[UploadStorage, Depends(get_upload_storage)],
) -> ImageService:
    """Get image service with dependencies."""
    return ImageService(db, storage)
