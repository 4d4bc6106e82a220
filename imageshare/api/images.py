"""Image, like and comment API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from imageshare.api.dependencies import get_current_identity, get_image_service
from imageshare.schemas.auth import Identity
from imageshare.schemas.image import (
    CommentCreate,
    CommentCreatedResponse,
    ImageDetailResponse,
    LikeResponse,
    PaginatedImages,
    UploadResponse,
)
from imageshare.services.images import ImageService, Pagination

router = APIRouter(prefix="/api", tags=["images"])


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    identity: Annotated[Identity, Depends(get_current_identity)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
    image: Annotated[UploadFile | None, File(description="Image file, at most 5MB")] = None,
    description: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form(description="Comma-separated tags")] = None,
):
    """Upload an image.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    stored = await image_service.upload(image, identity.id, description=description, tags=tags)
    return UploadResponse(message="Upload successful", image=stored)


@router.get("/images", response_model=PaginatedImages)
def list_images(
    image_service: Annotated[ImageService, Depends(get_image_service)],
    page: str | None = None,
    limit: str | None = None,
):
    """List all images, newest first."""
    return image_service.list_images(Pagination.from_query(page, limit))


@router.get("/images/{image_id}", response_model=ImageDetailResponse)
def get_image(
    image_id: str,
    image_service: Annotated[ImageService, Depends(get_image_service)],
):
    """Get a single image with its comments."""
    return image_service.get_image(image_id)


@router.post("/images/{image_id}/like", response_model=LikeResponse)
def toggle_like(
    image_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
):
    """Like an image, or remove the like if the caller already liked it."""
    return image_service.toggle_like(image_id, identity.id)


@router.post(
    "/images/{image_id}/comment",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    image_id: str,
    comment_data: CommentCreate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
):
    """Add a comment to an image."""
    comment = image_service.add_comment(image_id, identity.id, comment_data.text)
    return CommentCreatedResponse(message="Comment added", comment=comment)


@router.get("/user/my-images", response_model=PaginatedImages)
def list_my_images(
    identity: Annotated[Identity, Depends(get_current_identity)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
    page: str | None = None,
    limit: str | None = None,
):
    """List images uploaded by the caller."""
    return image_service.list_owned(identity.id, Pagination.from_query(page, limit))


@router.get("/user/liked-images", response_model=PaginatedImages)
def list_liked_images(
    identity: Annotated[Identity, Depends(get_current_identity)],
    image_service: Annotated[ImageService, Depends(get_image_service)],
    page: str | None = None,
    limit: str | None = None,
):
    """List images the caller has liked."""
    return image_service.list_liked(identity.id, Pagination.from_query(page, limit))
