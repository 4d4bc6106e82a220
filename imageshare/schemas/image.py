"""Image, like and comment schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class UserRef(CamelModel):
    """Minimal user reference resolved for display."""

    id: int
    name: str


class CommentResponse(CamelModel):
    """Comment with its author resolved."""

    id: int
    text: str
    created_at: datetime
    author: UserRef | None


class ImageResponse(CamelModel):
    """Image metadata as returned by upload and listing endpoints."""

    id: int
    filename: str
    original_name: str
    mimetype: str
    size: int
    url: str
    description: str
    tags: list[str]
    owner: UserRef | None
    likes: list[int]  # User ids, in the order the likes were added
    total_likes: int
    comment_count: int
    created_at: datetime


class ImageDetailResponse(ImageResponse):
    """Single image with its comments."""

    comments: list[CommentResponse]


class PaginatedImages(CamelModel):
    """One page of images plus totals."""

    page: int
    limit: int
    total_items: int
    total_pages: int
    data: list[ImageResponse]


class UploadResponse(CamelModel):
    message: str
    image: ImageResponse


class LikeResponse(CamelModel):
    """Result of toggling a like."""

    liked: bool
    total_likes: int


class CommentCreate(BaseModel):
    """Add a comment to an image."""

    text: str = ""


class CommentCreatedResponse(CamelModel):
    message: str
    comment: CommentResponse
