"""Image service for uploads, listings, likes and comments."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from imageshare.models.image import Comment, Image, ImageLike
from imageshare.schemas.image import (
    CommentResponse,
    ImageDetailResponse,
    ImageResponse,
    LikeResponse,
    PaginatedImages,
    UserRef,
)
from imageshare.services.storage import UploadStorage, file_url

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_COMMENT_LENGTH = 500

_ID_PATTERN = re.compile(r"[1-9][0-9]*")
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
# Ids are Integer columns (int4 on PostgreSQL)
_MAX_ID = 2**31 - 1
_MAX_OFFSET = 2**63 - 1


def parse_image_id(raw: str) -> int:
    """Parse a path identifier, rejecting anything but a positive integer."""
    value = raw.strip()
    if not _ID_PATTERN.fullmatch(value) or int(value) > _MAX_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid image id",
        )
    return int(value)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string, dropping empty segments.

    Order is preserved and duplicates are kept.
    """
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _int_or_default(raw: str | None, default: int) -> int:
    if raw is None or not _INT_PATTERN.fullmatch(raw.strip()):
        return default
    return int(raw.strip())


@dataclass(frozen=True)
class Pagination:
    """Validated page/limit pair."""

    page: int
    limit: int

    @classmethod
    def from_query(cls, page: str | None, limit: str | None) -> "Pagination":
        """Build from raw query values, defaulting absent or unparseable ones."""
        parsed = cls(
            page=_int_or_default(page, DEFAULT_PAGE),
            limit=_int_or_default(limit, DEFAULT_LIMIT),
        )
        if (
            parsed.page <= 0
            or parsed.limit <= 0
            or parsed.limit > MAX_LIMIT
            or parsed.offset > _MAX_OFFSET
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid pagination parameters",
            )
        return parsed

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _user_ref(user) -> UserRef | None:
    if user is None:
        return None
    return UserRef(id=user.id, name=user.name)


def image_to_response(image: Image) -> ImageResponse:
    """Build the listing representation of an image."""
    return ImageResponse(
        id=image.id,
        filename=image.filename,
        original_name=image.original_name,
        mimetype=image.mimetype,
        size=image.size,
        url=file_url(image.filename),
        description=image.description or "",
        tags=list(image.tags or []),
        owner=_user_ref(image.owner),
        likes=[like.user_id for like in image.likes],
        total_likes=len(image.likes),
        comment_count=len(image.comments),
        created_at=image.created_at,
    )


def comment_to_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        text=comment.text,
        created_at=comment.created_at,
        author=_user_ref(comment.author),
    )


class ImageService:
    """Service for image-related operations."""

    def __init__(self, db: Session, storage: UploadStorage):
        self.db = db
        self.storage = storage

    # --- Upload ---

    async def upload(
        self,
        file: UploadFile | None,
        owner_id: int,
        description: str | None = None,
        tags: str | None = None,
    ) -> ImageResponse:
        """Store an uploaded image and create its record.

        ``description`` and ``tags`` are form strings; the form layer rejects
        anything else.
        """
        stored = await self.storage.save(file)

        image = Image(
            filename=stored.filename,
            original_name=stored.original_name,
            mimetype=stored.mimetype,
            size=stored.size,
            path=stored.path,
            owner_id=owner_id,
            description=(description or "").strip(),
            tags=parse_tags(tags),
        )
        self.db.add(image)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            self.storage.discard(stored)
            raise
        self.db.refresh(image)

        logger.info(f"User {owner_id} uploaded image {image.id} ({stored.size} bytes)")
        return image_to_response(image)

    # --- Queries ---

    def _paginate(self, criteria: list, pagination: Pagination) -> PaginatedImages:
        """Run the page query and the count query over the same criteria."""
        query = self.db.query(Image).filter(*criteria)
        total = query.count()
        images = (
            query.options(
                selectinload(Image.owner),
                selectinload(Image.likes),
                selectinload(Image.comments),
            )
            .order_by(Image.created_at.desc(), Image.id.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )
        return PaginatedImages(
            page=pagination.page,
            limit=pagination.limit,
            total_items=total,
            total_pages=math.ceil(total / pagination.limit),
            data=[image_to_response(image) for image in images],
        )

    def list_images(self, pagination: Pagination) -> PaginatedImages:
        """All images, newest first."""
        return self._paginate([], pagination)

    def list_owned(self, user_id: int, pagination: Pagination) -> PaginatedImages:
        """Images uploaded by a user, newest first."""
        return self._paginate([Image.owner_id == user_id], pagination)

    def list_liked(self, user_id: int, pagination: Pagination) -> PaginatedImages:
        """Images a user has liked, newest first."""
        return self._paginate([Image.likes.any(ImageLike.user_id == user_id)], pagination)

    def _get_image(self, image_id: int, *options) -> Image:
        image = self.db.query(Image).options(*options).filter(Image.id == image_id).first()
        if not image:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
        return image

    def get_image(self, raw_id: str) -> ImageDetailResponse:
        """Single image with owner, likes and comment authors resolved."""
        image = self._get_image(
            parse_image_id(raw_id),
            selectinload(Image.owner),
            selectinload(Image.likes),
            selectinload(Image.comments).selectinload(Comment.author),
        )
        return ImageDetailResponse(
            **image_to_response(image).model_dump(),
            comments=[comment_to_response(comment) for comment in image.comments],
        )

    # --- Likes ---

    def _delete_like(self, image_id: int, user_id: int) -> int:
        return (
            self.db.query(ImageLike)
            .filter(ImageLike.image_id == image_id, ImageLike.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def toggle_like(self, raw_id: str, user_id: int) -> LikeResponse:
        """Add the user's like if absent, remove it if present.

        The membership change is a conditional delete followed, when nothing
        was deleted, by an insert guarded by the (image, user) unique
        constraint. Losing the insert race to a concurrent toggle means the
        like now exists, so this toggle removes it.
        """
        image_id = parse_image_id(raw_id)
        self._get_image(image_id)

        liked = self._delete_like(image_id, user_id) == 0
        if liked:
            self.db.add(ImageLike(image_id=image_id, user_id=user_id))
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(f"Concurrent like on image {image_id} by user {user_id}, removing")
                self._delete_like(image_id, user_id)
                self.db.commit()
                liked = False
        else:
            self.db.commit()

        total = (
            self.db.query(func.count(ImageLike.id))
            .filter(ImageLike.image_id == image_id)
            .scalar()
        )
        return LikeResponse(liked=liked, total_likes=total)

    # --- Comments ---

    def add_comment(self, raw_id: str, user_id: int, text: Any) -> CommentResponse:
        """Append a comment to an image.

        Both the emptiness and the length rule apply to the trimmed text.
        """
        image_id = parse_image_id(raw_id)

        trimmed = text.strip() if isinstance(text, str) else ""
        if not trimmed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Comment text cannot be empty",
            )
        if len(trimmed) > MAX_COMMENT_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Comment exceeds the {MAX_COMMENT_LENGTH} character limit",
            )

        self._get_image(image_id)

        comment = Comment(image_id=image_id, user_id=user_id, text=trimmed)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment_to_response(comment)
