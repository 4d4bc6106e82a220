"""SQLAlchemy models."""

from imageshare.models.image import Comment, Image, ImageLike
from imageshare.models.user import User

__all__ = [
    "User",
    "Image",
    "ImageLike",
    "Comment",
]
