"""Image model with its likes and comments."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from imageshare.database import Base
from imageshare.models.mixins import TimestampMixin, utcnow


class Image(Base, TimestampMixin):
    """An uploaded image and its metadata."""

    __tablename__ = "images"
    __table_args__ = (Index("ix_images_created_at", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False, unique=True)  # Generated name on disk
    original_name = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)  # Bytes
    path = Column(String(1024), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    description = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)  # Ordered, duplicates allowed

    # Relationships
    owner = relationship("User", backref="images")
    likes = relationship(
        "ImageLike",
        back_populates="image",
        cascade="all, delete-orphan",
        order_by="ImageLike.id",
    )
    comments = relationship(
        "Comment",
        back_populates="image",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )


class ImageLike(Base):
    """A user's like on an image. At most one row per (image, user)."""

    __tablename__ = "image_likes"
    __table_args__ = (UniqueConstraint("image_id", "user_id", name="uq_image_likes_image_user"),)

    id = Column(Integer, primary_key=True, index=True)
    image_id = Column(
        Integer, ForeignKey("images.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    image = relationship("Image", back_populates="likes")
    user = relationship("User")


class Comment(Base):
    """A comment on an image. Immutable once created."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    image_id = Column(
        Integer, ForeignKey("images.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    text = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    image = relationship("Image", back_populates="comments")
    author = relationship("User")
