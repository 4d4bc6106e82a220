"""User model."""

from sqlalchemy import Column, Integer, String

from imageshare.database import Base
from imageshare.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and image ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)  # Lowercase, trimmed
    password_hash = Column(String(255), nullable=False)
