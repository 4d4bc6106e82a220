"""Authentication service for JWT and password handling."""

import logging
import re
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from imageshare.config import Settings
from imageshare.models.user import User
from imageshare.schemas.auth import Identity

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache
def get_password_context(rounds: int) -> CryptContext:
    """Password hashing context for a bcrypt cost factor."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_access_token(settings: Settings, user_id: int, email: str) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "id": user_id,
        "email": email,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Identity:
    """Decode and validate a JWT token.

    Raises ``jose.ExpiredSignatureError`` for expired tokens and
    ``jose.JWTError`` for anything else wrong with the token.
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("id")
    email = payload.get("email")
    if not isinstance(user_id, int) or not isinstance(email, str):
        raise JWTError("Token payload is missing identity claims")
    return Identity(id=user_id, email=email)


class AuthService:
    """Service for registration and login."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.pwd_context = get_password_context(settings.bcrypt_rounds)

    def hash_password(self, password: str) -> str:
        """Hash a password."""
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def register(self, name: str, email: str, password: str) -> tuple[User, str]:
        """Create a user and return it with a fresh access token."""
        if not name.strip() or not email.strip() or not password.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="All fields (name, email, password) are required",
            )

        normalized = normalize_email(email)
        if not EMAIL_PATTERN.match(normalized):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid email format",
            )

        if len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )

        if self.get_user_by_email(normalized):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )

        user = User(
            name=name.strip(),
            email=normalized,
            password_hash=self.hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            ) from None
        self.db.refresh(user)

        logger.info(f"Registered user {user.id}")
        return user, create_access_token(self.settings, user.id, user.email)

    def login(self, email: str, password: str) -> str:
        """Authenticate by email and password and return an access token."""
        if not email.strip() or not password.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email and password are required",
            )

        user = self.get_user_by_email(email)
        if user is None:
            # Spend the same hashing time as a real check
            self.pwd_context.dummy_verify()
            logger.info("Login failed: unknown email")
            raise self._invalid_credentials()

        if not self.verify_password(password, user.password_hash):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise self._invalid_credentials()

        return create_access_token(self.settings, user.id, user.email)

    @staticmethod
    def _invalid_credentials() -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
