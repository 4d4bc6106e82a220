"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict


class UserRegister(BaseModel):
    """User registration request.

    Fields default to empty strings so missing and blank values are
    rejected by the same rule in the auth service.
    """

    name: str = ""
    email: str = ""
    password: str = ""


class UserLogin(BaseModel):
    """User login request."""

    email: str = ""
    password: str = ""


class RegisterResponse(BaseModel):
    """Registration response with the stored email and a token."""

    email: str
    token: str


class TokenResponse(BaseModel):
    """JWT token response."""

    token: str


class Identity(BaseModel):
    """Caller identity decoded from a verified bearer token."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
