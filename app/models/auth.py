"""Pydantic models for login-related API requests and responses."""

from pydantic import BaseModel, EmailStr
from typing import Optional


class Session(BaseModel):
    """The authenticated identity carried in the signed session cookie."""

    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None


class CredentialsSignInRequest(BaseModel):
    """Test account sign-in request"""

    email: EmailStr
    password: str


class SignInResponse(BaseModel):
    """Sign-in response model"""

    ok: bool
    user: Session
