from typing import Optional

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None  # unix seconds
    user: AuthUser


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)
    mobile_number: Optional[str] = None


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
