"""Pydantic models for the session token endpoints."""

from pydantic import BaseModel, EmailStr, Field


class TokenRequest(BaseModel):
    email: EmailStr = Field(..., examples=["student@example.com"])


class TokenResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    success: bool = True
