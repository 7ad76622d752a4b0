"""Auth Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel


class Credentials(BaseModel):
    email: str = ""
    password: str = ""


class RegisterResponse(BaseModel):
    user_id: str
    email: str


class LoginResponse(BaseModel):
    user_id: str
    user_email: str
    token: str


class UserResponse(BaseModel):
    id: str
    email: str
    created_at: str
