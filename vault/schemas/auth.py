"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    email: str
    password: str
    name: str = ""


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: str
    password: str


class AuthResponse(BaseModel):
    """Response model for registration and login."""
    api_key: str
    user_id: str
    name: str
    email: str
