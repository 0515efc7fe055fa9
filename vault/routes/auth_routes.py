"""Authentication API routes."""

from fastapi import APIRouter, status

from vault.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from vault.service_locator import get_auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    Raises:
        - 400: Email already registered
    """
    api_key, user = get_auth_service().register_user(request.email, request.password, request.name)
    return AuthResponse(api_key=api_key, user_id=user.user_id, name=user.name, email=user.email)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """
    Authenticate user and issue a new API Key (replaces the previous key).

    Raises:
        - 401: Invalid credentials
    """
    api_key, user = get_auth_service().login_user(request.email, request.password)
    return AuthResponse(api_key=api_key, user_id=user.user_id, name=user.name, email=user.email)
