"""
Authentication API endpoints for registration, login and logout.
"""

from fastapi import APIRouter, Depends, status
from marketplace.services.auth import AuthService
from marketplace.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from marketplace.schemas.base import MessageResponse
from marketplace.schemas.user import UserResponse
from marketplace.utils.dependencies import get_auth_service


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user or owner account and return a token for it"
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new account.

    Raises:
        ConflictError: If the email is already registered
        InsufficientPermissionsError: If the admin role is requested
    """
    user, token = await auth_service.register(register_data)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns a JWT"
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, token = await auth_service.login(email=login_data.email, password=login_data.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="User logout",
    description="Tokens are stateless; clients discard theirs"
)
async def logout() -> MessageResponse:
    return MessageResponse(message="Logged out successfully")
