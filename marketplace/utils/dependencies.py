"""
FastAPI dependency injection utilities for authentication, collaborators and services.
Collaborators are created once by the application factory and read from ``app.state``.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.config import Settings
from marketplace.database import get_db
from marketplace.services.admin import AdminService
from marketplace.services.auth import AuthService
from marketplace.services.like import LikeService
from marketplace.services.presenter import PropertyPresenter
from marketplace.services.property import PropertyService
from marketplace.utils.auth import CredentialService, ViewerContext, extract_token_from_header
from marketplace.utils.exceptions import ForbiddenError, UnauthorizedError
from marketplace.utils.file_utils import AssetStore
from marketplace.utils.locks import KeyedLockRegistry
import logging

logger = logging.getLogger(__name__)

# Documents the bearer scheme in OpenAPI. The raw header is parsed below so a
# malformed scheme is reported as an invalid token instead of a missing one.
security = HTTPBearer(auto_error=False)


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_service(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def get_lock_registry(request: Request) -> KeyedLockRegistry:
    return request.app.state.like_locks


async def get_viewer(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(security),
    credentials: CredentialService = Depends(get_credential_service)
) -> ViewerContext:
    """
    Resolve the authenticated viewer from the bearer token.

    Returns:
        ViewerContext with user id and role

    Raises:
        UnauthorizedError: If no token is provided
        InvalidTokenError: If the token is malformed or badly signed
        TokenExpiredError: If the token has expired
    """
    token = extract_token_from_header(request.headers.get("Authorization"))
    if not token:
        raise UnauthorizedError("Authentication token required")

    payload = credentials.verify(token)
    return ViewerContext.from_token(payload)


async def get_optional_viewer(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(security),
    credentials: CredentialService = Depends(get_credential_service)
) -> ViewerContext:
    """
    Resolve the viewer if a valid token is provided, otherwise anonymous.
    A missing, malformed or expired token never fails the request.
    """
    try:
        return await get_viewer(request, bearer, credentials)
    except UnauthorizedError as e:
        if request.headers.get("Authorization"):
            logger.debug(f"Ignoring unusable credentials on public route: {e.detail}")
        return ViewerContext.anonymous()


async def require_admin(viewer: ViewerContext = Depends(get_viewer)) -> ViewerContext:
    """
    Require an authenticated admin.

    Raises:
        ForbiddenError: If the viewer is authenticated but not an admin
    """
    if not viewer.is_admin:
        logger.warning(f"User {viewer.user_id} denied admin access")
        raise ForbiddenError("Access denied")
    return viewer


def get_presenter(
    request: Request,
    viewer: ViewerContext = Depends(get_optional_viewer),
    asset_store: AssetStore = Depends(get_asset_store)
) -> PropertyPresenter:
    """Presenter for the current request's viewer."""
    return PropertyPresenter(asset_store, viewer, base_url=str(request.base_url))


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    credentials: CredentialService = Depends(get_credential_service)
) -> AuthService:
    return AuthService(db, credentials)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    asset_store: AssetStore = Depends(get_asset_store)
) -> PropertyService:
    return PropertyService(db, asset_store)


async def get_like_service(
    db: AsyncSession = Depends(get_db),
    locks: KeyedLockRegistry = Depends(get_lock_registry)
) -> LikeService:
    return LikeService(db, locks)


async def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)
