"""
Profile endpoints for the authenticated user.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from marketplace.services.auth import AuthService
from marketplace.services.presenter import PropertyPresenter
from marketplace.services.property import PropertyService
from marketplace.schemas.property import PropertyResponse
from marketplace.schemas.user import UserResponse, UserUpdate
from marketplace.utils.auth import ViewerContext
from marketplace.utils.dependencies import (
    get_auth_service,
    get_presenter,
    get_property_service,
    get_viewer
)


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Current user profile"
)
async def get_me(
    viewer: ViewerContext = Depends(get_viewer),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    user = await auth_service.get_profile(viewer.user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Update current user profile",
    description="Update name, email, phone, address or profile image"
)
async def update_me(
    update_data: UserUpdate,
    viewer: ViewerContext = Depends(get_viewer),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """
    Raises:
        ConflictError: If the new email belongs to another account
        NotFoundError: If the account no longer exists
    """
    user = await auth_service.update_profile(viewer.user_id, update_data)
    return UserResponse.model_validate(user)


@router.get(
    "/me/liked-properties",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="Properties the current user liked"
)
async def get_my_liked_properties(
    viewer: ViewerContext = Depends(get_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> List[PropertyResponse]:
    properties = await property_service.get_liked_properties(viewer)
    return presenter.shape_many(properties, force_liked=True)
