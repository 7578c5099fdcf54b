"""
Property API endpoints for listing, filtering, likes and owner management.
Public reads use optional authentication; a bad token degrades to an anonymous view.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from typing import List, Optional
from uuid import UUID

from marketplace.services.like import LikeService
from marketplace.services.presenter import PropertyPresenter
from marketplace.services.property import PropertyService
from marketplace.schemas.property import (
    LikeToggleResponse,
    PropertyCreate,
    PropertyLikesResponse,
    PropertyResponse,
    PropertyUpdate
)
from marketplace.schemas.user import UserSummary
from marketplace.utils.auth import ViewerContext
from marketplace.utils.dependencies import (
    get_like_service,
    get_optional_viewer,
    get_presenter,
    get_property_service,
    get_viewer
)
from marketplace.utils.query_builder import PropertyFilters


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="List properties",
    description="Visible properties matching the filters, newest first"
)
async def list_properties(
    city: Optional[str] = Query(None, description="Case-insensitive substring of the city"),
    listing_type: Optional[str] = Query(None, alias="type", description="Listing type, e.g. sale or rent"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Inclusive lower price bound"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Inclusive upper price bound"),
    bedrooms: Optional[str] = Query(None, description="Exact number of bedrooms"),
    viewer: ViewerContext = Depends(get_optional_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> List[PropertyResponse]:
    """
    List properties.

    Raises:
        InvalidFilterError: If a numeric filter is malformed or the price range is inverted
    """
    filters = PropertyFilters.parse({
        "city": city,
        "type": listing_type,
        "minPrice": min_price,
        "maxPrice": max_price,
        "bedrooms": bedrooms,
    })
    properties = await property_service.list_properties(filters, viewer)
    return presenter.shape_many(properties)


@router.get(
    "/liked",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="Properties the current user liked"
)
async def list_liked_properties(
    viewer: ViewerContext = Depends(get_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> List[PropertyResponse]:
    properties = await property_service.get_liked_properties(viewer)
    return presenter.shape_many(properties, force_liked=True)


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a listing pending admin approval. Requires owner or admin role."
)
async def create_property(
    property_data: PropertyCreate,
    viewer: ViewerContext = Depends(get_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> PropertyResponse:
    """
    Raises:
        InsufficientPermissionsError: If the viewer is neither owner nor admin
    """
    property_obj = await property_service.create_property(property_data, viewer)
    return presenter.shape(property_obj)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property by ID"
)
async def get_property(
    property_id: UUID,
    viewer: ViewerContext = Depends(get_optional_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> PropertyResponse:
    """
    Raises:
        PropertyNotFoundError: If it doesn't exist or the viewer may not see it
    """
    property_obj = await property_service.get_property(property_id, viewer)
    return presenter.shape(property_obj)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Update listing content. Owner or admin only."
)
async def update_property(
    property_id: UUID,
    property_data: PropertyUpdate,
    viewer: ViewerContext = Depends(get_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, viewer)
    return presenter.shape(property_obj)


@router.post(
    "/{property_id}/images",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description="Upload JPEG, PNG or WebP images. Owner or admin only."
)
async def upload_property_images(
    property_id: UUID,
    images: List[UploadFile] = File(..., description="Image files"),
    viewer: ViewerContext = Depends(get_viewer),
    property_service: PropertyService = Depends(get_property_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> PropertyResponse:
    """
    Raises:
        FileUploadError: If any file is rejected
        UnsupportedFileTypeError: If a file is not an allowed image type
        FileSizeExceededError: If a file is too large
    """
    property_obj = await property_service.add_images(property_id, images, viewer)
    return presenter.shape(property_obj)


@router.post(
    "/{property_id}/like",
    response_model=LikeToggleResponse,
    status_code=status.HTTP_200_OK,
    summary="Like or unlike a property"
)
async def toggle_like(
    property_id: UUID,
    viewer: ViewerContext = Depends(get_viewer),
    like_service: LikeService = Depends(get_like_service)
) -> LikeToggleResponse:
    liked = await like_service.toggle_like(viewer, property_id)
    message = "Property liked" if liked else "Property unliked"
    return LikeToggleResponse(message=message, liked=liked)


@router.get(
    "/{property_id}/likes",
    response_model=PropertyLikesResponse,
    status_code=status.HTTP_200_OK,
    summary="Users who liked a property"
)
async def get_property_likes(
    property_id: UUID,
    like_service: LikeService = Depends(get_like_service)
) -> PropertyLikesResponse:
    users = await like_service.get_likers(property_id)
    return PropertyLikesResponse(
        count=len(users),
        users=[UserSummary.model_validate(user) for user in users]
    )
