"""
Admin API endpoints for moderation, searches and the dashboard.
Every route requires an authenticated admin; other roles get 403.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from uuid import UUID

from marketplace.config import Settings
from marketplace.services.admin import AdminService
from marketplace.services.presenter import PropertyPresenter
from marketplace.schemas.base import MessageResponse
from marketplace.schemas.property import AdminPropertyListResponse, DashboardResponse, PropertyResponse
from marketplace.schemas.user import AdminUserListResponse, UserResponse, UserSummary
from marketplace.utils.auth import ViewerContext
from marketplace.utils.dependencies import (
    get_admin_service,
    get_presenter,
    get_settings_dependency,
    require_admin
)
from marketplace.utils.pagination import PageParams


router = APIRouter(prefix="/admin", tags=["Admin"])


def get_page_params(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Page size"),
    settings: Settings = Depends(get_settings_dependency)
) -> PageParams:
    """
    Raises:
        InvalidFilterError: If page or limit is not a positive integer or limit is too large
    """
    return PageParams.parse(
        page,
        limit,
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size
    )


@router.get(
    "/properties",
    response_model=AdminPropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search all properties"
)
async def search_properties(
    search: Optional[str] = Query(None, description="Matches title, description or city"),
    property_status: Optional[str] = Query(None, alias="status", description="approved or pending"),
    admin: ViewerContext = Depends(require_admin),
    params: PageParams = Depends(get_page_params),
    admin_service: AdminService = Depends(get_admin_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> AdminPropertyListResponse:
    page = await admin_service.search_properties(params, search=search, status=property_status)
    return AdminPropertyListResponse(
        properties=presenter.shape_many(page.items),
        total_pages=page.total_pages,
        current_page=page.current_page,
        total=page.total
    )


@router.get(
    "/users",
    response_model=AdminUserListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search users"
)
async def search_users(
    search: Optional[str] = Query(None, description="Matches name or email"),
    role: Optional[str] = Query(None, description="user, owner or admin"),
    admin: ViewerContext = Depends(require_admin),
    params: PageParams = Depends(get_page_params),
    admin_service: AdminService = Depends(get_admin_service)
) -> AdminUserListResponse:
    page = await admin_service.search_users(params, search=search, role=role)
    return AdminUserListResponse(
        users=[UserResponse.model_validate(user) for user in page.items],
        total_pages=page.total_pages,
        current_page=page.current_page,
        total=page.total
    )


@router.post(
    "/properties/{property_id}/approve",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve property"
)
async def approve_property(
    property_id: UUID,
    admin: ViewerContext = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> PropertyResponse:
    property_obj = await admin_service.approve_property(property_id, admin.user_id)
    return presenter.shape(property_obj)


@router.post(
    "/properties/{property_id}/reject",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject property",
    description="Rejected properties are deleted together with their likes"
)
async def reject_property(
    property_id: UUID,
    admin: ViewerContext = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
) -> MessageResponse:
    await admin_service.reject_property(property_id, admin.user_id)
    return MessageResponse(message="Property rejected and deleted")


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin dashboard"
)
async def dashboard(
    admin: ViewerContext = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
    presenter: PropertyPresenter = Depends(get_presenter)
) -> DashboardResponse:
    stats = await admin_service.dashboard()
    return DashboardResponse(
        total_users=stats["total_users"],
        total_properties=stats["total_properties"],
        approved_properties=stats["approved_properties"],
        pending_properties=stats["pending_properties"],
        recent_properties=presenter.shape_many(stats["recent_properties"]),
        recent_users=[UserSummary.model_validate(user) for user in stats["recent_users"]]
    )
