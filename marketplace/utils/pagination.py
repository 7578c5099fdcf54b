"""
Pagination and search helpers for the admin listing screens.
"""

import math
from typing import Any, Generic, List, Optional, TypeVar
from sqlalchemy import or_
from marketplace.models.property import Property
from marketplace.models.user import User, UserRole
from marketplace.utils.exceptions import InvalidFilterError
from marketplace.utils.query_builder import contains, parse_int, clean_param

ItemType = TypeVar("ItemType")

PROPERTY_STATUS_FILTERS = ("approved", "pending")

# Keep the computed offset well inside a signed 64-bit integer
MAX_PAGE = 1_000_000_000
MAX_LIMIT = 1_000_000


class PageParams:
    """Validated page/limit pair."""

    def __init__(self, page: int = 1, limit: int = 10):
        if page < 1:
            raise InvalidFilterError("page", "must be at least 1")
        if limit < 1:
            raise InvalidFilterError("limit", "must be at least 1")
        self.page = page
        self.limit = limit

    @classmethod
    def parse(
        cls,
        page: Any = None,
        limit: Any = None,
        default_limit: int = 10,
        max_limit: Optional[int] = None
    ) -> "PageParams":
        """
        Build page parameters from raw query values.

        Args:
            page: Raw page number, defaults to 1
            limit: Raw page size, defaults to ``default_limit``
            default_limit: Page size used when none is given
            max_limit: Upper bound for the page size

        Raises:
            InvalidFilterError: If a value is not a positive integer or exceeds max_limit
        """
        parsed_page = parse_int("page", page, minimum=1, maximum=MAX_PAGE)
        parsed_limit = parse_int("limit", limit, minimum=1, maximum=max_limit or MAX_LIMIT)
        return cls(
            page=parsed_page if parsed_page is not None else 1,
            limit=parsed_limit if parsed_limit is not None else default_limit
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)


class Page(Generic[ItemType]):
    """One page of results plus the arithmetic the admin screens show."""

    def __init__(self, items: List[ItemType], total: int, params: PageParams):
        self.items = items
        self.total = total
        self.current_page = params.page
        self.total_pages = params.total_pages(total)


def admin_property_conditions(search: Any = None, status: Any = None) -> list:
    """
    Conditions for the admin property search.

    Args:
        search: Free text OR-matched against title, description and city
        status: "approved", "pending", or empty for no narrowing

    Raises:
        InvalidFilterError: If status is not a known value
    """
    conditions = []

    term = clean_param(search)
    if term:
        conditions.append(
            or_(
                contains(Property.title, term),
                contains(Property.description, term),
                contains(Property.city, term)
            )
        )

    status_value = clean_param(status)
    if status_value is not None:
        status_value = status_value.lower()
        if status_value not in PROPERTY_STATUS_FILTERS:
            raise InvalidFilterError("status", f"must be one of: {', '.join(PROPERTY_STATUS_FILTERS)}")
        conditions.append(Property.approved.is_(status_value == "approved"))

    return conditions


def admin_user_conditions(search: Any = None, role: Any = None) -> list:
    """
    Conditions for the admin user search.

    Raises:
        InvalidFilterError: If role is not a known role
    """
    conditions = []

    term = clean_param(search)
    if term:
        conditions.append(or_(contains(User.name, term), contains(User.email, term)))

    role_value = clean_param(role)
    if role_value is not None:
        try:
            conditions.append(User.role == UserRole(role_value.lower()))
        except ValueError:
            allowed = ", ".join(r.value for r in UserRole)
            raise InvalidFilterError("role", f"must be one of: {allowed}")

    return conditions
