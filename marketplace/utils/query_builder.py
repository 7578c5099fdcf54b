"""
Property query builder.
Turns raw listing filter parameters into SQLAlchemy predicates scoped to what the viewer may see.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement
from marketplace.models.property import Property
from marketplace.utils.auth import ViewerContext
from marketplace.utils.exceptions import InvalidFilterError

# Same bound listings accept on create and update
MAX_BEDROOMS = 100


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, term: str) -> ColumnElement:
    """Case-insensitive substring match."""
    return column.ilike(f"%{escape_like(term)}%", escape="\\")


def clean_param(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def parse_decimal(name: str, raw: Any) -> Optional[Decimal]:
    """
    Parse a non-negative decimal filter value.

    Raises:
        InvalidFilterError: If the value is not a finite, non-negative number
    """
    value = clean_param(raw)
    if value is None:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise InvalidFilterError(name, f"'{value}' is not a number")
    if not number.is_finite():
        raise InvalidFilterError(name, f"'{value}' is not a number")
    if number < 0:
        raise InvalidFilterError(name, "must not be negative")
    return number


def parse_int(name: str, raw: Any, minimum: int = 0, maximum: Optional[int] = None) -> Optional[int]:
    """
    Parse an integer filter value bounded by ``minimum`` and, when given, ``maximum``.

    Raises:
        InvalidFilterError: If the value is not an integer or lies outside the bounds
    """
    value = clean_param(raw)
    if value is None:
        return None
    try:
        number = int(value)
    except ValueError:
        raise InvalidFilterError(name, f"'{value}' is not an integer")
    if number < minimum:
        raise InvalidFilterError(name, f"must be at least {minimum}")
    if maximum is not None and number > maximum:
        raise InvalidFilterError(name, f"must be at most {maximum}")
    return number


class PropertyFilters:
    """Parsed public listing filters."""

    def __init__(
        self,
        city: Optional[str] = None,
        listing_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        bedrooms: Optional[int] = None
    ):
        self.city = city
        self.listing_type = listing_type
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms

    @classmethod
    def parse(cls, params: Mapping[str, Any]) -> "PropertyFilters":
        """
        Build filters from raw query parameters.

        Args:
            params: Mapping with optional keys city, type, minPrice, maxPrice, bedrooms

        Returns:
            Parsed filters

        Raises:
            InvalidFilterError: If a numeric parameter is malformed or the price range is inverted
        """
        filters = cls(
            city=clean_param(params.get("city")),
            listing_type=clean_param(params.get("type")),
            min_price=parse_decimal("minPrice", params.get("minPrice")),
            max_price=parse_decimal("maxPrice", params.get("maxPrice")),
            bedrooms=parse_int("bedrooms", params.get("bedrooms"), maximum=MAX_BEDROOMS),
        )
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise InvalidFilterError("minPrice", "must not be greater than maxPrice")
        return filters


class PropertyQueryBuilder:
    """Builds listing predicates with the viewer's visibility scope always applied."""

    @staticmethod
    def visibility_scope(viewer: ViewerContext) -> ColumnElement:
        """
        Predicate restricting properties to those the viewer may see.

        Anonymous viewers see approved listings, signed-in users additionally see
        their own, admins see everything.
        """
        if viewer.is_admin:
            return true()
        if viewer.is_anonymous:
            return Property.approved.is_(True)
        return or_(Property.approved.is_(True), Property.owner_id == viewer.user_id)

    @staticmethod
    def filter_conditions(filters: PropertyFilters) -> list:
        """Conditions contributed by the caller's filters. Absent filters contribute nothing."""
        conditions = []

        if filters.city:
            conditions.append(contains(Property.city, filters.city))

        if filters.listing_type:
            conditions.append(contains(Property.listing_type, filters.listing_type))

        # Price range filters (inclusive)
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms == filters.bedrooms)

        return conditions

    @classmethod
    def build(cls, filters: PropertyFilters, viewer: ViewerContext) -> ColumnElement:
        """
        Combine the viewer's visibility scope with the caller's filters.

        Args:
            filters: Parsed filters
            viewer: Current viewer context

        Returns:
            SQLAlchemy boolean expression
        """
        return and_(cls.visibility_scope(viewer), *cls.filter_conditions(filters))
