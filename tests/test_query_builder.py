"""
Tests for listing filter parsing and the property query builder.
"""

import pytest
import uuid
from decimal import Decimal

from marketplace.models.user import UserRole
from marketplace.utils.auth import ViewerContext
from marketplace.utils.exceptions import InvalidFilterError
from marketplace.utils.query_builder import PropertyFilters, PropertyQueryBuilder, escape_like


class TestPropertyFilters:
    """Test raw parameter parsing."""

    def test_empty_params_yield_no_filters(self):
        filters = PropertyFilters.parse({})

        assert filters.city is None
        assert filters.listing_type is None
        assert filters.min_price is None
        assert filters.max_price is None
        assert filters.bedrooms is None
        assert PropertyQueryBuilder.filter_conditions(filters) == []

    def test_blank_params_are_ignored(self):
        filters = PropertyFilters.parse({"city": "  ", "type": "", "minPrice": " ", "bedrooms": ""})

        assert PropertyQueryBuilder.filter_conditions(filters) == []

    def test_numeric_params_are_parsed(self):
        filters = PropertyFilters.parse({"minPrice": "100", "maxPrice": "2500.50", "bedrooms": "3"})

        assert filters.min_price == Decimal("100")
        assert filters.max_price == Decimal("2500.50")
        assert filters.bedrooms == 3
        assert len(PropertyQueryBuilder.filter_conditions(filters)) == 3

    @pytest.mark.parametrize("params", [
        {"minPrice": "cheap"},
        {"maxPrice": "NaN"},
        {"bedrooms": "two"},
        {"bedrooms": "2.5"},
    ])
    def test_non_numeric_values_are_rejected(self, params):
        with pytest.raises(InvalidFilterError):
            PropertyFilters.parse(params)

    def test_negative_values_are_rejected(self):
        with pytest.raises(InvalidFilterError, match="minPrice"):
            PropertyFilters.parse({"minPrice": "-1"})

        with pytest.raises(InvalidFilterError, match="bedrooms"):
            PropertyFilters.parse({"bedrooms": "-2"})

    @pytest.mark.parametrize("value", ["101", "99999999999999999999"])
    def test_bedrooms_above_listing_bound_are_rejected(self, value):
        with pytest.raises(InvalidFilterError, match="bedrooms"):
            PropertyFilters.parse({"bedrooms": value})

    def test_bedrooms_at_listing_bound_are_accepted(self):
        assert PropertyFilters.parse({"bedrooms": "100"}).bedrooms == 100

    def test_inverted_price_range_is_rejected(self):
        with pytest.raises(InvalidFilterError, match="maxPrice"):
            PropertyFilters.parse({"minPrice": "500", "maxPrice": "100"})

    def test_invalid_filter_is_a_422(self):
        with pytest.raises(InvalidFilterError) as exc_info:
            PropertyFilters.parse({"bedrooms": "x"})

        assert exc_info.value.status_code == 422
        assert exc_info.value.error_code == "INVALID_FILTER"
        assert exc_info.value.field_errors[0]["field"] == "bedrooms"


class TestEscapeLike:
    """Test LIKE wildcard escaping."""

    def test_wildcards_are_escaped(self):
        assert escape_like("100%_off") == "100\\%\\_off"

    def test_backslash_is_escaped_first(self):
        assert escape_like("a\\b") == "a\\\\b"


class TestPropertyQueryBuilder:
    """Test predicates against stored properties."""

    @pytest.fixture
    async def listings(self, make_property, test_owner, other_user):
        """Mixed listings: two approved from the owner, one pending from the owner."""
        await make_property(test_owner.id, title="Cairo Rent", city="Cairo", listing_type="rent",
                            price=Decimal("1000"), bedrooms=2, approved=True)
        await make_property(test_owner.id, title="Giza Sale", city="Giza", listing_type="sale",
                            price=Decimal("90000"), bedrooms=4, approved=True)
        await make_property(test_owner.id, title="New Cairo Pending", city="New Cairo", listing_type="rent",
                            price=Decimal("1500"), bedrooms=2, approved=False)

    async def _titles(self, property_repository, filters, viewer):
        properties = await property_repository.list_matching(PropertyQueryBuilder.build(filters, viewer))
        return {p.title for p in properties}

    @pytest.mark.asyncio
    async def test_anonymous_sees_only_approved(self, property_repository, listings):
        titles = await self._titles(property_repository, PropertyFilters.parse({}), ViewerContext.anonymous())

        assert titles == {"Cairo Rent", "Giza Sale"}

    @pytest.mark.asyncio
    async def test_owner_also_sees_own_pending(self, property_repository, listings, test_owner):
        viewer = ViewerContext(user_id=test_owner.id, role=UserRole.OWNER)
        titles = await self._titles(property_repository, PropertyFilters.parse({}), viewer)

        assert titles == {"Cairo Rent", "Giza Sale", "New Cairo Pending"}

    @pytest.mark.asyncio
    async def test_other_user_does_not_see_pending(self, property_repository, listings, other_user):
        viewer = ViewerContext(user_id=other_user.id, role=UserRole.USER)
        titles = await self._titles(property_repository, PropertyFilters.parse({}), viewer)

        assert "New Cairo Pending" not in titles

    @pytest.mark.asyncio
    async def test_admin_sees_everything(self, property_repository, listings):
        viewer = ViewerContext(user_id=uuid.uuid4(), role=UserRole.ADMIN)
        titles = await self._titles(property_repository, PropertyFilters.parse({}), viewer)

        assert len(titles) == 3

    @pytest.mark.asyncio
    async def test_city_is_case_insensitive_substring(self, property_repository, listings, test_owner):
        viewer = ViewerContext(user_id=test_owner.id, role=UserRole.OWNER)
        titles = await self._titles(property_repository, PropertyFilters.parse({"city": "cAIRo"}), viewer)

        assert titles == {"Cairo Rent", "New Cairo Pending"}

    @pytest.mark.asyncio
    async def test_filters_cannot_widen_visibility(self, property_repository, listings):
        filters = PropertyFilters.parse({"city": "New Cairo"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == set()

    @pytest.mark.asyncio
    async def test_price_range_is_inclusive(self, property_repository, listings):
        filters = PropertyFilters.parse({"minPrice": "1000", "maxPrice": "90000"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == {"Cairo Rent", "Giza Sale"}

    @pytest.mark.asyncio
    async def test_single_price_bound(self, property_repository, listings):
        filters = PropertyFilters.parse({"minPrice": "5000"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == {"Giza Sale"}

    @pytest.mark.asyncio
    async def test_bedrooms_and_type_combine(self, property_repository, listings):
        filters = PropertyFilters.parse({"type": "RENT", "bedrooms": "2"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == {"Cairo Rent"}

    @pytest.mark.asyncio
    async def test_type_is_case_insensitive_substring(self, property_repository, listings):
        filters = PropertyFilters.parse({"type": "AL"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == {"Giza Sale"}

    @pytest.mark.asyncio
    async def test_wildcard_input_matches_literally(self, property_repository, listings):
        filters = PropertyFilters.parse({"city": "%"})
        titles = await self._titles(property_repository, filters, ViewerContext.anonymous())

        assert titles == set()
