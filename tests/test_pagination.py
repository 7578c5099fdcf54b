"""
Tests for page parameters, page arithmetic and admin search conditions.
"""

import pytest
from decimal import Decimal

from marketplace.models.user import UserRole
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.user import UserRepository
from marketplace.utils.exceptions import InvalidFilterError
from marketplace.utils.pagination import (
    MAX_LIMIT,
    MAX_PAGE,
    PageParams,
    admin_property_conditions,
    admin_user_conditions
)


class TestPageParams:
    """Test page/limit parsing and arithmetic."""

    def test_defaults(self):
        params = PageParams.parse(None, None, default_limit=10)

        assert params.page == 1
        assert params.limit == 10
        assert params.skip == 0

    def test_skip_is_derived_from_page_and_limit(self):
        params = PageParams.parse("3", "10")

        assert params.skip == 20

    @pytest.mark.parametrize("total,limit,expected", [
        (23, 10, 3),
        (20, 10, 2),
        (1, 10, 1),
        (0, 10, 0),
    ])
    def test_total_pages_rounds_up(self, total, limit, expected):
        assert PageParams(1, limit).total_pages(total) == expected

    @pytest.mark.parametrize("page,limit", [
        ("0", "10"),
        ("-1", "10"),
        ("1", "0"),
        ("abc", "10"),
        ("1", "ten"),
    ])
    def test_invalid_values_are_rejected(self, page, limit):
        with pytest.raises(InvalidFilterError):
            PageParams.parse(page, limit)

    def test_limit_above_maximum_is_rejected(self):
        with pytest.raises(InvalidFilterError, match="limit"):
            PageParams.parse("1", "101", max_limit=100)

    @pytest.mark.parametrize("page,limit,parameter", [
        ("99999999999999999999", "10", "page"),
        ("1", "99999999999999999999", "limit"),
    ])
    def test_huge_values_are_rejected_without_max_limit(self, page, limit, parameter):
        with pytest.raises(InvalidFilterError, match=parameter):
            PageParams.parse(page, limit)

    def test_largest_page_keeps_offset_in_int64(self):
        params = PageParams.parse(str(MAX_PAGE), str(MAX_LIMIT))

        assert params.skip < 2 ** 63


class TestAdminConditions:
    """Test admin search condition building."""

    def test_no_search_no_status(self):
        assert admin_property_conditions() == []
        assert admin_user_conditions() == []

    def test_unknown_status_is_rejected(self):
        with pytest.raises(InvalidFilterError, match="status"):
            admin_property_conditions(status="archived")

    def test_unknown_role_is_rejected(self):
        with pytest.raises(InvalidFilterError, match="role"):
            admin_user_conditions(role="superuser")

    def test_status_is_case_insensitive(self):
        assert len(admin_property_conditions(status="APPROVED")) == 1


class TestGetPage:
    """Test paging against stored rows."""

    @pytest.mark.asyncio
    async def test_twenty_three_records_make_three_pages(self, property_repository: PropertyRepository,
                                                         make_property, test_owner):
        for index in range(23):
            await make_property(test_owner.id, title=f"Listing {index}", price=Decimal("100") + index)

        page = await property_repository.get_page(PageParams(3, 10))

        assert page.total == 23
        assert page.total_pages == 3
        assert page.current_page == 3
        assert len(page.items) == 3

    @pytest.mark.asyncio
    async def test_pages_are_newest_first_and_disjoint(self, property_repository: PropertyRepository,
                                                       make_property, test_owner):
        for index in range(5):
            await make_property(test_owner.id, title=f"Listing {index}")

        first = await property_repository.get_page(PageParams(1, 3))
        second = await property_repository.get_page(PageParams(2, 3))

        first_ids = [p.id for p in first.items]
        second_ids = [p.id for p in second.items]
        assert not set(first_ids) & set(second_ids)
        assert len(first_ids) + len(second_ids) == 5

        created = [p.created_at for p in first.items + second.items]
        assert created == sorted(created, reverse=True)

    @pytest.mark.asyncio
    async def test_search_and_status_combine(self, property_repository: PropertyRepository,
                                             make_property, test_owner):
        await make_property(test_owner.id, title="Sea View", city="Alexandria", approved=True)
        await make_property(test_owner.id, title="Sea Breeze", city="Alexandria", approved=False)
        await make_property(test_owner.id, title="Desert Home", city="Siwa", approved=True)

        conditions = admin_property_conditions(search="alexandria", status="pending")
        page = await property_repository.get_page(PageParams(1, 10), conditions)

        assert page.total == 1
        assert page.items[0].title == "Sea Breeze"

    @pytest.mark.asyncio
    async def test_search_matches_description(self, property_repository: PropertyRepository,
                                              make_property, test_owner):
        await make_property(test_owner.id, title="Plain", description="Has a rooftop pool")
        await make_property(test_owner.id, title="Other", description="Nothing special")

        page = await property_repository.get_page(PageParams(1, 10), admin_property_conditions(search="ROOFTOP"))

        assert [p.title for p in page.items] == ["Plain"]

    @pytest.mark.asyncio
    async def test_user_search_by_role(self, user_repository: UserRepository, make_user):
        await make_user(name="Owner One", role=UserRole.OWNER)
        await make_user(name="Owner Two", role=UserRole.OWNER)
        await make_user(name="Regular", role=UserRole.USER)

        page = await user_repository.get_page(PageParams(1, 10), admin_user_conditions(role="owner"))

        assert page.total == 2
        assert {u.name for u in page.items} == {"Owner One", "Owner Two"}
