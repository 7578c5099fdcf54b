"""
Tests for like toggling and the consistency of both sides of the like relationship.
"""

import asyncio
import pytest
import uuid

from marketplace.models.user import UserRole
from marketplace.services.like import LikeService
from marketplace.utils.auth import ViewerContext
from marketplace.utils.exceptions import NotFoundError, PropertyNotFoundError, UnauthorizedError
from marketplace.utils.locks import KeyedLockRegistry


@pytest.fixture
def like_service(db_session, like_locks) -> LikeService:
    return LikeService(db_session, like_locks)


class TestToggleLike:
    """Test toggle semantics."""

    @pytest.mark.asyncio
    async def test_like_updates_both_sides(self, like_service, like_repository, approved_property,
                                           test_user, viewer_for):
        property_id, user_id = approved_property.id, test_user.id

        liked = await like_service.toggle_like(viewer_for(test_user), property_id)

        assert liked is True
        assert user_id in await like_repository.get_liker_ids(property_id)
        assert property_id in await like_repository.get_liked_property_ids(user_id)

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_state(self, like_service, like_repository, approved_property,
                                               test_user, viewer_for):
        property_id, user_id = approved_property.id, test_user.id
        viewer = viewer_for(test_user)

        assert await like_service.toggle_like(viewer, property_id) is True
        assert await like_service.toggle_like(viewer, property_id) is False

        assert user_id not in await like_repository.get_liker_ids(property_id)
        assert property_id not in await like_repository.get_liked_property_ids(user_id)

    @pytest.mark.asyncio
    async def test_likes_from_different_users_are_independent(self, like_service, like_repository,
                                                              approved_property, test_user, other_user,
                                                              viewer_for):
        property_id = approved_property.id

        await like_service.toggle_like(viewer_for(test_user), property_id)
        await like_service.toggle_like(viewer_for(other_user), property_id)
        await like_service.toggle_like(viewer_for(test_user), property_id)

        assert await like_repository.get_liker_ids(property_id) == {other_user.id}

    @pytest.mark.asyncio
    async def test_concurrent_toggles_never_duplicate(self, db_session, like_locks, like_repository,
                                                      approved_property, test_user, viewer_for):
        property_id, user_id = approved_property.id, test_user.id
        viewer = viewer_for(test_user)
        services = [LikeService(db_session, like_locks) for _ in range(2)]

        results = await asyncio.gather(*(service.toggle_like(viewer, property_id) for service in services))

        assert sorted(results) == [False, True]
        assert await like_repository.count_for_pair(user_id, property_id) == 0
        assert len(like_locks) == 0

    @pytest.mark.asyncio
    async def test_odd_number_of_concurrent_toggles_leaves_one_like(self, db_session, like_locks,
                                                                    like_repository, approved_property,
                                                                    test_user, viewer_for):
        property_id, user_id = approved_property.id, test_user.id
        viewer = viewer_for(test_user)

        await asyncio.gather(*(
            LikeService(db_session, like_locks).toggle_like(viewer, property_id) for _ in range(3)
        ))

        assert await like_repository.count_for_pair(user_id, property_id) == 1

    @pytest.mark.asyncio
    async def test_owner_can_like_own_pending_property(self, like_service, pending_property,
                                                       test_owner, viewer_for):
        assert await like_service.toggle_like(viewer_for(test_owner), pending_property.id) is True

    @pytest.mark.asyncio
    async def test_hidden_property_is_not_found(self, like_service, like_repository, pending_property,
                                                test_user, viewer_for):
        property_id = pending_property.id

        with pytest.raises(PropertyNotFoundError):
            await like_service.toggle_like(viewer_for(test_user), property_id)

        assert await like_repository.get_liker_ids(property_id) == set()

    @pytest.mark.asyncio
    async def test_missing_property_is_not_found(self, like_service, test_user, viewer_for):
        with pytest.raises(PropertyNotFoundError):
            await like_service.toggle_like(viewer_for(test_user), uuid.uuid4())

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self, like_service, approved_property):
        viewer = ViewerContext(user_id=uuid.uuid4(), role=UserRole.USER)

        with pytest.raises(NotFoundError):
            await like_service.toggle_like(viewer, approved_property.id)

    @pytest.mark.asyncio
    async def test_anonymous_viewer_is_rejected(self, like_service, approved_property):
        with pytest.raises(UnauthorizedError):
            await like_service.toggle_like(ViewerContext.anonymous(), approved_property.id)


class TestSetLike:
    """Test idempotent like/unlike."""

    @pytest.mark.asyncio
    async def test_set_like_is_idempotent(self, like_service, like_repository, approved_property,
                                          test_user, viewer_for):
        property_id, user_id = approved_property.id, test_user.id
        viewer = viewer_for(test_user)

        assert await like_service.set_like(viewer, property_id, True) is True
        assert await like_service.set_like(viewer, property_id, True) is False
        assert await like_repository.count_for_pair(user_id, property_id) == 1

        assert await like_service.set_like(viewer, property_id, False) is True
        assert await like_service.set_like(viewer, property_id, False) is False
        assert await like_repository.count_for_pair(user_id, property_id) == 0


class TestGetLikers:
    """Test the likers listing."""

    @pytest.mark.asyncio
    async def test_likers_in_like_order(self, like_service, approved_property, test_user, other_user,
                                        viewer_for):
        property_id = approved_property.id
        first_id, second_id = other_user.id, test_user.id

        await like_service.toggle_like(viewer_for(other_user), property_id)
        await like_service.toggle_like(viewer_for(test_user), property_id)

        likers = await like_service.get_likers(property_id)

        assert [user.id for user in likers] == [first_id, second_id]

    @pytest.mark.asyncio
    async def test_likers_of_missing_property(self, like_service):
        with pytest.raises(PropertyNotFoundError):
            await like_service.get_likers(uuid.uuid4())


class TestLikeRepository:
    """Test set semantics at the storage layer."""

    @pytest.mark.asyncio
    async def test_add_twice_keeps_one_row(self, like_repository, approved_property, test_user):
        property_id, user_id = approved_property.id, test_user.id

        assert await like_repository.add(user_id, property_id) is True
        assert await like_repository.add(user_id, property_id) is False
        assert await like_repository.count_for_pair(user_id, property_id) == 1

    @pytest.mark.asyncio
    async def test_add_for_missing_property_is_not_found(self, like_repository, test_user):
        user_id = test_user.id

        with pytest.raises(PropertyNotFoundError):
            await like_repository.add(user_id, uuid.uuid4())

        assert await like_repository.get_liked_property_ids(user_id) == set()

    @pytest.mark.asyncio
    async def test_add_for_missing_user_is_not_found(self, like_repository, approved_property):
        property_id = approved_property.id

        with pytest.raises(NotFoundError) as exc_info:
            await like_repository.add(uuid.uuid4(), property_id)

        assert not isinstance(exc_info.value, PropertyNotFoundError)
        assert await like_repository.get_liker_ids(property_id) == set()

    @pytest.mark.asyncio
    async def test_remove_absent_pair(self, like_repository, approved_property, test_user):
        assert await like_repository.remove(test_user.id, approved_property.id) is False

    @pytest.mark.asyncio
    async def test_deleting_property_removes_its_likes(self, like_repository, property_repository,
                                                       approved_property, test_user):
        property_id, user_id = approved_property.id, test_user.id
        await like_repository.add(user_id, property_id)

        assert await property_repository.delete(property_id) is True

        assert await like_repository.get_liked_property_ids(user_id) == set()


class TestKeyedLockRegistry:
    """Test per-key serialization."""

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        registry = KeyedLockRegistry()
        events = []

        async def worker(name: str):
            async with registry.hold("pair"):
                events.append(f"{name}-start")
                await asyncio.sleep(0)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-start", "a-end", "b-start", "b-end"]
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self):
        registry = KeyedLockRegistry()
        events = []

        async def worker(key: str):
            async with registry.hold(key):
                events.append(f"{key}-start")
                await asyncio.sleep(0)
                events.append(f"{key}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events[:2] == ["a-start", "b-start"]
