"""
Tests for per-viewer property shaping and image URL handling.
"""

import pytest
import uuid
from decimal import Decimal

from marketplace.config import Settings
from marketplace.models.user import UserRole
from marketplace.services.presenter import PropertyPresenter
from marketplace.utils.auth import ViewerContext
from marketplace.utils.file_utils import AssetStore

CDN_SECRET_KEY = "presenter-secret-key-that-is-at-least-32-chars"


class TestPublicUrl:
    """Test how stored image paths become absolute URLs."""

    @pytest.fixture
    def store(self, settings: Settings) -> AssetStore:
        return AssetStore(settings)

    def test_relative_path_uses_request_base_url(self, store: AssetStore):
        assert store.public_url("/uploads/a.png", "http://test/") == "http://test/uploads/a.png"

    def test_missing_leading_slash_is_added(self, store: AssetStore):
        assert store.public_url("uploads/a.png", "http://test") == "http://test/uploads/a.png"

    @pytest.mark.parametrize("url", [
        "http://images.example.com/a.png",
        "https://images.example.com/b.jpg",
    ])
    def test_absolute_urls_are_unchanged(self, store: AssetStore, url: str):
        assert store.public_url(url, "http://test") == url

    def test_configured_public_base_url_wins(self, tmp_path):
        settings = Settings(
            jwt_secret_key=CDN_SECRET_KEY,
            upload_dir=str(tmp_path),
            public_base_url="https://cdn.example.com/"
        )
        store = AssetStore(settings)

        assert store.public_url("/uploads/a.png", "http://test") == "https://cdn.example.com/uploads/a.png"

    def test_stored_path_maps_to_upload_dir(self, store: AssetStore, settings: Settings):
        path = store.path_for("/uploads/abc.png")

        assert path is not None
        assert path.name == "abc.png"
        assert str(path).startswith(settings.upload_dir)
        assert store.path_for("https://elsewhere.example.com/abc.png") is None


class TestPropertyPresenter:
    """Test response shaping."""

    @pytest.fixture
    def asset_store(self, app) -> AssetStore:
        return app.state.asset_store

    @pytest.mark.asyncio
    async def test_shape_makes_images_absolute_without_mutating(self, asset_store, make_property, test_owner):
        property_obj = await make_property(
            test_owner.id,
            images=["/uploads/one.png", "https://images.example.com/two.jpg"]
        )
        presenter = PropertyPresenter(asset_store, ViewerContext.anonymous(), base_url="http://test/")

        shaped = presenter.shape(property_obj)

        assert shaped.images == ["http://test/uploads/one.png", "https://images.example.com/two.jpg"]
        assert property_obj.images == ["/uploads/one.png", "https://images.example.com/two.jpg"]

    @pytest.mark.asyncio
    async def test_shape_includes_owner_summary(self, asset_store, approved_property, test_owner):
        presenter = PropertyPresenter(asset_store, ViewerContext.anonymous(), base_url="http://test")

        data = presenter.shape(approved_property).model_dump(by_alias=True)

        assert data["owner"] == {"id": test_owner.id, "name": test_owner.name, "email": test_owner.email}
        assert data["type"] == "rent"
        assert data["price"] == 1500.0
        assert data["location"]["city"] == "Cairo"
        assert data["location"]["area"] == "Downtown"
        assert "likedBy" not in data
        assert "liked_by" not in data

    @pytest.mark.asyncio
    async def test_is_liked_depends_on_viewer(self, asset_store, approved_property, test_user, other_user,
                                              like_repository, property_repository, viewer_for):
        property_id = approved_property.id
        await like_repository.add(test_user.id, property_id)
        property_obj = await property_repository.get_property_with_details(property_id)

        liker = PropertyPresenter(asset_store, viewer_for(test_user), base_url="http://test")
        non_liker = PropertyPresenter(asset_store, viewer_for(other_user), base_url="http://test")
        anonymous = PropertyPresenter(asset_store, ViewerContext.anonymous(), base_url="http://test")

        assert liker.shape(property_obj).is_liked is True
        assert non_liker.shape(property_obj).is_liked is False
        assert anonymous.shape(property_obj).is_liked is False

    @pytest.mark.asyncio
    async def test_force_liked(self, asset_store, approved_property):
        viewer = ViewerContext(user_id=uuid.uuid4(), role=UserRole.USER)
        presenter = PropertyPresenter(asset_store, viewer, base_url="http://test")

        assert presenter.shape(approved_property, force_liked=True).is_liked is True
        assert presenter.shape(approved_property).is_liked is False

    @pytest.mark.asyncio
    async def test_coordinates_are_exposed_as_floats(self, asset_store, make_property, test_owner,
                                                     property_repository):
        property_obj = await make_property(test_owner.id)
        await property_repository.update(property_obj, {"latitude": Decimal("30.0444"), "longitude": Decimal("31.2357")})
        property_obj = await property_repository.get_property_with_details(property_obj.id)

        location = PropertyPresenter(asset_store, ViewerContext.anonymous()).location(property_obj)

        assert location.coordinates is not None
        assert location.coordinates.lat == pytest.approx(30.0444)
        assert location.coordinates.lng == pytest.approx(31.2357)

    @pytest.mark.asyncio
    async def test_shape_many_keeps_order(self, asset_store, make_property, test_owner):
        first = await make_property(test_owner.id, title="First")
        second = await make_property(test_owner.id, title="Second")
        presenter = PropertyPresenter(asset_store, ViewerContext.anonymous())

        shaped = presenter.shape_many([second, first])

        assert [p.title for p in shaped] == ["Second", "First"]
