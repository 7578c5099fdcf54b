"""
Response shaping for properties.
Builds per-viewer projections without touching the loaded entities.
"""

from typing import Iterable, List, Optional
from marketplace.models.property import Property
from marketplace.schemas.property import Coordinates, Location, PropertyResponse
from marketplace.schemas.user import UserSummary
from marketplace.utils.auth import ViewerContext
from marketplace.utils.file_utils import AssetStore


class PropertyPresenter:
    """
    Shapes properties for one request.

    Args:
        asset_store: Store used to make image paths absolute
        viewer: Current viewer, decides ``isLiked``
        base_url: Request base URL used when no public base URL is configured
    """

    def __init__(self, asset_store: AssetStore, viewer: ViewerContext, base_url: Optional[str] = None):
        self.asset_store = asset_store
        self.viewer = viewer
        self.base_url = base_url

    def is_liked(self, property_obj: Property) -> bool:
        if self.viewer.is_anonymous:
            return False
        return self.viewer.user_id in property_obj.liker_ids

    def location(self, property_obj: Property) -> Location:
        coordinates = None
        if property_obj.latitude is not None or property_obj.longitude is not None:
            coordinates = Coordinates(
                lat=float(property_obj.latitude) if property_obj.latitude is not None else None,
                lng=float(property_obj.longitude) if property_obj.longitude is not None else None,
            )
        return Location(
            city=property_obj.city,
            area=property_obj.district,
            address=property_obj.address,
            coordinates=coordinates,
        )

    def shape(self, property_obj: Property, force_liked: bool = False) -> PropertyResponse:
        """
        Project one property.

        Args:
            property_obj: Property with owner and likers loaded
            force_liked: Report ``isLiked`` as true, for the viewer's liked list

        Returns:
            Response model; ``likedBy`` is never part of it
        """
        owner = property_obj.owner
        return PropertyResponse(
            id=property_obj.id,
            title=property_obj.title,
            description=property_obj.description or "",
            price=float(property_obj.price),
            listing_type=property_obj.listing_type,
            property_type=property_obj.property_type,
            bedrooms=property_obj.bedrooms,
            bathrooms=property_obj.bathrooms,
            area=property_obj.area,
            furnished=bool(property_obj.furnished),
            location=self.location(property_obj),
            images=[self.asset_store.public_url(path, self.base_url) for path in property_obj.images or []],
            amenities=list(property_obj.amenities or []),
            approved=property_obj.approved,
            status=property_obj.status,
            featured=property_obj.featured,
            owner=UserSummary.model_validate(owner) if owner is not None else None,
            is_liked=True if force_liked else self.is_liked(property_obj),
            created_at=property_obj.created_at,
            updated_at=property_obj.updated_at,
        )

    def shape_many(self, properties: Iterable[Property], force_liked: bool = False) -> List[PropertyResponse]:
        return [self.shape(property_obj, force_liked) for property_obj in properties]
