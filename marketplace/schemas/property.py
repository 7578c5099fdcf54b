"""
Pydantic schemas for property requests and responses.
Location data is nested on the wire and flattened into columns on the model.
"""

from pydantic import ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid
from marketplace.schemas.base import CamelModel
from marketplace.schemas.user import UserSummary


class Coordinates(CamelModel):
    """Geographic coordinates."""

    lat: Optional[float] = Field(None, ge=-90, le=90, examples=[30.0444])
    lng: Optional[float] = Field(None, ge=-180, le=180, examples=[31.2357])


class Location(CamelModel):
    """Structured property location."""

    city: Optional[str] = Field(None, max_length=120, examples=["Cairo"])
    area: Optional[str] = Field(None, max_length=120, examples=["Zamalek"])
    address: Optional[str] = Field(None, max_length=255)
    coordinates: Optional[Coordinates] = None


class PropertyCreate(CamelModel):
    """Payload for creating a listing. Ownership comes from the authenticated user."""

    title: str = Field(..., min_length=1, max_length=255, examples=["Sunny 2BR apartment"])
    description: str = Field("", max_length=5000)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, examples=[1500])
    listing_type: Optional[str] = Field(None, alias="type", max_length=50, examples=["rent"])
    property_type: Optional[str] = Field(None, max_length=50, examples=["apartment"])
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=100)
    area: Optional[int] = Field(None, ge=0)
    furnished: bool = False
    location: Location = Field(default_factory=Location)
    images: List[str] = Field(default_factory=list, description="Absolute image URLs")
    amenities: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        """Validate and clean title."""
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    def to_columns(self) -> Dict[str, Any]:
        """Flatten into model column values."""
        columns = self.model_dump(exclude={"location"})
        columns.update(location_columns(self.location))
        return columns


class PropertyUpdate(CamelModel):
    """
    Content update for a listing. Only fields that are sent are changed.
    Ownership and moderation state cannot be set here.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    listing_type: Optional[str] = Field(None, alias="type", max_length=50)
    property_type: Optional[str] = Field(None, max_length=50)
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=100)
    area: Optional[int] = Field(None, ge=0)
    furnished: Optional[bool] = None
    location: Optional[Location] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    status: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Title cannot be empty")
        return v

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the fields that were sent, nulls dropped for required columns."""
        columns = self.model_dump(exclude_unset=True, exclude={"location"})
        for required in ("title", "price", "description", "furnished", "images", "amenities", "status"):
            if required in columns and columns[required] is None:
                del columns[required]
        if self.location is not None:
            columns.update(location_columns(self.location, only_set=True))
        return columns


def to_decimal(value: Optional[float]) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def location_columns(location: Location, only_set: bool = False) -> Dict[str, Any]:
    """Map a nested location onto the flat property columns."""
    data = location.model_dump(exclude_unset=only_set)
    columns: Dict[str, Any] = {}
    if "city" in data:
        columns["city"] = data["city"]
    if "area" in data:
        columns["district"] = data["area"]
    if "address" in data:
        columns["address"] = data["address"]
    if "coordinates" in data:
        coordinates = data["coordinates"] or {}
        columns["latitude"] = to_decimal(coordinates.get("lat"))
        columns["longitude"] = to_decimal(coordinates.get("lng"))
    return columns


class PropertyResponse(CamelModel):
    """
    Property as shown to one viewer.
    Image URLs are absolute and ``isLiked`` reflects that viewer only.
    """

    id: uuid.UUID
    title: str
    description: str
    price: float
    listing_type: Optional[str] = Field(None, alias="type")
    property_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area: Optional[int] = None
    furnished: bool = False
    location: Location
    images: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    approved: bool
    status: str
    featured: bool = False
    owner: Optional[UserSummary] = None
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


class LikeToggleResponse(CamelModel):
    """Result of a like toggle."""

    message: str
    liked: bool


class PropertyLikesResponse(CamelModel):
    """Users who liked a property."""

    count: int
    users: List[UserSummary]


class AdminPropertyListResponse(CamelModel):
    """Paginated property search result for the admin screens."""

    properties: List[PropertyResponse]
    total_pages: int
    current_page: int
    total: int


class DashboardResponse(CamelModel):
    """Admin dashboard totals and recent activity."""

    total_users: int
    total_properties: int
    approved_properties: int
    pending_properties: int
    recent_properties: List[PropertyResponse]
    recent_users: List[UserSummary]
