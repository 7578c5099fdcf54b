"""
Property model for marketplace listings.
Handles listing data with structured location, moderation state and ownership.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, JSON, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from marketplace.database import Base
from decimal import Decimal
import uuid
from typing import List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from marketplace.models.user import User
    from marketplace.models.like import PropertyLike


DEFAULT_PROPERTY_STATUS = "pending"


class Property(Base):
    """
    Property model for listings.
    Listings are created unapproved and become publicly visible once an admin approves them.
    """

    __tablename__ = "properties"

    # Basic property information
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Detailed property description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Property price in local currency"
    )

    listing_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Listing type - sale or rent"
    )

    property_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Kind of property - apartment, house, ..."
    )

    # Property specifications
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    area: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment="Surface area")
    furnished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Location information
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    district: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    latitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=10, scale=8), nullable=True)
    longitude: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=11, scale=8), nullable=True)

    # Media and extras
    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Stored image paths or absolute URLs"
    )
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Moderation and lifecycle
    approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Whether an admin approved the listing for public visibility"
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_PROPERTY_STATUS,
        comment="Free-form lifecycle status"
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who listed this property"
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="properties",
        lazy="selectin"
    )

    liked_by: Mapped[List["User"]] = relationship(
        "User",
        secondary="property_likes",
        viewonly=True,
        lazy="selectin"
    )

    likes: Mapped[List["PropertyLike"]] = relationship(
        "PropertyLike",
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    @validates("owner_id")
    def validate_owner_id(self, key, value):
        """Owner is fixed once assigned."""
        current = self.__dict__.get("owner_id")
        if current is not None and value != current:
            raise ValueError("Property owner cannot be changed")
        return value

    @property
    def liker_ids(self) -> Set[uuid.UUID]:
        """IDs of users who liked this property."""
        return {user.id for user in self.liked_by}

    def is_visible_to(self, user_id: Optional[uuid.UUID], is_admin: bool = False) -> bool:
        """
        Check whether a viewer may see this property.

        Args:
            user_id: Viewer's user ID, None for anonymous viewers
            is_admin: Whether the viewer is an administrator

        Returns:
            True if the property is approved, owned by the viewer, or the viewer is an admin
        """
        if self.approved or is_admin:
            return True
        return user_id is not None and user_id == self.owner_id


# Composite index for the public listing query (approved, newest first)
approved_created_index = Index(
    'idx_properties_approved_created',
    Property.approved,
    Property.created_at.desc()
)

# Composite index for city searches with price filtering
city_price_index = Index(
    'idx_properties_city_price',
    Property.city,
    Property.price,
    Property.approved
)

# Composite index for owner's properties
owner_created_index = Index(
    'idx_properties_owner_created',
    Property.owner_id,
    Property.created_at.desc()
)
