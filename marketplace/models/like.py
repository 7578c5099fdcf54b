"""
Like relationship between users and properties.
A single row per (user, property) pair backs both User.liked_properties and Property.liked_by.
"""

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marketplace.models.property import Property
    from marketplace.models.user import User


class PropertyLike(Base):
    """A user's like on a property. At most one row exists per pair."""

    __tablename__ = "property_likes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_property_likes_user_property"),
    )

    property: Mapped["Property"] = relationship("Property", back_populates="likes", lazy="noload")
    user: Mapped["User"] = relationship("User", lazy="noload")

    def __repr__(self) -> str:
        return f"<PropertyLike(user_id={self.user_id}, property_id={self.property_id})>"
