from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from langschool.models.booking import Booking
    from langschool.models.review import Review


class Tutorial(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True)  # Owning tutor's verified email
    tutor_name: str
    language: str = Field(index=True)
    price: float = Field(default=0.0)
    description: Optional[str] = None
    image: Optional[str] = None
    review: int = Field(default=0)  # Legacy counter bumped by PATCH /tutorials/{id}/review

    # Derived from the tutor's reviews; written only by RatingAggregator
    average_rating: Optional[float] = Field(default=None)
    total_reviews: int = Field(default=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column_kwargs={"onupdate": lambda: datetime.now(timezone.utc)},
    )

    # Relationships
    reviews: List["Review"] = Relationship(
        back_populates="tutorial", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    bookings: List["Booking"] = Relationship(
        back_populates="tutorial", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
