from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from langschool.models.tutorial import Tutorial


class Review(SQLModel, table=True):
    """Learner feedback on a tutor.

    ``reviewer_email`` is stamped from the verified principal at creation and
    never changes afterwards; ``tutor_id`` is likewise fixed.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    tutor_id: int = Field(foreign_key="tutorial.id", index=True)
    reviewer_email: str = Field(index=True)
    reviewer_name: str
    rating: int  # 1-5 inclusive
    text: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: Optional[datetime] = Field(default=None)  # Null until the first successful update

    tutorial: "Tutorial" = Relationship(back_populates="reviews")
