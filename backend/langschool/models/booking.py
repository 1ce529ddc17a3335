from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from langschool.models.tutorial import Tutorial


class Booking(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tutorial_id: int = Field(foreign_key="tutorial.id", index=True)
    email: str = Field(index=True)  # Learner who booked
    tutor_email: Optional[str] = None
    language: Optional[str] = None
    price: Optional[float] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    tutorial: "Tutorial" = Relationship(back_populates="bookings")
