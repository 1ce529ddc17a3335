"""Accessor for the tutorial record that carries a tutor's rating aggregate."""

from typing import Optional

from sqlmodel import Session

from langschool.models.tutorial import Tutorial


class TutorRecordAccessor:
    """Update-by-id access to the derived rating fields of a Tutorial."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, tutor_id: int) -> Optional[Tutorial]:
        return self.session.get(Tutorial, tutor_id)

    def exists(self, tutor_id: int) -> bool:
        return self.get(tutor_id) is not None

    def write_aggregate(self, tutor_id: int, average_rating: Optional[float], total_reviews: int) -> int:
        """
        Store the aggregate on the tutorial and commit.

        Returns:
            Rows affected (0 when the tutorial no longer exists)
        """
        tutorial = self.get(tutor_id)
        if tutorial is None:
            return 0
        tutorial.average_rating = average_rating
        tutorial.total_reviews = total_reviews
        self.session.add(tutorial)
        self.session.commit()
        return 1
