"""
Review store.

Persists reviews and enforces ownership: a review can only be changed or
removed by the principal whose email was stamped on it at creation. Every
successful create/update/delete is followed by a rating recompute for the
affected tutor via ``_recompute_after_mutation``.

The primary mutation and the recompute are separate commits. If the recompute
fails the mutation stays committed and the stale aggregate is healed by the
next successful mutation for that tutor (or ``langschool-recompute``).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from langschool.errors import NotFound, StoreError
from langschool.models.review import Review
from langschool.services.identity_service import Principal
from langschool.services.rating_aggregator import RatingAggregate, RatingAggregator
from langschool.services.tutor_records import TutorRecordAccessor

logger = logging.getLogger(__name__)

# Fields a review owner may change. Everything else (id, tutor_id,
# reviewer_email, reviewer_name, timestamps) is fixed once written.
PATCHABLE_FIELDS = ("rating", "text")


class MutationOutcome(str, Enum):
    success = "success"
    not_found = "not_found"
    forbidden = "forbidden"


@dataclass
class MutationResult:
    outcome: MutationOutcome
    review: Optional[Review] = None
    aggregate: Optional[RatingAggregate] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == MutationOutcome.success

    @property
    def rows_affected(self) -> int:
        return 1 if self.succeeded else 0


def _sort_newest_first(statement):
    return statement.order_by(Review.created_at.desc(), Review.id.desc())


class ReviewStore:
    def __init__(self, session: Session, aggregator: Optional[RatingAggregator] = None):
        self.session = session
        self.tutors = TutorRecordAccessor(session)
        self.aggregator = aggregator or RatingAggregator(reviews=self, tutors=self.tutors)

    # ── Reads ──────────────────────────────────────────────────────────

    def get(self, review_id: int) -> Optional[Review]:
        try:
            return self.session.get(Review, review_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to load review %d", review_id)
            raise StoreError() from e

    def list_by_tutor(self, tutor_id: int) -> List[Review]:
        """Reviews for a tutor, newest first."""
        try:
            return list(self.session.exec(_sort_newest_first(select(Review).where(Review.tutor_id == tutor_id))).all())
        except SQLAlchemyError as e:
            logger.exception("Failed to list reviews for tutor %d", tutor_id)
            raise StoreError() from e

    def list_by_reviewer(self, email: str) -> List[Review]:
        """Reviews written by ``email``, newest first. Callers gate on the principal."""
        try:
            return list(
                self.session.exec(_sort_newest_first(select(Review).where(Review.reviewer_email == email))).all()
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to list reviews for reviewer %s", email)
            raise StoreError() from e

    def ratings_for_tutor(self, tutor_id: int) -> List[int]:
        return list(self.session.exec(select(Review.rating).where(Review.tutor_id == tutor_id)).all())

    def reviewed_tutor_ids(self) -> List[int]:
        return list(self.session.exec(select(Review.tutor_id).distinct().order_by(Review.tutor_id)).all())

    # ── Mutations ──────────────────────────────────────────────────────

    def create(self, principal: Principal, tutor_id: int, rating: int, text: Optional[str] = None) -> Review:
        """
        Store a review owned by ``principal`` and recompute the tutor's rating.

        Raises:
            NotFound: the tutorial does not exist
            StoreError: the insert failed (nothing was written)
        """
        if not self.tutors.exists(tutor_id):
            raise NotFound("tutorial not found")

        review = Review(
            tutor_id=tutor_id,
            rating=rating,
            text=text,
            reviewer_email=principal.email,
            reviewer_name=principal.display_name,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.session.add(review)
            self.session.commit()
            self.session.refresh(review)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to create review for tutor %d", tutor_id)
            raise StoreError() from e

        self._recompute_after_mutation(tutor_id)
        return review

    def _load_owned(self, review_id: int, principal: Principal):
        """Two-step check: existence, then ownership."""
        review = self.get(review_id)
        if review is None:
            return MutationOutcome.not_found, None
        if review.reviewer_email != principal.email:
            return MutationOutcome.forbidden, review
        return MutationOutcome.success, review

    def update(self, review_id: int, principal: Principal, patch: Dict[str, Any]) -> MutationResult:
        """
        Apply ``patch`` to a review the principal owns.

        Keys outside PATCHABLE_FIELDS are ignored, so ownership and the
        tutor reference can never be rewritten through an update.
        """
        outcome, review = self._load_owned(review_id, principal)
        if outcome != MutationOutcome.success:
            logger.info("Review %d update refused for %s: %s", review_id, principal.email, outcome.value)
            return MutationResult(outcome=outcome)

        for field in PATCHABLE_FIELDS:
            if field in patch:
                setattr(review, field, patch[field])
        review.updated_at = datetime.now(timezone.utc)

        try:
            self.session.add(review)
            self.session.commit()
            self.session.refresh(review)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to update review %d", review_id)
            raise StoreError() from e

        aggregate = self._recompute_after_mutation(review.tutor_id)
        return MutationResult(outcome=outcome, review=review, aggregate=aggregate)

    def delete(self, review_id: int, principal: Principal) -> MutationResult:
        outcome, review = self._load_owned(review_id, principal)
        if outcome != MutationOutcome.success:
            logger.info("Review %d delete refused for %s: %s", review_id, principal.email, outcome.value)
            return MutationResult(outcome=outcome)

        tutor_id = review.tutor_id
        try:
            self.session.delete(review)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to delete review %d", review_id)
            raise StoreError() from e

        aggregate = self._recompute_after_mutation(tutor_id)
        return MutationResult(outcome=outcome, aggregate=aggregate)

    def _recompute_after_mutation(self, tutor_id: int) -> Optional[RatingAggregate]:
        """Recompute without failing the already-committed mutation."""
        try:
            return self.aggregator.recompute(tutor_id)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Error updating tutor rating for tutor %d; aggregate left stale", tutor_id)
            return None
