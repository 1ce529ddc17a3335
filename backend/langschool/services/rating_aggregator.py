"""
Rating aggregation.

Recomputes a tutor's ``average_rating`` / ``total_reviews`` from the full
current review set. Every review mutation funnels through ``recompute`` so
there is a single derivation of the aggregate. The recompute is a plain
read-then-write and is idempotent: running it again after quiescence always
converges to the exact mean and count.
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

EMPTY_POLICY_KEEP = "keep"
EMPTY_POLICY_RESET = "reset"
EMPTY_POLICIES = (EMPTY_POLICY_KEEP, EMPTY_POLICY_RESET)


class ReviewSetReader(Protocol):
    def ratings_for_tutor(self, tutor_id: int) -> List[int]: ...

    def reviewed_tutor_ids(self) -> List[int]: ...


class TutorAggregateWriter(Protocol):
    def write_aggregate(self, tutor_id: int, average_rating: Optional[float], total_reviews: int) -> int: ...


@dataclass(frozen=True)
class RatingAggregate:
    tutor_id: int
    average_rating: Optional[float]
    total_reviews: int


def round_half_up_tenths(total: int, count: int) -> float:
    """
    Mean of integer ratings rounded to one decimal, halves rounded up.

    Works on the integer sum so 4.45-style midpoints are exact instead of
    depending on binary float representation.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    scaled = (2 * total * 10 + count) // (2 * count)
    return scaled / 10


def compute_aggregate(tutor_id: int, ratings: Sequence[int]) -> Optional[RatingAggregate]:
    """Aggregate for a non-empty rating set, None when there are no ratings."""
    if not ratings:
        return None
    return RatingAggregate(
        tutor_id=tutor_id,
        average_rating=round_half_up_tenths(sum(ratings), len(ratings)),
        total_reviews=len(ratings),
    )


def empty_policy_from_env() -> str:
    policy = os.getenv("RATING_EMPTY_POLICY", EMPTY_POLICY_KEEP).strip().lower()
    if policy not in EMPTY_POLICIES:
        logger.warning("Unknown RATING_EMPTY_POLICY %r, falling back to %r", policy, EMPTY_POLICY_KEEP)
        return EMPTY_POLICY_KEEP
    return policy


class RatingAggregator:
    """
    Stateless recompute service.

    Args:
        reviews: reads the current rating set of a tutor
        tutors: writes the aggregate onto the tutor record
        empty_policy: what to do when a tutor has no reviews left.
            ``keep`` leaves the previously stored aggregate untouched,
            ``reset`` writes ``average_rating=None, total_reviews=0``.
    """

    def __init__(self, reviews: ReviewSetReader, tutors: TutorAggregateWriter, empty_policy: Optional[str] = None):
        self.reviews = reviews
        self.tutors = tutors
        self.empty_policy = empty_policy or empty_policy_from_env()
        if self.empty_policy not in EMPTY_POLICIES:
            raise ValueError(f"empty_policy must be one of {EMPTY_POLICIES}, got {self.empty_policy!r}")

    def recompute(self, tutor_id: int) -> Optional[RatingAggregate]:
        """
        Recompute and store the aggregate for one tutor.

        Returns:
            The aggregate written, or None when the write was skipped
        """
        ratings = self.reviews.ratings_for_tutor(tutor_id)
        aggregate = compute_aggregate(tutor_id, ratings)

        if aggregate is None:
            if self.empty_policy == EMPTY_POLICY_KEEP:
                logger.debug("Aggregation skipped for tutor %d: no reviews, stored aggregate kept", tutor_id)
                return None
            aggregate = RatingAggregate(tutor_id=tutor_id, average_rating=None, total_reviews=0)

        written = self.tutors.write_aggregate(tutor_id, aggregate.average_rating, aggregate.total_reviews)
        if not written:
            logger.warning("Aggregate for tutor %d not written: tutorial not found", tutor_id)
            return None

        logger.info(
            "Recomputed rating for tutor %d: average=%s total=%d",
            tutor_id,
            aggregate.average_rating,
            aggregate.total_reviews,
        )
        return aggregate

    def recompute_many(self, tutor_ids: Iterable[int]) -> List[RatingAggregate]:
        results = []
        for tutor_id in tutor_ids:
            aggregate = self.recompute(tutor_id)
            if aggregate is not None:
                results.append(aggregate)
        return results

    def recompute_all(self) -> List[RatingAggregate]:
        """Recompute every tutor that currently has reviews."""
        return self.recompute_many(self.reviews.reviewed_tutor_ids())
