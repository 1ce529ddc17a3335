"""
Recompute stored tutor rating aggregates from the review table.

Heals aggregates left stale when a post-mutation recompute failed. Safe to run
at any time: each recompute is idempotent.

Usage:
    langschool-recompute                 # every tutor with reviews
    langschool-recompute --tutor 3 --tutor 7
"""

import argparse
import logging
import sys

from sqlmodel import Session

from langschool.database import engine, init_db
from langschool.services.rating_aggregator import EMPTY_POLICIES, RatingAggregator
from langschool.services.review_store import ReviewStore

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Recompute tutor rating aggregates")
    parser.add_argument("--tutor", type=int, action="append", dest="tutor_ids", help="Tutor id (repeatable)")
    parser.add_argument("--empty-policy", choices=EMPTY_POLICIES, default=None, help="Override RATING_EMPTY_POLICY")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    init_db()

    with Session(engine) as session:
        store = ReviewStore(session)
        logger.info("Recomputing %s", f"tutors {args.tutor_ids}" if args.tutor_ids else "all reviewed tutors")
        aggregator = RatingAggregator(reviews=store, tutors=store.tutors, empty_policy=args.empty_policy)
        if args.tutor_ids:
            results = aggregator.recompute_many(args.tutor_ids)
        else:
            results = aggregator.recompute_all()

    for aggregate in results:
        print(f"tutor {aggregate.tutor_id}: average={aggregate.average_rating} total={aggregate.total_reviews}")
    print(f"Recomputed {len(results)} tutor(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
