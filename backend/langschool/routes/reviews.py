"""
Review endpoints.

Reads are public; every mutation requires a verified principal and is scoped
to the review's author. Update/delete report how many rows they touched.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from langschool.database import get_session
from langschool.services.identity_service import Principal
from langschool.services.review_store import MutationOutcome, MutationResult, ReviewStore
from langschool.utils.auth_guards import require_principal, require_self

logger = logging.getLogger(__name__)

router = APIRouter()

# Non-owners and missing ids get the same zero-rows answer, so callers cannot
# discover which review ids exist.
CONFLATE_NOT_FOUND_AND_FORBIDDEN = True


class ReviewCreate(BaseModel):
    tutor_id: int
    rating: int = Field(..., ge=1, le=5)
    text: Optional[str] = Field(default=None, max_length=2000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    text: Optional[str] = Field(default=None, max_length=2000)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tutor_id: int
    reviewer_email: str
    reviewer_name: str
    rating: int
    text: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class UpdateResultResponse(BaseModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int
    outcome: Optional[str] = None


class DeleteResultResponse(BaseModel):
    acknowledged: bool = True
    deleted_count: int
    outcome: Optional[str] = None


def get_review_store(session: Session = Depends(get_session)) -> ReviewStore:
    return ReviewStore(session)


def _reported_outcome(result: MutationResult) -> Optional[str]:
    if result.succeeded:
        return MutationOutcome.success.value
    if CONFLATE_NOT_FOUND_AND_FORBIDDEN:
        return None
    return result.outcome.value


@router.get("/reviews/user/{email}", response_model=List[ReviewResponse])
def list_reviews_by_reviewer(
    email: str,
    principal: Principal = Depends(require_principal),
    store: ReviewStore = Depends(get_review_store),
):
    """List the caller's own reviews, newest first"""
    require_self(principal, email)
    return store.list_by_reviewer(email)


@router.get("/reviews/{tutor_id}", response_model=List[ReviewResponse])
def list_reviews_for_tutor(tutor_id: int, store: ReviewStore = Depends(get_review_store)):
    """List reviews for a tutor, newest first"""
    return store.list_by_tutor(tutor_id)


@router.post("/reviews", response_model=ReviewResponse, status_code=201)
def create_review(
    review_data: ReviewCreate,
    principal: Principal = Depends(require_principal),
    store: ReviewStore = Depends(get_review_store),
):
    """Create a review owned by the caller and refresh the tutor's rating"""
    return store.create(principal, review_data.tutor_id, review_data.rating, review_data.text)


@router.put("/reviews/{review_id}", response_model=UpdateResultResponse)
def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    principal: Principal = Depends(require_principal),
    store: ReviewStore = Depends(get_review_store),
):
    """Update a review if the caller wrote it"""
    patch = review_data.model_dump(exclude_unset=True)
    if patch.get("rating") is None:
        patch.pop("rating", None)
    result = store.update(review_id, principal, patch)
    return UpdateResultResponse(
        matched_count=result.rows_affected,
        modified_count=result.rows_affected,
        outcome=_reported_outcome(result),
    )


@router.delete("/reviews/{review_id}", response_model=DeleteResultResponse)
def delete_review(
    review_id: int,
    principal: Principal = Depends(require_principal),
    store: ReviewStore = Depends(get_review_store),
):
    """Delete a review if the caller wrote it"""
    result = store.delete(review_id, principal)
    return DeleteResultResponse(deleted_count=result.rows_affected, outcome=_reported_outcome(result))
