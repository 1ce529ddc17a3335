"""Tutorial endpoints: a tutor's offering, plus the record that carries its rating."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from langschool.database import get_session
from langschool.errors import Forbidden, NotFound, StoreError
from langschool.models.tutorial import Tutorial
from langschool.services.identity_service import Principal
from langschool.utils.auth_guards import require_principal

logger = logging.getLogger(__name__)

router = APIRouter()


class TutorialCreate(BaseModel):
    tutor_name: str
    language: str
    price: float = Field(default=0.0, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None

    @field_validator("language")
    @classmethod
    def validate_language(cls, v):
        if not v or not v.strip():
            raise ValueError("language is required")
        return v.strip()


class TutorialUpdate(BaseModel):
    # average_rating / total_reviews are derived and deliberately absent
    tutor_name: Optional[str] = None
    language: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None


class TutorialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    tutor_name: str
    language: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None
    review: int
    average_rating: Optional[float] = None
    total_reviews: int
    created_at: datetime
    updated_at: datetime


def _get_tutorial_or_404(session: Session, tutorial_id: int) -> Tutorial:
    tutorial = session.get(Tutorial, tutorial_id)
    if not tutorial:
        raise NotFound("tutorial not found")
    return tutorial


def _get_owned_tutorial(session: Session, tutorial_id: int, principal: Principal) -> Tutorial:
    tutorial = _get_tutorial_or_404(session, tutorial_id)
    if tutorial.email != principal.email:
        raise Forbidden()
    return tutorial


def _commit(session: Session, action: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to %s", action)
        raise StoreError() from e


@router.get("/tutorials", response_model=List[TutorialResponse])
def list_tutorials(email: Optional[str] = Query(default=None), session: Session = Depends(get_session)):
    """List all tutorials, optionally only those owned by ``email``"""
    statement = select(Tutorial)
    if email:
        statement = statement.where(Tutorial.email == email)
    return session.exec(statement.order_by(Tutorial.id)).all()


@router.get("/tutorials/category/{language}", response_model=List[TutorialResponse])
def list_tutorials_by_language(language: str, session: Session = Depends(get_session)):
    """List tutorials teaching ``language``"""
    return session.exec(select(Tutorial).where(Tutorial.language == language).order_by(Tutorial.id)).all()


@router.get("/tutorials/{tutorial_id}", response_model=TutorialResponse)
def get_tutorial(
    tutorial_id: int,
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """Get a tutorial by ID"""
    return _get_tutorial_or_404(session, tutorial_id)


@router.post("/tutorials", response_model=TutorialResponse, status_code=201)
def create_tutorial(
    tutorial_data: TutorialCreate,
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """Create a tutorial owned by the caller"""
    tutorial = Tutorial(**tutorial_data.model_dump(), email=principal.email)
    session.add(tutorial)
    _commit(session, "create tutorial")
    session.refresh(tutorial)
    return tutorial


@router.put("/tutorials/{tutorial_id}", response_model=TutorialResponse)
def update_tutorial(
    tutorial_id: int,
    tutorial_data: TutorialUpdate,
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """Update a tutorial the caller owns"""
    tutorial = _get_owned_tutorial(session, tutorial_id, principal)

    update_data = tutorial_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(tutorial, field, value)

    tutorial.updated_at = datetime.now(timezone.utc)
    session.add(tutorial)
    _commit(session, f"update tutorial {tutorial_id}")
    session.refresh(tutorial)
    return tutorial


@router.patch("/tutorials/{tutorial_id}/review", response_model=TutorialResponse)
def increment_review_counter(tutorial_id: int, session: Session = Depends(get_session)):
    """Bump the legacy review counter on a tutorial"""
    tutorial = _get_tutorial_or_404(session, tutorial_id)
    tutorial.review = (tutorial.review or 0) + 1
    session.add(tutorial)
    _commit(session, f"increment review counter on tutorial {tutorial_id}")
    session.refresh(tutorial)
    return tutorial


@router.delete("/tutorials/{tutorial_id}", status_code=204)
def delete_tutorial(
    tutorial_id: int,
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """Delete a tutorial the caller owns, along with its reviews and bookings"""
    tutorial = _get_owned_tutorial(session, tutorial_id, principal)
    session.delete(tutorial)
    _commit(session, f"delete tutorial {tutorial_id}")
    return None
