"""Booking endpoints: a learner reserving a tutorial."""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from langschool.database import get_session
from langschool.errors import NotFound, StoreError
from langschool.models.booking import Booking
from langschool.models.tutorial import Tutorial
from langschool.services.identity_service import Principal
from langschool.utils.auth_guards import require_principal, require_self

logger = logging.getLogger(__name__)

router = APIRouter()


class BookingCreate(BaseModel):
    tutorial_id: int


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tutorial_id: int
    email: str
    tutor_email: Optional[str] = None
    language: Optional[str] = None
    price: Optional[float] = None
    created_at: datetime


@router.post("/bookings", response_model=BookingResponse, status_code=201)
def create_booking(
    booking_data: BookingCreate,
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """Book a tutorial for the caller, snapshotting tutor/language/price"""
    tutorial = session.get(Tutorial, booking_data.tutorial_id)
    if not tutorial:
        raise NotFound("tutorial not found")

    booking = Booking(
        tutorial_id=tutorial.id,
        email=principal.email,
        tutor_email=tutorial.email,
        language=tutorial.language,
        price=tutorial.price,
    )
    try:
        session.add(booking)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to book tutorial %d", booking_data.tutorial_id)
        raise StoreError() from e
    session.refresh(booking)
    return booking


@router.get("/bookings", response_model=List[BookingResponse])
def list_bookings(
    email: Optional[str] = Query(default=None),
    principal: Principal = Depends(require_principal),
    session: Session = Depends(get_session),
):
    """List the caller's bookings"""
    if email:
        require_self(principal, email)
    return session.exec(
        select(Booking).where(Booking.email == principal.email).order_by(Booking.created_at.desc(), Booking.id.desc())
    ).all()
