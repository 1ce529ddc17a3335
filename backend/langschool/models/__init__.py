from langschool.models.booking import Booking
from langschool.models.review import Review
from langschool.models.tutorial import Tutorial

__all__ = [
    "Tutorial",
    "Booking",
    "Review",
]
