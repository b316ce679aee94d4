# Bookings domain module
from pathlab.domain.bookings.identity import BookingIdentity, IdentifiedPatient, Guest
from pathlab.domain.bookings.models import (
    Booking,
    BookingStatus,
    PaymentStatus,
    PaymentMethod,
    CollectionType,
)

__all__ = [
    "BookingIdentity",
    "IdentifiedPatient",
    "Guest",
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "PaymentMethod",
    "CollectionType",
]
