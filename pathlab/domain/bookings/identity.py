"""Who a booking belongs to: a registered patient or a named guest."""

from dataclasses import dataclass
from typing import Optional, Union

from pathlab.core.exceptions import ValidationError, ForbiddenError


@dataclass(frozen=True)
class IdentifiedPatient:
    patient_id: str


@dataclass(frozen=True)
class Guest:
    name: str


BookingIdentity = Union[IdentifiedPatient, Guest]


def resolve_identity(
    authenticated_patient_id: Optional[str],
    requested_patient_id: Optional[str] = None,
    guest_name: Optional[str] = None,
) -> BookingIdentity:
    """
    A bearer token decides the identity. A patient id in the request body is
    only accepted when it names the authenticated patient.
    """
    if authenticated_patient_id:
        if requested_patient_id and requested_patient_id != authenticated_patient_id:
            raise ForbiddenError("Cannot create a booking for another patient")
        return IdentifiedPatient(authenticated_patient_id)

    if requested_patient_id:
        raise ForbiddenError("Login required to book as a registered patient")
    if not guest_name or not guest_name.strip():
        raise ValidationError("Guest name is required")
    return Guest(guest_name.strip())
