"""FloorAssignment service - which chat user pays for which floor."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.floor_assignment import FloorAssignment
from app.services.meter_reading import check_floor

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    """Strip the chat device suffix and domain from a sender id.

    "51933844567:61@s.whatsapp.net" and "51933844567@s.whatsapp.net" both
    become "51933844567".
    """
    without_device = phone.split(":")[0] or phone
    return without_device.split("@")[0] or without_device


def assign_floor(
    db: Session,
    floor: int,
    phone: str,
    name: str | None = None,
) -> FloorAssignment:
    """Assign a user to a floor, replacing the floor's previous occupant.

    A user is on at most one floor, so any other assignment of the phone is removed.
    """
    check_floor(floor)
    normalized = normalize_phone(phone)

    db.execute(delete(FloorAssignment).where(FloorAssignment.phone == normalized))
    db.execute(delete(FloorAssignment).where(FloorAssignment.floor == floor))
    assignment = FloorAssignment(floor=floor, phone=normalized, name=name)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Assigned %s to floor %s", normalized, floor)
    return assignment


def get_floor_by_phone(db: Session, phone: str) -> int | None:
    """Get the floor assigned to a phone."""
    return db.scalars(
        select(FloorAssignment.floor).where(FloorAssignment.phone == normalize_phone(phone))
    ).first()


def get_all_assignments(db: Session) -> list[FloorAssignment]:
    """Get all floor assignments ordered by floor."""
    return list(db.scalars(select(FloorAssignment).order_by(FloorAssignment.floor)))


def unassign_floor(db: Session, floor: int) -> None:
    """Remove the assignment of a floor."""
    assignment = db.get(FloorAssignment, floor)
    if not assignment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Floor assignment not found",
        )
    db.delete(assignment)
    db.commit()
