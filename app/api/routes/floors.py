"""Floor assignment routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.floor_assignment import FloorAssignmentCreate, FloorAssignmentResponse
from app.services import floor_assignment as assignment_service

router = APIRouter(prefix="/floors", tags=["floors"])


@router.put("/", response_model=FloorAssignmentResponse)
def assign_floor(
    data: FloorAssignmentCreate,
    db: Session = Depends(get_db),
):
    """Assign a chat user to a floor, replacing its previous occupant."""
    return assignment_service.assign_floor(db, data.floor, data.phone, data.name)


@router.get("/", response_model=list[FloorAssignmentResponse])
def list_assignments(db: Session = Depends(get_db)):
    """List floor assignments."""
    return assignment_service.get_all_assignments(db)


@router.delete("/{floor}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_floor(
    floor: int,
    db: Session = Depends(get_db),
) -> None:
    """Remove a floor's assignment."""
    assignment_service.unassign_floor(db, floor)
