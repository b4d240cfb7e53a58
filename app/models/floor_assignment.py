"""FloorAssignment database model - chat user to floor mapping."""

from datetime import UTC, datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class FloorAssignment(Base):
    """Occupant of a floor, identified by the phone number used in the chat group."""

    __tablename__ = "floor_assignments"

    floor: Mapped[int] = mapped_column(primary_key=True)
    phone: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
