"""MeterReading database model - monthly submeter readings per floor."""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class MeterReading(Base):
    """Start and end counter values of one floor's submeter for one month."""

    __tablename__ = "meter_readings"
    __table_args__ = (UniqueConstraint("month", "floor", name="uq_meter_reading_month_floor"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    month: Mapped[str] = mapped_column(String(7), index=True)  # MM/YYYY
    floor: Mapped[int] = mapped_column(index=True)

    # Cumulative kWh counters at period boundaries
    start_reading: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    end_reading: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))

    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
    )  # Refreshed whenever the month is re-submitted

    @property
    def consumption(self) -> Decimal:
        """kWh consumed during the month."""
        return self.end_reading - self.start_reading
