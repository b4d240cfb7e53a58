"""FloorAssignment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class FloorAssignmentCreate(BaseModel):
    """Schema for assigning a chat user to a floor."""

    floor: int = Field(ge=1)
    phone: str = Field(min_length=1)
    name: str | None = None


class FloorAssignmentResponse(BaseModel):
    """Schema for floor assignment response."""

    floor: int
    phone: str
    name: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
