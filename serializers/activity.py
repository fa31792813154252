from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from .user import UserResponseSchema


class ActivitySchema(BaseModel):
    """Activity as returned by the API"""
    id: int
    title: str
    description: str = ""
    date_time: datetime = Field(..., description="Naive local date and time of the activity")
    duration_minutes: int = 60
    price: float = Field(..., ge=0)
    max_capacity: int = Field(..., ge=0)
    current_capacity: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: Optional[datetime] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    user: Optional[UserResponseSchema] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityView(BaseModel):
    """Derived, never persisted. Rebuilt on every render."""
    activity: ActivitySchema
    spots_left: int
    max_tickets: int
    is_upcoming: bool
    is_sold_out: bool
