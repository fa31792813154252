from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from models.booking import BookingStatus
from .activity import ActivitySchema


class BookingCreate(BaseModel):
    """Payload for creating a new booking"""
    activity_id: int = Field(..., gt=0, description="ID of the activity to book")
    tickets_number: int = Field(default=1, ge=1, description="Number of tickets to book")


class BookingSchema(BaseModel):
    """Booking as returned by the API. `status` is assigned server side."""
    id: int
    user_id: int
    activity_id: int
    tickets_number: int = Field(..., ge=1)
    status: BookingStatus
    booked_at: Optional[datetime] = None

    activity: Optional[ActivitySchema] = None

    model_config = ConfigDict(from_attributes=True)


class BookingStats(BaseModel):
    """Counts per status, as shown on the profile page"""
    total_bookings: int
    upcoming_bookings: int
    today_bookings: int
    past_bookings: int
    total_tickets: int
