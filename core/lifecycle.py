from datetime import datetime
from typing import Iterable, List, Optional

from models.booking import BookingStatus
from serializers.activity import ActivitySchema
from serializers.booking import BookingSchema, BookingStats
from serializers.user import CurrentUser


def is_upcoming(date_time: datetime, now: Optional[datetime] = None) -> bool:
    """True while the activity has not started. Never cache the result."""
    return date_time > (now or datetime.now())


def classify(date_time: datetime, now: Optional[datetime] = None) -> BookingStatus:
    """
    Display classification of a timestamp relative to `now`.

    Anything that has started is past; a later time on the same calendar day is
    today. Booking statuses come from the API and are never replaced by this.
    """
    now = now or datetime.now()
    if date_time <= now:
        return BookingStatus.PAST
    if date_time.date() == now.date():
        return BookingStatus.TODAY
    return BookingStatus.UPCOMING


def can_cancel(
    booking: BookingSchema,
    activity: Optional[ActivitySchema],
    user: Optional[CurrentUser],
    now: Optional[datetime] = None,
) -> bool:
    """
    A booking can be cancelled only when the stored status and a fresh time
    check both say the activity has not happened yet, and the user owns the
    booking or is an admin.
    """
    if user is None or activity is None:
        return False
    if booking.status == BookingStatus.PAST:
        return False
    if not is_upcoming(activity.date_time, now):
        return False
    return user.is_admin or booking.user_id == user.id


def filter_bookings(bookings: Iterable[BookingSchema], status: str = "all") -> List[BookingSchema]:
    if status == "all":
        return list(bookings)
    wanted = BookingStatus(status)
    return [b for b in bookings if b.status == wanted]


def booking_stats(bookings: Iterable[BookingSchema]) -> BookingStats:
    bookings = list(bookings)
    return BookingStats(
        total_bookings=len(bookings),
        upcoming_bookings=sum(1 for b in bookings if b.status == BookingStatus.UPCOMING),
        today_bookings=sum(1 for b in bookings if b.status == BookingStatus.TODAY),
        past_bookings=sum(1 for b in bookings if b.status == BookingStatus.PAST),
        total_tickets=sum(b.tickets_number for b in bookings),
    )
